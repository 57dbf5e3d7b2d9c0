"""
Configuration loading.

Purpose: Load YAML settings presets and room definitions.

Inputs:
    - config/default.yaml (base settings)
    - config/<preset>.yaml (optional overrides)
    - config/rooms/<name>.yaml (room definitions)

Outputs:
    - Settings dictionary
    - Room objects populated with items and characters

Params:
    config_dir: Path - Directory holding the YAML files
"""

import copy
from pathlib import Path
from typing import Dict, Optional

import yaml

from adventure.actors import Character, Item
from adventure.room import Room, RoomConfigError

CONFIG_DIR = Path(__file__).resolve().parent.parent / "config"

DEFAULT_SETTINGS = {
    "sim": {
        "window_width": 800,
        "window_height": 600,
        "fps": 60,
        "default_size": [800, 600],
    },
    "planner": {
        "step_size": 100,
        "max_expansions": None,
    },
    "player": {
        "width": 40,
        "height": 80,
        "speed": 200.0,
        "start": [400, 500],
    },
    "logging": {
        "level": "INFO",
        "log_dir": "data/logs",
    },
    "start_room": "hallway",
}


def _merge(base: Dict, override: Dict) -> Dict:
    """Recursively merge override into a copy of base."""
    merged = copy.deepcopy(base)
    for key, value in (override or {}).items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def _read_yaml(path: Path) -> Dict:
    with open(path, "r") as f:
        data = yaml.safe_load(f)
    return data or {}


def load_settings(preset: str = "default", config_dir: Optional[Path] = None) -> Dict:
    """
    Load settings, layering default.yaml and a preset over built-in defaults.

    Args:
        preset: Preset name (file config/<preset>.yaml)
        config_dir: Override the config directory

    Returns:
        dict: Merged settings
    """
    config_dir = Path(config_dir) if config_dir else CONFIG_DIR
    settings = copy.deepcopy(DEFAULT_SETTINGS)

    default_path = config_dir / "default.yaml"
    if default_path.exists():
        settings = _merge(settings, _read_yaml(default_path))

    if preset != "default":
        preset_path = config_dir / f"{preset}.yaml"
        if not preset_path.exists():
            raise FileNotFoundError(f"Config preset not found: {preset_path}")
        settings = _merge(settings, _read_yaml(preset_path))

    return settings


def _build_items(definitions: Dict) -> Dict[str, Item]:
    items = {}
    for name, opts in (definitions or {}).items():
        try:
            items[name] = Item(
                name,
                opts["x"], opts["y"], opts["width"], opts["height"],
                image=opts.get("image"),
                blocking=opts.get("blocking", True),
                z=opts.get("z", 0),
            )
        except (KeyError, TypeError) as e:
            raise RoomConfigError(f"Item {name!r} is missing {e}") from e
    return items


def _build_characters(definitions: Dict) -> Dict[str, Character]:
    characters = {}
    for name, opts in (definitions or {}).items():
        try:
            characters[name] = Character(
                name,
                x=opts["x"], y=opts["y"],
                width=opts.get("width", 40),
                height=opts.get("height", 80),
                speed=opts.get("speed", 200.0),
            )
        except (KeyError, TypeError) as e:
            raise RoomConfigError(f"Character {name!r} is missing {e}") from e
    return characters


def room_from_dict(data: Dict, settings: Optional[Dict] = None, name: str = "room") -> Room:
    """
    Build a room from a parsed room definition.

    Args:
        data: Room definition (background, floor_coords, items, characters, doors)
        settings: Settings used for planner defaults
        name: Fallback room name

    Returns:
        Room
    """
    if not isinstance(data, dict):
        raise RoomConfigError(f"Room definition must be a mapping, got {type(data).__name__}")
    planner_cfg = (settings or DEFAULT_SETTINGS).get("planner", {})

    doors = {}
    for door_name, door in (data.get("doors") or {}).items():
        if "x" not in door or "y" not in door:
            raise RoomConfigError(f"Door {door_name!r} needs x and y")
        doors[door_name] = dict(door)

    return Room(
        background=data.get("background"),
        floor_coords=data.get("floor_coords"),
        items=_build_items(data.get("items")),
        characters=_build_characters(data.get("characters")),
        doors=doors,
        step_size=data.get("step_size", planner_cfg.get("step_size", 100)),
        max_expansions=data.get("max_expansions", planner_cfg.get("max_expansions")),
        name=data.get("name", name),
    )


def load_room(path, settings: Optional[Dict] = None) -> Room:
    """
    Load a room definition from YAML.

    Args:
        path: Path to the room file, or a room name under config/rooms/
        settings: Settings used for planner defaults

    Returns:
        Room
    """
    path = Path(path)
    if not path.suffix:
        path = CONFIG_DIR / "rooms" / f"{path}.yaml"
    if not path.exists():
        raise FileNotFoundError(f"Room file not found: {path}")
    return room_from_dict(_read_yaml(path), settings, name=path.stem)
