"""
A single room containing items, characters and doors.

Purpose: Own the floor polygon and obstacle entities, wire floor clicks to the
         path planner and hand planned routes to the player character.

Inputs:
    - Room options (background, floor coordinates, items, characters, doors,
      lifecycle callbacks, planner step size)
    - Player character and entry door on load
    - Click positions in scene coordinates

Outputs:
    - Populated scene for rendering and hit-testing
    - PathResult per click, applied to the player when still current

Params:
    step_size: float - Lattice spacing for path planning (default 100)
    max_expansions: int - Optional cap on search expansions per click
"""

import logging
import threading
from typing import Callable, Dict, List, Optional

from shapely.geometry import Point
from shapely.ops import nearest_points

from adventure.scene import Floor, Scene
from pathing.grid import DEFAULT_STEP_SIZE
from pathing.planner import PathPlanner, PathResult, PlanningFailure

logger = logging.getLogger(__name__)

# Gap kept between a door and the player standing at it
DOOR_MARGIN = 5


class RoomConfigError(ValueError):
    """Room options are missing or malformed."""


def percent_to_stage_coord(x_percent, y_percent, stage_size):
    """Convert a position given in stage percentages to stage coordinates."""
    width, height = stage_size
    return (width * (x_percent / 100.0), height * (y_percent / 100.0))


def _noop(*args, **kwargs):
    return True


class Room:
    """Room with a walkable floor, obstacles and doors."""

    def __init__(self, background=None, floor=None, floor_coords=None, items=None,
                 characters=None, doors=None, on_load=None, on_enter=None,
                 on_exit=None, step_size=DEFAULT_STEP_SIZE, max_expansions=None,
                 name="room"):
        """
        Initialize room.

        Args:
            background: Image path or RGB colour for the backdrop (required)
            floor: Prebuilt Floor entity
            floor_coords: Vertex list for the floor, used when floor is not given
            items: Dict of name -> Item
            characters: Dict of name -> Character (non-player)
            doors: Dict of name -> door dict with x, y (stage %) and location N/E/S/W
            on_load, on_enter, on_exit: Lifecycle callbacks taking the room
            step_size: Planner lattice spacing
            max_expansions: Optional planner expansion cap
            name: Room identifier
        """
        if not background:
            raise RoomConfigError("Background not set for room")
        self.background = background
        self.name = name

        if floor is not None:
            self.floor = floor
        elif floor_coords:
            self.floor = self.create_floor(floor_coords)
        else:
            raise RoomConfigError("No floor or coordinates for floor are set")

        self.items = items if items is not None else {}
        self.characters = characters if characters is not None else {}
        self.doors = doors if doors is not None else {}
        self.on_load = on_load or _noop
        self.on_enter = on_enter or _noop
        self.on_exit = on_exit or _noop
        self.step_size = step_size
        self.max_expansions = max_expansions

        self.entered = False
        self.background_scaled = False
        self.scene = Scene()
        self.player = None

        # Most recent click wins; older in-flight plans are dropped
        self._ticket_lock = threading.RLock()
        self._latest_ticket = 0
        self.plan_listeners: List[Callable] = []
        self.last_result: Optional[PathResult] = None

    @staticmethod
    def create_floor(points):
        """Create a floor entity from a list of [x, y] coordinates."""
        try:
            return Floor(points)
        except (TypeError, ValueError) as e:
            raise RoomConfigError(f"Invalid floor coordinates: {e}") from e

    def scale_background(self, stage_size, background_size):
        """
        Scale the floor to match a background stretched over the stage.

        Args:
            stage_size: (width, height) of the stage
            background_size: (width, height) of the loaded background image

        Returns:
            (scale_x, scale_y)
        """
        if not background_size or not background_size[0] or not background_size[1]:
            raise ValueError("Background image loaded but dimensions not set!")
        scale_x = stage_size[0] / background_size[0]
        scale_y = stage_size[1] / background_size[1]
        logger.debug("Background scale: %s,%s", scale_x, scale_y)
        self.floor.set_scale(scale_x, scale_y)
        self.background_scaled = True
        return scale_x, scale_y

    def load(self, player, door=None, stage_size=(800, 600)):
        """
        Fill the scene and place the player.

        Args:
            player: Player character
            door: Door dict (x, y in stage %, location N/E/S/W) or None to keep
                  the player where it stands
            stage_size: (width, height) of the stage
        """
        logger.info("Loading room %s", self.name)
        self.player = player
        self.scene.clear()
        self.scene.add(self.floor)

        for item in self.items.values():
            item.room = self
            self.scene.add(item)
        for character in self.characters.values():
            self.scene.add(character)

        if door:
            self.place_at_door(player, door, stage_size)
        else:
            player.set_position(player.x, player.y)
        self.scene.add(player)

        self.on_load(self)
        self.entered = True
        self.on_enter(self)

        # Entering through a door starts with a straight step into the room
        if player.next_position is not None:
            player.walk_path([player.next_position])
            player.next_position = None

    def door_target(self, door, stage_size=(800, 600)):
        """
        Floor point the player walks to before leaving through a door.

        Args:
            door: Door dict with x, y in stage percent
            stage_size: (width, height) of the stage

        Returns:
            (x, y) just inside the floor, nearest the door
        """
        door_point = Point(percent_to_stage_coord(door["x"], door["y"], stage_size))
        floor = self.floor.geometry
        inner = floor.buffer(-DOOR_MARGIN)
        if inner.is_empty:
            inner = floor
        _, target = nearest_points(door_point, inner)
        return (target.x, target.y)

    def place_at_door(self, player, door, stage_size):
        """Position the player just outside a door and queue a step inside."""
        door_x, door_y = percent_to_stage_coord(door["x"], door["y"], stage_size)
        height = player.get_height()
        width = player.get_width()
        location = door.get("location")

        if location == "N":
            player.set_position(door_x, door_y - DOOR_MARGIN)
            player.next_position = (door_x, door_y + height + DOOR_MARGIN)
        elif location == "E":
            player.set_position(door_x - width + DOOR_MARGIN, door_y)
            player.next_position = (door_x - width - DOOR_MARGIN, door_y)
        elif location == "S":
            player.set_position(door_x, door_y + height + DOOR_MARGIN)
            player.next_position = (door_x, door_y - DOOR_MARGIN)
        elif location == "W":
            player.set_position(door_x - width - DOOR_MARGIN, door_y)
            player.next_position = (door_x + width + DOOR_MARGIN, door_y)
        else:
            player.set_position(door_x, door_y)
            player.next_position = None

    def exit(self):
        """Run the exit hook and empty the scene."""
        self.on_exit(self)
        if self.player is not None:
            self.player.stop()
        self.scene.clear()
        self.player = None

    def planner(self):
        """Planner bound to this room's scene and floor."""
        return PathPlanner(self.scene, self.floor, self.step_size, self.max_expansions)

    def get_path(self, start_x, start_y, end_x, end_y, excluded_obstacles=None) -> PathResult:
        """
        Get a walkable path across the floor from one point to another.

        Args:
            start_x, start_y: Starting location
            end_x, end_y: Destination
            excluded_obstacles: Entities to ignore when evaluating obstacles

        Returns:
            PathResult
        """
        excluded = list(excluded_obstacles or [])
        excluded.extend(item for item in self.items.values() if not item.blocking)
        return self.planner().find_path((start_x, start_y), (end_x, end_y), excluded)

    def begin_walk(self) -> int:
        """Issue a ticket for a new path request; earlier tickets go stale."""
        with self._ticket_lock:
            self._latest_ticket += 1
            return self._latest_ticket

    def complete_walk(self, ticket: int, result: PathResult, callback=None) -> bool:
        """
        Apply a finished plan to the player if its request is still current.

        The ticket lock is held until the player has the route, so a request
        issued meanwhile waits and its result is applied afterwards.

        Returns:
            bool: False if the result was stale and discarded
        """
        with self._ticket_lock:
            if ticket != self._latest_ticket:
                logger.debug("Discarding stale path result for ticket %d", ticket)
                return False

            self.last_result = result
            for listener in self.plan_listeners:
                listener(self, result)
            if ticket != self._latest_ticket:
                logger.debug("Path result for ticket %d superseded by a listener", ticket)
                return False

            player = self.player
            if player is None:
                return True
            if result.success:
                player.walk_path(result.route, callback)
            elif result.failure == PlanningFailure.DEGENERATE_INPUT:
                # Same lattice cell, walk straight there
                player.walk_path([result.end], callback)
            else:
                logger.info("No path to %s: %s", result.end, result.message)
                player.stop()
            return True

    def handle_click(self, x, y, callback=None) -> Optional[PathResult]:
        """Floor click: plan from the player to (x, y) and walk the result."""
        if self.player is None:
            return None
        if not self.floor.covers(x, y):
            return None
        ticket = self.begin_walk()
        result = self.get_path(self.player.x, self.player.y, x, y, [self.player])
        self.complete_walk(ticket, result, callback)
        return result

    def entities(self) -> Dict[str, object]:
        """All named entities in this room, for lookups from config hooks."""
        named = {self.floor.name: self.floor}
        named.update(self.items)
        named.update(self.characters)
        return named
