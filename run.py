#!/usr/bin/env python3
"""
Entry point for the point-and-click adventure engine.

Purpose: Parse CLI arguments, load configuration, initialize and run the game.

Inputs:
    --room: Starting room name (config/rooms/<room>.yaml)
    --config: Optional config preset (default, coarse)
    --step-size: Override the planner lattice spacing

Outputs:
    Runs the game window, logs planning calls to CSV.

Params:
    room: str - Starting room
    config: str - Configuration preset (default: default)
    step_size: float - Planner lattice spacing override
"""

import argparse
import logging
import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent
sys.path.insert(0, str(project_root))

from adventure.config import load_settings


def main():
    """Main entry point for the game."""
    parser = argparse.ArgumentParser(
        description="Point-and-click adventure engine - Pygame Edition"
    )
    parser.add_argument(
        "--room",
        type=str,
        default=None,
        help="Starting room (file name under config/rooms without .yaml)",
    )
    parser.add_argument(
        "--config",
        type=str,
        default="default",
        help="Configuration preset (default: default)",
    )
    parser.add_argument(
        "--step-size",
        type=float,
        default=None,
        help="Lattice spacing for rooms that do not set their own step_size",
    )

    args = parser.parse_args()

    try:
        settings = load_settings(args.config)
        if args.step_size is not None:
            if args.step_size <= 0:
                parser.error("--step-size must be positive")
            settings["planner"]["step_size"] = args.step_size

        logging.basicConfig(
            level=getattr(logging, str(settings["logging"]["level"]).upper(), logging.INFO),
            format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        )

        # Imported late so --help works without a display
        from adventure.engine import GameEngine

        engine = GameEngine(settings, room_name=args.room)
        engine.run()
    except KeyboardInterrupt:
        print("\nGame interrupted by user.")
        sys.exit(0)
    except Exception as e:
        print(f"Error running game: {e}")
        import traceback
        traceback.print_exc()
        sys.exit(1)


if __name__ == "__main__":
    main()
