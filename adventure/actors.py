"""
Items and characters placed in a room.

Purpose: Scene entities with rectangular footprints; characters follow a
         planned route at constant speed, one tick at a time.

Inputs:
    - Position and size from room config
    - Route (list of (x, y) points) from the path planner
    - Time step per tick

Outputs:
    - Updated character position per tick
    - Shapely footprints for hit-testing

Params:
    speed: float - Walking speed in scene units per second
"""

from typing import Callable, List, Optional, Tuple

import numpy as np
from shapely.geometry import box

from adventure.scene import SceneEntity


class Item(SceneEntity):
    """Static object in a room (furniture, props)."""

    def __init__(self, name, x, y, width, height, image=None, blocking=True, z=0):
        """
        Initialize item.

        Args:
            name: Item identifier
            x, y: Top-left corner in scene coordinates
            width, height: Item size
            image: Optional image path used by the renderer
            blocking: False for decorations the character can walk over
            z: Draw order
        """
        super().__init__(name, box(x, y, x + width, y + height), z=z)
        self.x = x
        self.y = y
        self.width = width
        self.height = height
        self.image = image
        self.blocking = blocking
        self.room = None


class Character(SceneEntity):
    """Walking character. Position (x, y) is where the feet touch the floor."""

    def __init__(self, name, x=0.0, y=0.0, width=40.0, height=80.0, speed=200.0, z=1):
        super().__init__(name, z=z)
        self.x = x
        self.y = y
        self.width = width
        self.height = height
        self.speed = speed

        self.route: List[Tuple[float, float]] = []
        self.waypoint_idx = 0
        self.distance_walked = 0.0
        self.next_position: Optional[Tuple[float, float]] = None
        self.destination_callback: Optional[Callable] = None

    @property
    def geometry(self):
        """Sprite bounds: width centred on x, standing on y."""
        half = self.width / 2
        return box(self.x - half, self.y - self.height, self.x + half, self.y)

    def get_height(self):
        return self.height

    def get_width(self):
        return self.width

    def get_position(self):
        return (self.x, self.y)

    def set_position(self, x, y):
        """Teleport the character and cancel any walk in progress."""
        self.x = x
        self.y = y
        self.stop()

    @property
    def is_walking(self) -> bool:
        return self.waypoint_idx < len(self.route)

    def walk_path(self, route, callback=None):
        """
        Start walking along a route.

        Args:
            route: List of (x, y) points; the first may be the current position
            callback: Called once with this character when the last point is reached
        """
        self.route = [(float(x), float(y)) for x, y in route]
        self.waypoint_idx = 0
        self.destination_callback = callback
        # Skip waypoints we are already standing on
        while self.is_walking and self._distance_to(self.route[self.waypoint_idx]) < 1e-9:
            self.waypoint_idx += 1
        if not self.is_walking:
            self._arrive()

    def stop(self):
        """Stop walking without firing the destination callback."""
        self.route = []
        self.waypoint_idx = 0
        self.destination_callback = None

    def _distance_to(self, point):
        return float(np.hypot(point[0] - self.x, point[1] - self.y))

    def _arrive(self):
        callback = self.destination_callback
        self.route = []
        self.waypoint_idx = 0
        self.destination_callback = None
        if callback is not None:
            callback(self)

    def update(self, dt):
        """
        Advance along the route.

        Args:
            dt: Time step in seconds
        """
        if not self.is_walking:
            return

        budget = self.speed * dt
        while budget > 0 and self.is_walking:
            target = self.route[self.waypoint_idx]
            dist = self._distance_to(target)
            if dist <= budget:
                self.x, self.y = target
                self.distance_walked += dist
                budget -= dist
                self.waypoint_idx += 1
            else:
                direction = (np.array(target) - np.array([self.x, self.y])) / dist
                self.x += float(direction[0] * budget)
                self.y += float(direction[1] * budget)
                self.distance_walked += budget
                budget = 0.0

        if not self.is_walking:
            self._arrive()
