"""
Scene graph for a room.

Purpose: Hold the entities drawn in a room (floor, items, characters) and
         answer hit-testing queries against their shapely footprints.

Inputs:
    - Entities with shapely geometries
    - Query points in scene coordinates

Outputs:
    - Entities overlapping a point, topmost first
    - Immutable snapshots for planning calls

Params:
    None
"""

import threading
from typing import List, Tuple

from shapely.geometry import Point, Polygon
from shapely.prepared import prep


class SceneEntity:
    """Anything placed in the scene with a footprint."""

    def __init__(self, name, geometry=None, z=0):
        """
        Initialize entity.

        Args:
            name: Identifier used in logs and config
            geometry: Shapely geometry in scene coordinates
            z: Draw order, higher is drawn later (on top)
        """
        self.name = name
        self._geometry = geometry
        self.z = z

    @property
    def geometry(self):
        """Current footprint as a shapely geometry."""
        return self._geometry

    def covers(self, x, y):
        """Check if the footprint covers a point (boundary included)."""
        geometry = self.geometry
        return geometry is not None and geometry.covers(Point(x, y))

    def __repr__(self):
        return f"{type(self).__name__}({self.name!r})"


class Floor(SceneEntity):
    """Walkable area of a room, built from an ordered vertex list."""

    def __init__(self, points, name="floor"):
        if len(points) < 3:
            raise ValueError(f"floor needs at least 3 points, got {len(points)}")
        polygon = Polygon([(float(x), float(y)) for x, y in points])
        if not polygon.is_valid:
            # Self-intersecting outlines are repaired rather than rejected
            polygon = polygon.buffer(0)
        super().__init__(name, polygon, z=-1)
        self.points = [tuple(p) for p in points]
        self.scale_x = 1.0
        self.scale_y = 1.0

    def set_scale(self, scale_x, scale_y):
        """Scale the floor outline to match a scaled background."""
        self.scale_x = scale_x
        self.scale_y = scale_y
        self._geometry = Polygon([(x * scale_x, y * scale_y) for x, y in self.points])


class SceneSnapshot:
    """Frozen copy of the scene's footprints for the duration of one query batch."""

    def __init__(self, entries: List[Tuple[SceneEntity, object]]):
        # entries are (entity, geometry) topmost first
        self._entries = [(entity, prep(geometry)) for entity, geometry in entries]

    def __len__(self):
        return len(self._entries)

    def objects_at_point(self, point):
        """Entities whose captured footprint covers point, topmost first."""
        p = Point(point[0], point[1])
        return [entity for entity, prepared in self._entries if prepared.covers(p)]


class Scene:
    """Ordered container of scene entities with hit-testing."""

    def __init__(self):
        self._children: List[SceneEntity] = []
        self._lock = threading.RLock()

    @property
    def children(self):
        """Children in insertion order."""
        with self._lock:
            return list(self._children)

    def add(self, entity):
        """Add entity if not already present."""
        with self._lock:
            if not any(child is entity for child in self._children):
                self._children.append(entity)
        return entity

    def remove(self, entity):
        """Remove entity; missing entities are ignored."""
        with self._lock:
            self._children = [child for child in self._children if child is not entity]

    def clear(self):
        """Remove all children."""
        with self._lock:
            self._children = []

    def _topmost_first(self):
        # stable sort keeps later-added children above earlier ones at equal z
        ordered = sorted(enumerate(self._children), key=lambda item: (item[1].z, item[0]))
        return [child for _, child in reversed(ordered)]

    def draw_order(self):
        """Children bottom to top."""
        with self._lock:
            return list(reversed(self._topmost_first()))

    def objects_at_point(self, point):
        """
        Entities overlapping a point.

        Args:
            point: (x, y) in scene coordinates

        Returns:
            List of entities, topmost first
        """
        with self._lock:
            children = self._topmost_first()
        return [child for child in children if child.covers(point[0], point[1])]

    def snapshot(self):
        """Copy current footprints so later movement does not affect queries."""
        with self._lock:
            entries = [
                (child, child.geometry)
                for child in self._topmost_first()
                if child.geometry is not None and not child.geometry.is_empty
            ]
        return SceneSnapshot(entries)
