"""
Occupancy queries for the walkable-path planner.

Purpose: Turn the scene's hit-testing facility into a walkability predicate.

Inputs:
    - Occupancy oracle exposing objects_at_point(point)
    - Floor entities
    - Exclusion list of entities to ignore

Outputs:
    - Walkable / not walkable per lattice node
    - Query and failure counters for the planning call

Params:
    oracle: object - Anything with objects_at_point((x, y)) -> iterable of entities
"""

import logging
from typing import Dict, Iterable, Protocol

from pathing.grid import Point

logger = logging.getLogger(__name__)


class OccupancyOracle(Protocol):
    """Hit-testing facility provided by the scene layer."""

    def objects_at_point(self, point: Point) -> Iterable:
        ...


def take_snapshot(oracle):
    """
    Freeze the oracle for one planning call.

    Oracles that can copy their current obstacle layout expose snapshot();
    anything else is queried live.
    """
    snapshot = getattr(oracle, "snapshot", None)
    if callable(snapshot):
        return snapshot()
    return oracle


def is_floor_entity(entity, floors) -> bool:
    """Check if entity is one of the floor surfaces."""
    return any(entity is floor for floor in floors)


class WalkabilityProbe:
    """Walkability predicate backed by an occupancy oracle, cached per call."""

    def __init__(self, oracle, floors, exclude=()):
        """
        Initialize probe.

        Args:
            oracle: Occupancy oracle (ideally a snapshot)
            floors: Floor entities; a point needs at least one of them
            exclude: Entities that never block
        """
        self.oracle = oracle
        self.floors = tuple(floors)
        self.exclude = tuple(exclude)
        self.queries = 0
        self.failures = 0
        self._cache: Dict[Point, bool] = {}

    def _is_excluded(self, entity) -> bool:
        return any(entity is excluded for excluded in self.exclude)

    def __call__(self, point: Point) -> bool:
        """
        Check if a point is walkable.

        Floor surfaces count as floor even when listed in the exclusion list;
        any other entity at the point blocks unless excluded.
        """
        if point in self._cache:
            return self._cache[point]

        self.queries += 1
        try:
            local_objects = list(self.oracle.objects_at_point(point))
        except Exception as e:
            # Oracle errors mark this node as blocked, the search carries on
            self.failures += 1
            logger.warning("Occupancy query failed at %s: %s", point, e)
            self._cache[point] = False
            return False

        walkable = False
        for entity in local_objects:
            if is_floor_entity(entity, self.floors):
                walkable = True
            elif not self._is_excluded(entity):
                walkable = False
                break

        self._cache[point] = walkable
        return walkable
