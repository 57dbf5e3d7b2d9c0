"""
Walkable-path planner.

Purpose: Single entry point tying together the grid discretizer, the frontier
         search and the path reconstructor.

Inputs:
    - Occupancy oracle (the scene, or anything with objects_at_point)
    - Floor entity whose shapely geometry bounds the walkable area
    - Start and end points in scene coordinates
    - Exclusion list of entities to ignore as obstacles

Outputs:
    - PathResult: lattice waypoints or a PlanningFailure reason

Params:
    step_size: float - Lattice spacing in scene units (default 100)
    max_expansions: int - Optional cap on expanded nodes; defaults to the
                          number of lattice nodes covering the floor bounds
"""

import logging
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

import numpy as np

from pathing.grid import DEFAULT_STEP_SIZE, GridDiscretizer, Point
from pathing.occupancy import WalkabilityProbe, take_snapshot
from pathing.reconstruct import InconsistentDistanceMap, PathReconstructor
from pathing.search import FrontierSearch

logger = logging.getLogger(__name__)


class PlanningFailure(Enum):
    """Reasons a planning call did not produce a route."""
    DEGENERATE_INPUT = "degenerate_input"  # start and end share a node
    START_BLOCKED = "start_blocked"
    UNREACHABLE = "unreachable"
    INCONSISTENT_STATE = "inconsistent_state"  # reconstruction bug signal
    EXPANSION_LIMIT = "expansion_limit"


@dataclass
class PathResult:
    """Result of a planning call."""
    start: Point
    end: Point
    waypoints: List[Point] = field(default_factory=list)
    failure: Optional[PlanningFailure] = None
    message: str = ""
    expansions: int = 0
    oracle_queries: int = 0
    oracle_failures: int = 0
    cpu_ms: float = 0.0

    @property
    def success(self) -> bool:
        """Whether a route was found."""
        return self.failure is None

    @property
    def outcome(self) -> str:
        return "success" if self.failure is None else self.failure.value

    @property
    def route(self) -> List[Point]:
        """Waypoints with the snapped endpoints replaced by the requested points."""
        if not self.waypoints:
            return []
        if len(self.waypoints) == 1:
            return [self.start, self.end]
        return [self.start] + list(self.waypoints[1:-1]) + [self.end]

    @property
    def length(self) -> float:
        """Length of the route in scene units."""
        route = self.route
        if len(route) < 2:
            return 0.0
        points = np.asarray(route, dtype=float)
        return float(np.sum(np.hypot(*np.diff(points, axis=0).T)))


class PathPlanner:
    """Lattice path planner over a lazily queried occupancy field."""

    def __init__(self, oracle, floor, step_size=DEFAULT_STEP_SIZE, max_expansions=None):
        """
        Initialize planner.

        Args:
            oracle: Occupancy oracle for the room's scene
            floor: Floor entity; points are walkable only where the oracle reports it
            step_size: Lattice spacing in scene units
            max_expansions: Optional cap on expanded nodes per call
        """
        self.oracle = oracle
        self.floor = floor
        self.grid = GridDiscretizer(step_size)
        self.reconstructor = PathReconstructor(self.grid)

        if max_expansions is None:
            geometry = getattr(floor, "geometry", None)
            if geometry is not None and not geometry.is_empty:
                max_expansions = self.grid.expansion_bound(geometry.bounds)
        self.max_expansions = max_expansions

    @property
    def step_size(self):
        return self.grid.step_size

    def find_path(self, start: Point, end: Point, exclude=()) -> PathResult:
        """
        Plan a walkable route from start to end.

        Args:
            start: (x, y) start point in scene coordinates
            end: (x, y) destination point in scene coordinates
            exclude: Entities that must not count as obstacles

        Returns:
            PathResult; failures are reported through PathResult.failure
        """
        start = (start[0], start[1])
        end = (end[0], end[1])
        start_node = self.grid.snap_point(start)
        end_node = self.grid.snap_point(end)
        result = PathResult(start=start, end=end)

        if start_node == end_node:
            result.failure = PlanningFailure.DEGENERATE_INPUT
            result.message = f"start and end share lattice node {start_node}"
            logger.debug("Degenerate path request %s -> %s", start, end)
            return result

        started = time.perf_counter()
        probe = WalkabilityProbe(take_snapshot(self.oracle), [self.floor], exclude)
        try:
            self._plan(probe, start, end, start_node, end_node, result)
        finally:
            result.oracle_queries = probe.queries
            result.oracle_failures = probe.failures
            result.cpu_ms = (time.perf_counter() - started) * 1000.0

        logger.debug(
            "Planned %s -> %s: %s, %d waypoints, %d expansions, %.2fms",
            start, end, result.outcome, len(result.waypoints),
            result.expansions, result.cpu_ms,
        )
        return result

    def _anchor(self, probe, point, node):
        """
        Lattice node standing in for a point on the floor.

        The floor snap rounds down, so points near a floor's top or left edge
        land on nodes outside it. When the point itself is walkable, the
        walkable neighbour nearest to it is used instead.
        """
        if probe(node) or not probe(point):
            return node
        best = None
        best_key = None
        for order, (_, candidate) in enumerate(self.grid.neighbours(node)):
            if not probe(candidate):
                continue
            key = (float(np.hypot(candidate[0] - point[0], candidate[1] - point[1])), order)
            if best_key is None or key < best_key:
                best, best_key = candidate, key
        return node if best is None else best

    def _plan(self, probe, start, end, start_node, end_node, result):
        start_node = self._anchor(probe, start, start_node)
        if not probe(start_node):
            result.failure = PlanningFailure.START_BLOCKED
            result.message = f"start node {start_node} is not walkable"
            return
        end_node = self._anchor(probe, end, end_node)

        search = FrontierSearch(self.grid, probe, self.max_expansions)
        outcome = search.run(start_node, end_node)
        result.expansions = outcome.expansions

        if outcome.limit_hit:
            result.failure = PlanningFailure.EXPANSION_LIMIT
            result.message = f"gave up after {outcome.expansions} expansions"
            return
        if not outcome.reached:
            result.failure = PlanningFailure.UNREACHABLE
            result.message = f"no walkable route from {start_node} to {end_node}"
            return

        try:
            result.waypoints = self.reconstructor.reconstruct(outcome, start_node, end_node, start)
        except InconsistentDistanceMap as e:
            logger.error("Path reconstruction failed: %s", e)
            result.failure = PlanningFailure.INCONSISTENT_STATE
            result.message = str(e)
