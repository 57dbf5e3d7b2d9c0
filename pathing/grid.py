"""
Grid discretizer for the walkable-path planner.

Purpose: Snap continuous scene coordinates onto a fixed-spacing lattice so the
         search runs over a finite node set.

Inputs:
    - Continuous scene coordinates
    - Node spacing (step_size)

Outputs:
    - Lattice nodes as (x, y) tuples
    - Neighbouring lattice nodes in a fixed, deterministic order

Params:
    step_size: float - Distance in scene units between neighbouring nodes
"""

import math
from typing import Iterator, Tuple

Point = Tuple[float, float]
Node = Tuple[float, float]

# 8-connected offsets, dy outer loop then dx, negative before positive
NEIGHBOUR_OFFSETS = [
    (dx, dy)
    for dy in (-1, 0, 1)
    for dx in (-1, 0, 1)
    if not (dx == 0 and dy == 0)
]

DEFAULT_STEP_SIZE = 100


class GridDiscretizer:
    """Lattice with a fixed node spacing."""

    def __init__(self, step_size=DEFAULT_STEP_SIZE):
        """
        Initialize discretizer.

        Args:
            step_size: Distance in scene units between lattice nodes
        """
        if step_size is None or step_size <= 0:
            raise ValueError(f"step_size must be positive, got {step_size!r}")
        self.step_size = step_size

    def snap(self, coord: float) -> float:
        """Snap a coordinate to the lattice value at or below it."""
        return coord - (coord % self.step_size)

    def snap_point(self, point: Point) -> Node:
        """Snap both axes of a point and return the canonical lattice node."""
        snapped = (self.snap(point[0]), self.snap(point[1]))
        return self.node_at(*self.index(snapped))

    def index(self, node: Node) -> Tuple[int, int]:
        """Lattice index (column, row) of a node."""
        return (round(node[0] / self.step_size), round(node[1] / self.step_size))

    def node_at(self, ix: int, iy: int) -> Node:
        """Lattice node for a (column, row) index."""
        return (ix * self.step_size, iy * self.step_size)

    def neighbour(self, node: Node, dx: int, dy: int) -> Node:
        """
        Lattice node one step away from node.

        Computed from the lattice index rather than by repeated addition, so
        fractional step sizes never drift off the lattice.
        """
        ix, iy = self.index(node)
        return self.node_at(ix + dx, iy + dy)

    def neighbours(self, node: Node) -> Iterator[Tuple[Tuple[int, int], Node]]:
        """Yield (offset, neighbour) pairs in NEIGHBOUR_OFFSETS order."""
        for dx, dy in NEIGHBOUR_OFFSETS:
            yield (dx, dy), self.neighbour(node, dx, dy)

    def is_adjacent(self, a: Node, b: Node) -> bool:
        """True if a and b are distinct and at most one step apart on each axis."""
        ax, ay = self.index(a)
        bx, by = self.index(b)
        return (ax, ay) != (bx, by) and abs(ax - bx) <= 1 and abs(ay - by) <= 1

    def expansion_bound(self, bounds) -> int:
        """
        Number of lattice nodes covering a bounding box.

        Args:
            bounds: (minx, miny, maxx, maxy), e.g. a shapely geometry's bounds

        Returns:
            int: Upper bound on the nodes a search over that box can expand
        """
        minx, miny, maxx, maxy = bounds
        columns = math.floor(maxx / self.step_size) - math.floor(minx / self.step_size) + 1
        rows = math.floor(maxy / self.step_size) - math.floor(miny / self.step_size) + 1
        return max(1, columns) * max(1, rows)
