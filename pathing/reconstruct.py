"""
Path reconstruction from a search distance map.

Purpose: Walk back from the end node to the start node, always stepping to the
         neighbour with the strictly smallest recorded distance.

Inputs:
    - SearchResult (distance map + visited set)
    - Snapped start and end nodes
    - True (continuous) start point, used to break ties

Outputs:
    - Lattice path in start -> end order
"""

from typing import List

import numpy as np

from pathing.grid import NEIGHBOUR_OFFSETS, GridDiscretizer, Node, Point
from pathing.search import SearchResult


class InconsistentDistanceMap(RuntimeError):
    """Back-walk stopped at a local minimum that is not the start node."""

    def __init__(self, node: Node, distance: float):
        super().__init__(
            f"no neighbour of {node} has a recorded distance below {distance}"
        )
        self.node = node
        self.distance = distance


class PathReconstructor:
    """Greedy descent over the distance map."""

    def __init__(self, grid: GridDiscretizer):
        self.grid = grid

    def reconstruct(self, result: SearchResult, start: Node, end: Node,
                    true_start: Point) -> List[Node]:
        """
        Rebuild the route from the distance map.

        Args:
            result: Finished search with end in its distance map
            start: Snapped start node
            end: Snapped end node
            true_start: Requested start point before snapping

        Returns:
            List of lattice nodes from start to end

        Raises:
            InconsistentDistanceMap: if the descent reaches a local minimum
        """
        distances = result.distances
        allowed = set(result.visited)
        allowed.add(start)

        path = [end]
        current = end
        # Each step strictly lowers the distance, so the walk is bounded
        max_steps = len(distances) + 1

        while current != start:
            if len(path) > max_steps:
                raise InconsistentDistanceMap(current, distances[current])

            best = None
            best_key = None
            for order, (dx, dy) in enumerate(NEIGHBOUR_OFFSETS):
                candidate = self.grid.neighbour(current, dx, dy)
                if candidate not in allowed or candidate not in distances:
                    continue
                if distances[candidate] >= distances[current]:
                    continue
                key = (
                    distances[candidate],
                    float(np.hypot(candidate[0] - true_start[0], candidate[1] - true_start[1])),
                    order,
                )
                if best_key is None or key < best_key:
                    best, best_key = candidate, key

            if best is None:
                raise InconsistentDistanceMap(current, distances[current])

            path.append(best)
            current = best

        path.reverse()
        return path
