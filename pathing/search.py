"""
Frontier search over the walkable lattice.

Purpose: Breadth-first, uniform-cost expansion from the start node over
         8-connected neighbours, recording the cheapest known distance from
         the start for every node reached.

Inputs:
    - Snapped start and end nodes
    - Grid discretizer
    - Walkability predicate (queried lazily per neighbour)

Outputs:
    - Distance map (node -> cost from start)
    - Visited set
    - Whether the end node was reached

Params:
    max_expansions: int - Fail fast once this many nodes have been expanded
"""

import logging
from collections import deque
from dataclasses import dataclass
from typing import Callable, Dict, Iterator, Optional, Set

from pathing.grid import GridDiscretizer, Node

logger = logging.getLogger(__name__)


class DistanceMap:
    """Node -> accumulated cost from the start node. Costs only ever decrease."""

    def __init__(self):
        self._costs: Dict[Node, float] = {}

    def __contains__(self, node) -> bool:
        return node in self._costs

    def __getitem__(self, node: Node) -> float:
        return self._costs[node]

    def __len__(self) -> int:
        return len(self._costs)

    def __iter__(self) -> Iterator[Node]:
        return iter(self._costs)

    def get(self, node: Node, default=None):
        return self._costs.get(node, default)

    def items(self):
        return self._costs.items()

    def relax(self, node: Node, cost: float) -> bool:
        """
        Record cost for node if it improves on the known one.

        Args:
            node: Lattice node
            cost: Candidate cost from the start

        Returns:
            bool: True if the stored cost changed
        """
        if cost < 0:
            raise ValueError(f"negative cost {cost} for node {node}")
        if cost < self._costs.get(node, float("inf")):
            self._costs[node] = cost
            return True
        return False


@dataclass
class SearchResult:
    """Outcome of one frontier search."""
    distances: DistanceMap
    visited: Set[Node]
    reached: bool
    expansions: int
    limit_hit: bool = False


@dataclass
class FrontierSearch:
    """Breadth-first uniform-cost expansion over the lattice."""
    grid: GridDiscretizer
    is_walkable: Callable[[Node], bool]
    max_expansions: Optional[int] = None

    def run(self, start: Node, end: Node) -> SearchResult:
        """
        Expand from start until end is reached or the frontier runs dry.

        Args:
            start: Snapped start node
            end: Snapped end node

        Returns:
            SearchResult with the distance map and visited set
        """
        step = self.grid.step_size
        distances = DistanceMap()
        visited: Set[Node] = set()
        frontier = deque()
        expansions = 0

        distances.relax(start, 0)
        current = start

        while current != end:
            if self.max_expansions is not None and expansions >= self.max_expansions:
                logger.warning(
                    "Search stopped after %d expansions without reaching %s", expansions, end
                )
                return SearchResult(distances, visited, False, expansions, limit_hit=True)

            current_distance = distances[current]
            for _, candidate in self.grid.neighbours(current):
                if candidate in visited or not self.is_walkable(candidate):
                    continue
                # First discovery queues the node, every discovery may improve it
                if candidate not in distances:
                    frontier.append(candidate)
                distances.relax(candidate, current_distance + step)

            visited.add(current)
            expansions += 1

            if not frontier:
                return SearchResult(distances, visited, False, expansions)
            current = frontier.popleft()

        return SearchResult(distances, visited, True, expansions)
