import pytest

from pathing.grid import GridDiscretizer
from pathing.search import DistanceMap, FrontierSearch


def inside_square(size):
    def is_walkable(node):
        return 0 <= node[0] <= size and 0 <= node[1] <= size
    return is_walkable


def test_distance_map_only_improves():
    distances = DistanceMap()
    assert distances.relax((0, 0), 300)
    assert not distances.relax((0, 0), 400)
    assert distances[(0, 0)] == 300
    assert distances.relax((0, 0), 200)
    assert distances[(0, 0)] == 200
    assert len(distances) == 1


def test_distance_map_rejects_negative_cost():
    with pytest.raises(ValueError):
        DistanceMap().relax((0, 0), -1)


def test_open_floor_reaches_end_with_chebyshev_costs():
    search = FrontierSearch(GridDiscretizer(100), inside_square(500))
    result = search.run((0, 0), (400, 400))

    assert result.reached
    assert not result.limit_hit
    assert result.distances[(0, 0)] == 0
    assert result.distances[(100, 100)] == 100
    assert result.distances[(400, 0)] == 400
    assert result.distances[(400, 400)] == 400
    assert (0, 0) in result.visited
    # the end node is reached but never expanded
    assert (400, 400) not in result.visited


def test_blocked_nodes_never_enter_distance_map():
    blocked = {(200, 200), (300, 300)}
    open_floor = inside_square(500)

    search = FrontierSearch(GridDiscretizer(100), lambda n: open_floor(n) and n not in blocked)
    result = search.run((0, 0), (400, 400))

    assert result.reached
    assert not blocked & set(result.distances)


def test_frontier_exhaustion_reports_not_reached():
    walkable = {(0, 0), (100, 0), (100, 100)}
    search = FrontierSearch(GridDiscretizer(100), lambda n: n in walkable)
    result = search.run((0, 0), (400, 400))

    assert not result.reached
    assert not result.limit_hit
    assert result.visited == walkable
    assert result.expansions == 3


def test_expansion_limit_stops_search():
    search = FrontierSearch(GridDiscretizer(100), inside_square(500), max_expansions=3)
    result = search.run((0, 0), (500, 500))

    assert not result.reached
    assert result.limit_hit
    assert result.expansions == 3


def test_recorded_costs_never_increase(monkeypatch):
    original = DistanceMap.relax
    updates = []

    def recording(self, node, cost):
        before = self.get(node)
        changed = original(self, node, cost)
        after = self[node]
        updates.append((node, before, after))
        return changed

    monkeypatch.setattr(DistanceMap, "relax", recording)

    blocked = {(200, 100), (200, 200), (200, 300)}
    open_floor = inside_square(500)
    search = FrontierSearch(GridDiscretizer(100), lambda n: open_floor(n) and n not in blocked)
    search.run((0, 200), (400, 200))

    assert updates
    assert updates[0] == ((0, 200), None, 0)
    for node, before, after in updates:
        assert after >= 0
        if before is not None:
            assert after <= before


def test_each_node_expanded_once():
    result = FrontierSearch(GridDiscretizer(100), inside_square(300)).run((0, 0), (900, 900))

    assert not result.reached
    assert result.expansions == len(result.visited) == 16
