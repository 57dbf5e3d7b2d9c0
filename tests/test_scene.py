import pytest

from adventure.actors import Character, Item
from adventure.scene import Floor
from pathing.occupancy import WalkabilityProbe, take_snapshot


def test_floor_needs_three_points():
    with pytest.raises(ValueError):
        Floor([(0, 0), (10, 10)])


def test_floor_boundary_counts_as_floor(floor):
    assert floor.covers(0, 0)
    assert floor.covers(500, 250)
    assert not floor.covers(501, 250)


def test_floor_scale(floor):
    floor.set_scale(2.0, 0.5)
    assert floor.covers(1000, 250)
    assert not floor.covers(250, 300)


def test_objects_at_point_topmost_first(scene, floor):
    rug = scene.add(Item("rug", 0, 0, 200, 200, blocking=False))
    crate = scene.add(Item("crate", 50, 50, 50, 50))
    walker = scene.add(Character("walker", x=75, y=100))

    hits = scene.objects_at_point((75, 75))

    assert hits == [walker, crate, rug, floor]
    assert scene.objects_at_point((300, 300)) == [floor]
    assert scene.objects_at_point((-5, -5)) == []


def test_add_is_idempotent_and_remove(scene, floor):
    crate = Item("crate", 0, 0, 10, 10)
    scene.add(crate)
    scene.add(crate)
    assert scene.children == [floor, crate]

    scene.remove(crate)
    assert scene.children == [floor]
    scene.clear()
    assert scene.children == []


def test_snapshot_ignores_later_movement(scene, floor):
    walker = scene.add(Character("walker", x=100, y=100))
    snapshot = scene.snapshot()

    walker.set_position(400, 400)

    assert walker in snapshot.objects_at_point((100, 90))
    assert walker not in snapshot.objects_at_point((400, 390))
    assert walker in scene.objects_at_point((400, 390))


def test_take_snapshot_uses_oracle_snapshot(scene):
    assert take_snapshot(scene) is not scene
    live = object()
    assert take_snapshot(live) is live


def test_probe_requires_floor_and_no_blockers(scene, floor):
    crate = scene.add(Item("crate", 200, 200, 100, 100))
    rug = scene.add(Item("rug", 0, 0, 100, 100, blocking=False))

    probe = WalkabilityProbe(scene, [floor], exclude=[rug])

    assert probe((100, 100))
    assert not probe((250, 250))
    assert not probe((600, 600))
    assert WalkabilityProbe(scene, [floor], exclude=[crate])((250, 250))


def test_probe_caches_answers(scene, floor):
    probe = WalkabilityProbe(scene, [floor])
    probe((100, 100))
    probe((100, 100))
    assert probe.queries == 1
