import threading

import pytest

from adventure.actors import Character, Item
from adventure.config import load_room, load_settings
from adventure.room import Room, RoomConfigError, percent_to_stage_coord
from pathing.planner import PlanningFailure

FLOOR = [(0, 0), (800, 0), (800, 600), (0, 600)]


def make_room(**kwargs):
    options = dict(background=(0, 0, 0), floor_coords=FLOOR, step_size=100)
    options.update(kwargs)
    return Room(**options)


@pytest.fixture
def player():
    return Character("player", x=110, y=510, speed=400)


def test_background_is_required():
    with pytest.raises(RoomConfigError, match="Background"):
        Room(floor_coords=FLOOR)


def test_floor_is_required():
    with pytest.raises(RoomConfigError, match="floor"):
        Room(background="bg.png")


def test_bad_floor_coordinates():
    with pytest.raises(RoomConfigError):
        Room(background="bg.png", floor_coords=[(0, 0), (1, 1)])


def test_load_fills_scene_and_runs_hooks(player):
    calls = []
    table = Item("table", 300, 300, 200, 200)
    butler = Character("butler", x=700, y=300)
    room = make_room(
        items={"table": table},
        characters={"butler": butler},
        on_load=lambda r: calls.append("load"),
        on_enter=lambda r: calls.append("enter"),
    )

    room.load(player)

    assert calls == ["load", "enter"]
    assert room.entered
    assert table.room is room
    children = room.scene.children
    assert children[0] is room.floor
    assert table in children and butler in children and player in children


def test_exit_runs_hook_and_clears_scene(player):
    calls = []
    room = make_room(on_exit=lambda r: calls.append("exit"))
    room.load(player)
    room.exit()
    assert calls == ["exit"]
    assert room.scene.children == []
    assert room.player is None


def test_percent_to_stage_coord():
    assert percent_to_stage_coord(50, 25, (800, 600)) == (400, 150)


def test_enter_through_west_door(player):
    room = make_room()
    room.load(player, door={"x": 0, "y": 50, "location": "W"}, stage_size=(800, 600))

    assert player.get_position() == (-45, 300)
    assert player.is_walking
    assert player.route == [(45, 300)]
    assert player.next_position is None


def test_click_walks_planned_route(player):
    room = make_room()
    room.load(player)

    result = room.handle_click(700, 510)

    assert result.success
    assert room.last_result is result
    assert player.route[0] == (110, 510)
    assert player.route[-1] == (700, 510)

    for _ in range(20):
        player.update(0.25)
    assert player.get_position() == (700, 510)
    assert not player.is_walking


def test_click_outside_floor_is_ignored(player):
    room = make_room()
    room.load(player)
    assert room.handle_click(900, 100) is None
    assert not player.is_walking


def test_click_on_obstacle_keeps_player_still(player):
    room = make_room(items={"table": Item("table", 300, 300, 200, 200)})
    room.load(player)

    result = room.handle_click(400, 400)

    assert result.failure == PlanningFailure.UNREACHABLE
    assert not player.is_walking


def test_non_blocking_items_are_walkable(player):
    room = make_room(items={"rug": Item("rug", 300, 300, 200, 200, blocking=False)})
    room.load(player)
    assert room.handle_click(400, 400).success


def test_click_in_same_cell_walks_straight(player):
    room = make_room()
    room.load(player)

    result = room.handle_click(150, 540)

    assert result.failure == PlanningFailure.DEGENERATE_INPUT
    assert player.route == [(150, 540)]


def test_stale_results_are_discarded(player):
    room = make_room()
    room.load(player)

    first = room.begin_walk()
    second = room.begin_walk()
    result = room.get_path(player.x, player.y, 700, 510, [player])

    assert room.complete_walk(first, result) is False
    assert not player.is_walking
    assert room.complete_walk(second, result) is True
    assert player.is_walking


def test_plan_listeners_see_each_applied_result(player):
    seen = []
    room = make_room()
    room.plan_listeners.append(lambda r, result: seen.append(result.outcome))
    room.load(player)

    room.handle_click(700, 510)
    room.handle_click(130, 520)

    assert seen == ["success", "degenerate_input"]


def test_scale_background(player):
    room = make_room()
    assert room.scale_background((1600, 1200), (800, 600)) == (2.0, 2.0)
    assert room.floor.covers(1600, 1200)
    assert room.background_scaled

    with pytest.raises(ValueError):
        room.scale_background((800, 600), (0, 0))


def test_listener_issuing_new_request_supersedes_result(player):
    room = make_room()
    room.plan_listeners.append(lambda r, result: r.begin_walk())
    room.load(player)

    ticket = room.begin_walk()
    result = room.get_path(player.x, player.y, 700, 510, [player])

    assert room.complete_walk(ticket, result) is False
    assert room.last_result is result
    assert not player.is_walking


def test_new_request_waits_while_result_is_applied(player):
    room = make_room()
    room.load(player)
    applying = threading.Event()
    release = threading.Event()

    def slow_listener(r, result):
        applying.set()
        release.wait(timeout=5)

    room.plan_listeners.append(slow_listener)
    ticket = room.begin_walk()
    result = room.get_path(player.x, player.y, 700, 510, [player])

    applier = threading.Thread(target=room.complete_walk, args=(ticket, result))
    applier.start()
    assert applying.wait(timeout=5)

    issued = []
    clicker = threading.Thread(target=lambda: issued.append(room.begin_walk()))
    clicker.start()
    clicker.join(timeout=0.2)
    assert issued == []

    release.set()
    applier.join(timeout=5)
    clicker.join(timeout=5)
    assert issued == [ticket + 1]
    assert player.is_walking


@pytest.fixture
def settings():
    return load_settings()


@pytest.fixture
def walker(settings):
    opts = settings["player"]
    return Character("player", x=120, y=520, width=opts["width"],
                     height=opts["height"], speed=opts["speed"])


def walk_until_idle(character, ticks=40, dt=0.25):
    for _ in range(ticks):
        if not character.is_walking:
            break
        character.update(dt)


def test_hallway_west_door_exit(settings, walker):
    room = load_room("hallway", settings)
    room.load(walker)
    arrived = []

    target = room.door_target(room.doors["west"])
    result = room.handle_click(*target, callback=arrived.append)

    assert room.floor.covers(*target)
    assert result.success
    assert result.route[-1] == target
    walk_until_idle(walker)
    assert arrived == [walker]
    assert walker.get_position() == target


@pytest.mark.parametrize("click", [(400, 330), (30, 400), (21, 321)])
def test_hallway_clicks_near_top_and_left_edges(settings, walker, click):
    room = load_room("hallway", settings)
    room.load(walker)

    result = room.handle_click(*click)

    assert result.success
    assert result.route[-1] == click
    walk_until_idle(walker)
    assert walker.get_position() == click


def test_hallway_walk_from_edge_band(settings, walker):
    room = load_room("hallway", settings)
    room.load(walker)
    walker.set_position(400, 330)

    result = room.handle_click(120, 520)

    assert result.success
    assert result.route[0] == (400, 330)


def test_study_east_door_round_trip(settings, walker):
    room = load_room("study", settings)
    room.load(walker, door=room.doors["east"], stage_size=(800, 600))
    walk_until_idle(walker)
    assert walker.get_position() == pytest.approx((739, 510))

    arrived = []
    target = room.door_target(room.doors["east"], (800, 600))
    result = room.handle_click(*target, callback=arrived.append)

    assert result.success
    walk_until_idle(walker)
    assert arrived == [walker]


def test_study_click_near_top_edge(settings, walker):
    room = load_room("study", settings)
    room.load(walker)

    result = room.handle_click(400, 310)

    assert result.success
    assert result.route[-1] == (400, 310)


def test_door_target_is_inside_floor():
    room = make_room(floor_coords=[(20, 320), (780, 320), (780, 590), (20, 590)])
    assert room.door_target({"x": 2, "y": 85}, (800, 600)) == pytest.approx((25, 510))
    assert room.door_target({"x": 50, "y": 0}, (800, 600)) == pytest.approx((400, 325))
