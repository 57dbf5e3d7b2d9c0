import pytest

from adventure.actors import Character, Item


def test_item_footprint():
    item = Item("table", 300, 380, 180, 90)
    assert item.geometry.bounds == (300, 380, 480, 470)
    assert item.blocking


def test_character_stands_on_its_feet():
    character = Character("hero", x=100, y=200, width=40, height=80)
    assert character.geometry.bounds == (80, 120, 120, 200)
    assert character.covers(100, 200)
    assert not character.covers(100, 201)


def test_walk_path_follows_route_and_calls_back():
    arrivals = []
    character = Character("hero", x=0, y=0, speed=100)
    character.walk_path([(0, 0), (100, 0), (100, 100)], callback=arrivals.append)

    assert character.is_walking
    character.update(0.5)
    assert character.get_position() == pytest.approx((50, 0))

    character.update(1.0)
    assert character.get_position() == pytest.approx((100, 50))
    assert arrivals == []

    character.update(1.0)
    assert character.get_position() == (100, 100)
    assert not character.is_walking
    assert arrivals == [character]
    assert character.distance_walked == pytest.approx(200)

    character.update(1.0)
    assert arrivals == [character]


def test_walk_to_current_position_arrives_immediately():
    arrivals = []
    character = Character("hero", x=10, y=10)
    character.walk_path([(10, 10)], callback=arrivals.append)
    assert not character.is_walking
    assert arrivals == [character]


def test_stop_and_set_position_cancel_walk():
    arrivals = []
    character = Character("hero", x=0, y=0, speed=100)
    character.walk_path([(100, 0)], callback=arrivals.append)
    character.stop()
    character.update(5.0)
    assert character.get_position() == (0, 0)

    character.walk_path([(100, 0)], callback=arrivals.append)
    character.set_position(50, 50)
    character.update(5.0)
    assert character.get_position() == (50, 50)
    assert arrivals == []
