import pytest

from adventure.scene import Floor, Scene

SQUARE_500 = [(0, 0), (500, 0), (500, 500), (0, 500)]


class CountingOracle:
    """Live oracle wrapper that counts queries and can fail on chosen points."""

    def __init__(self, scene, fail_at=()):
        self.scene = scene
        self.fail_at = set(fail_at)
        self.queries = []

    def objects_at_point(self, point):
        self.queries.append(point)
        if point in self.fail_at:
            raise RuntimeError(f"hit test failed at {point}")
        return self.scene.objects_at_point(point)


@pytest.fixture
def floor():
    return Floor(SQUARE_500)


@pytest.fixture
def scene(floor):
    scene = Scene()
    scene.add(floor)
    return scene
