import numpy as np
import pytest

from cyclone import Cyclone
from pressure_field import FrontalZone, PressureField, seed_pressure_field


class FakeLand:
    """Landmass stand-in with fixed answers."""

    def __init__(self, over_land=False, near_land=False):
        self.over_land = over_land
        self.near_land = near_land
        self.queries = []

    def contains(self, point):
        self.queries.append(point)
        return self.over_land

    def is_near(self, point, threshold=0.1):
        return self.near_land


class FakeTerrain:
    def __init__(self, elevation=0.0):
        self.elevation = elevation

    def elevation_at(self, point):
        return self.elevation


def constant_sst(value):
    def sst_fn(lat, lon, month, global_temp_k=289.0):
        return value
    return sst_fn


@pytest.fixture
def rng():
    return np.random.RandomState(1234)


@pytest.fixture
def ocean():
    return FakeLand()


@pytest.fixture
def flat_field():
    """A field with no cells: zero pressure gradient everywhere."""
    return PressureField([])


@pytest.fixture
def seeded_field():
    return seed_pressure_field(140.0, 15.0, 8, np.random.RandomState(99))


@pytest.fixture
def far_front():
    return FrontalZone(40.0)


@pytest.fixture
def storm():
    return Cyclone(lat=20.0, lon=140.0, intensity=60.0, direction=300.0, speed=10.0, circulation_size=300.0)
