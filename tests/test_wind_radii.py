import numpy as np
import pytest

from cyclone import Cyclone
from wind_radii import RADII_TRANSITION_RATE, target_wind_radii, update_wind_radii


def test_no_gale_radius_for_weak_storms():
    assert target_wind_radii(30.0, 300.0, 30.0) == (0.0, 0.0, 0.0)
    assert target_wind_radii(34.0, 300.0, 30.0) == (0.0, 0.0, 0.0)


def test_r50_r64_zero_below_threshold():
    r34, r50, r64 = target_wind_radii(45.0, 300.0, 45.0)
    assert r34 > 0
    assert r50 == 0.0
    assert r64 == 0.0


@pytest.mark.parametrize('intensity', [70.0, 100.0, 150.0])
def test_radii_nested(intensity):
    for factor in (0.75, 1.2, 1.75):
        r34, r50, r64 = target_wind_radii(intensity, 300.0, intensity * factor)
        assert r34 > r50 > r64 > 0


def test_radii_relax_toward_target():
    storm = Cyclone(lat=20.0, lon=140.0, intensity=100.0, circulation_size=300.0)
    draw = np.random.RandomState(3).random_sample()
    target = target_wind_radii(100.0, 300.0, 100.0 * (0.75 + draw))

    update_wind_radii(storm, np.random.RandomState(3))

    assert storm.r34 == pytest.approx(target[0] * RADII_TRANSITION_RATE)
    assert storm.r50 == pytest.approx(target[1] * RADII_TRANSITION_RATE)
    assert storm.r64 == pytest.approx(target[2] * RADII_TRANSITION_RATE)


def test_radii_shrink_when_storm_weakens(rng):
    storm = Cyclone(lat=20.0, lon=140.0, intensity=20.0)
    storm.r34, storm.r50, storm.r64 = 200.0, 100.0, 50.0
    update_wind_radii(storm, rng)
    assert storm.r34 == pytest.approx(180.0)
    assert storm.r64 == pytest.approx(45.0)
