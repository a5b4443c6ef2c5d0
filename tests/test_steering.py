import numpy as np
import pytest

from pressure_field import PressureCell, PressureField
from steering import (
    MIN_CORIOLIS, compute_steering, coriolis_parameter, max_steering_speed,
    steering_bearing, steering_speed_knots,
)


def test_coriolis_clamped_near_singularity():
    # cos(1.5 * 60 deg) == 0
    assert abs(coriolis_parameter(60.0)) >= MIN_CORIOLIS
    assert coriolis_parameter(15.0) > 0


def test_flat_field_gives_beta_drift_only(flat_field):
    u, v = compute_steering(140.0, 20.0, flat_field, np.random.RandomState(0))
    # poleward and roughly westward in the northern hemisphere
    assert v > 0
    assert u < 0.5


def test_beta_drift_poleward_in_south(flat_field):
    u, v = compute_steering(140.0, -20.0, flat_field, np.random.RandomState(0))
    assert v < 0


def test_bias_is_added(flat_field):
    base = compute_steering(140.0, 20.0, flat_field, np.random.RandomState(3))
    biased = compute_steering(140.0, 20.0, flat_field, np.random.RandomState(3), bias=(1.0, -0.5))
    assert biased[0] - base[0] == pytest.approx(1.0)
    assert biased[1] - base[1] == pytest.approx(-0.5)


@pytest.mark.parametrize('lat', [-60.0, -15.0, 0.0, 0.3, 15.0, 45.0, 89.9])
def test_speed_clamped(lat):
    field = PressureField([PressureCell(x=140.3, y=lat + 0.2, sigma_x=0.5, sigma_y=0.5, strength=1e5)])
    u, v = compute_steering(140.0, lat, field, np.random.RandomState(1))
    assert np.isfinite(u) and np.isfinite(v)
    assert np.hypot(u, v) <= max_steering_speed(lat) + 1e-9


def test_flow_around_high_is_clockwise_in_north():
    # A high to the north-west of the storm steers it toward the south-west quadrant
    field = PressureField([PressureCell(x=130.0, y=30.0, sigma_x=10.0, sigma_y=10.0, strength=20.0)])
    u, v = compute_steering(140.0, 20.0, field, np.random.RandomState(0))
    assert 180.0 < steering_bearing(u, v) < 360.0


def test_bearing_and_speed_helpers():
    assert steering_bearing(0.0, 1.0) == pytest.approx(0.0)
    assert steering_bearing(1.0, 0.0) == pytest.approx(90.0)
    assert steering_bearing(-1.0, 0.0) == pytest.approx(270.0)
    assert steering_speed_knots(3.0, 4.0) == pytest.approx(5.0 * 1.94384)
