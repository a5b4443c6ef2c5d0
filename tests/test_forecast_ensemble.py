import numpy as np
import pytest

import forecast_ensemble
from config import FORECAST_MODELS, ForecastModel
from cyclone import Cyclone
from cyclone_model import blend_motion
from forecast_ensemble import ForecastTrack, generate_path_forecasts


def cell_state(field):
    return [(c.x, c.y, c.sigma_x, c.oscillation_phase) for c in field]


@pytest.fixture
def live_storm():
    storm = Cyclone(lat=18.0, lon=135.0, intensity=85.0, direction=290.0, speed=12.0)
    storm.is_transitioning = True
    storm.record_track_point()
    return storm


def test_live_state_untouched(live_storm, seeded_field, rng):
    before_storm = (live_storm.lat, live_storm.lon, live_storm.direction, live_storm.speed,
                    live_storm.intensity, list(live_storm.track))
    before_field = cell_state(seeded_field)

    generate_path_forecasts(live_storm, seeded_field, rng)

    assert (live_storm.lat, live_storm.lon, live_storm.direction, live_storm.speed,
            live_storm.intensity, live_storm.track) == before_storm
    assert cell_state(seeded_field) == before_field


def test_default_ensemble_shape(live_storm, seeded_field, rng):
    forecasts = generate_path_forecasts(live_storm, seeded_field, rng)
    assert len(forecasts) == len(FORECAST_MODELS) == 1
    forecast = forecasts[0]
    assert isinstance(forecast, ForecastTrack)
    assert forecast.name == 'ENAI'
    assert len(forecast.track) == 25
    assert (forecast.track[0].lon, forecast.track[0].lat) == (live_storm.lon, live_storm.lat)


def test_intensity_and_flags_frozen(live_storm, seeded_field, rng):
    track = generate_path_forecasts(live_storm, seeded_field, rng, horizon=10)[0].track
    assert len(track) == 11
    assert all(point.intensity == 85.0 for point in track)
    assert all(point.is_transitioning for point in track)
    assert not any(point.is_extratropical for point in track)


def test_members_move_every_tick(live_storm, seeded_field, rng):
    track = generate_path_forecasts(live_storm, seeded_field, rng)[0].track
    for prev, point in zip(track, track[1:]):
        assert (prev.lon, prev.lat) != (point.lon, point.lat)
        assert -180.0 <= point.lon <= 180.0


def test_bias_separates_members(live_storm, flat_field):
    models = (ForecastModel('EAST', 5.0, 0.0), ForecastModel('WEST', -5.0, 0.0))
    east, west = generate_path_forecasts(live_storm, flat_field, np.random.RandomState(0), models=models)
    assert east.name == 'EAST' and west.name == 'WEST'
    assert east.track[-1].lon > west.track[-1].lon


def test_members_turn_and_accelerate_gently(live_storm, flat_field, monkeypatch):
    rates = []

    def record_blend(cyclone, steer_u, steer_v, direction_rate, speed_rate):
        rates.append((direction_rate, speed_rate))
        blend_motion(cyclone, steer_u, steer_v, direction_rate, speed_rate)

    monkeypatch.setattr(forecast_ensemble, 'blend_motion', record_blend)
    generate_path_forecasts(live_storm, flat_field, np.random.RandomState(0), horizon=4)
    assert rates == [(0.10, 0.05)] * 4
