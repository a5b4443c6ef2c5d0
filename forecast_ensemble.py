"""
Forecast ensemble generator.

Each ensemble member runs a simplified copy of the live storm forward:
the pressure-field copy drifts, the storm turns and accelerates toward the
member's biased steering flow and moves, but intensity and lifecycle flags
are frozen at their current values. The spread between members is what an
uncertainty cone is built from.
"""

import copy
from collections import namedtuple

from config import FORECAST_HORIZON_TICKS, FORECAST_MODELS
from cyclone_model import blend_motion, step_position
from steering import compute_steering

FORECAST_DIRECTION_RATE = 0.10
FORECAST_SPEED_RATE = 0.05
FORECAST_MIN_SPEED = 3.0

ForecastPoint = namedtuple('ForecastPoint', ['lon', 'lat', 'intensity', 'is_transitioning', 'is_extratropical'])
ForecastTrack = namedtuple('ForecastTrack', ['name', 'track'])


def _forecast_point(cyclone):
    return ForecastPoint(cyclone.lon, cyclone.lat, cyclone.intensity,
                         cyclone.is_transitioning, cyclone.is_extratropical)


def run_forecast_model(model, cyclone, field, rng, horizon=FORECAST_HORIZON_TICKS):
    """
    Run one ensemble member.

    The cyclone and field passed in are deep-copied first and are left
    untouched.

    Returns:
        ForecastTrack with horizon + 1 points, the first being the current position
    """
    member = cyclone.copy()
    member_field = copy.deepcopy(field)
    bias = (model.bias_u, model.bias_v)

    track = [_forecast_point(member)]
    for _ in range(horizon):
        member_field.advance()
        steer_u, steer_v = compute_steering(member.lon, member.lat, member_field, rng, bias=bias)
        blend_motion(member, steer_u, steer_v, FORECAST_DIRECTION_RATE, FORECAST_SPEED_RATE)
        step_position(member, member.direction, FORECAST_MIN_SPEED)
        track.append(_forecast_point(member))

    return ForecastTrack(model.name, track)


def generate_path_forecasts(cyclone, field, rng, models=FORECAST_MODELS, horizon=FORECAST_HORIZON_TICKS):
    """
    Build the forecast ensemble from the current state.

    Args:
        cyclone: Live Cyclone (not mutated)
        field: Live PressureField (not mutated)
        rng: numpy RandomState for the steering jitter
        models: Iterable of ForecastModel(name, bias_u, bias_v)
        horizon: Ticks per member

    Returns:
        List of ForecastTrack(name, track), one per model
    """
    return [run_forecast_model(model, cyclone, field, rng, horizon) for model in models]
