"""
Steering flow from the synthetic pressure field.

The deep-layer steering current is approximated by the geostrophic wind of
the sea-level field, scaled down to a realistic storm motion, plus a beta
drift that pushes storms poleward and slightly westward.

UNIT HANDLING:
    - Pressure gradient: Pa/m (field samples are hPa, converted x100)
    - Output steering components: m/s (u east, v north)
"""

import numpy as np

from utils import (
    AIR_DENSITY, EARTH_RADIUS_M, OMEGA_EARTH,
    ms_to_kts, normalize_longitude, safe_cos_lat,
)

GRADIENT_SPACING_DEG = 0.5
MIN_CORIOLIS = 1e-5
STEERING_SCALE = 0.36

MAX_BETA_V = 5.0    # poleward drift at high latitude (m/s)
MAX_BETA_U = -0.5   # westward drift at high latitude (m/s)
BETA_PHASE_RAD = np.pi / 12  # 15 degrees


def coriolis_parameter(lat):
    """
    Damped Coriolis parameter used by the steering model.

    Its magnitude is clamped to MIN_CORIOLIS so the geostrophic balance
    stays finite at the equator.
    """
    lat_rad = np.radians(lat)
    f = 2 * OMEGA_EARTH * 0.55 * np.cos(1.5 * lat_rad)
    if abs(f) < MIN_CORIOLIS:
        f = MIN_CORIOLIS if f >= 0 else -MIN_CORIOLIS
    return f


def max_steering_speed(lat):
    """Speed cap in m/s; higher latitudes may move faster."""
    return 25.0 + abs(lat) * 0.5


def compute_steering(lon, lat, field, rng, bias=(0.0, 0.0)):
    """
    Compute the steering vector at a point.

    Args:
        lon, lat: Storm position (degrees)
        field: PressureField to sample
        rng: numpy RandomState for the beta-drift jitter
        bias: (u, v) added to the flow in m/s; used to perturb ensemble members

    Returns:
        Tuple (steer_u, steer_v) in m/s
    """
    lat_rad = np.radians(lat)
    d = GRADIENT_SPACING_DEG

    # === PRESSURE GRADIENT (central difference) ===
    dx_m = d * (np.pi / 180) * EARTH_RADIUS_M * safe_cos_lat(lat)
    dy_m = d * (np.pi / 180) * EARTH_RADIUS_M

    p_x_plus = field.sample_at(normalize_longitude(lon + d), lat) * 100.0
    p_x_minus = field.sample_at(normalize_longitude(lon - d), lat) * 100.0
    p_y_plus = field.sample_at(lon, lat + d) * 100.0
    p_y_minus = field.sample_at(lon, lat - d) * 100.0

    grad_x = (p_x_plus - p_x_minus) / (2.0 * dx_m)
    grad_y = (p_y_plus - p_y_minus) / (2.0 * dy_m)

    # === GEOSTROPHIC WIND ===
    f = coriolis_parameter(lat)
    hemisphere_scale = STEERING_SCALE if lat > 0 else -STEERING_SCALE
    u_geo = -grad_y / (AIR_DENSITY * f) * hemisphere_scale
    v_geo = grad_x / (AIR_DENSITY * f) * hemisphere_scale

    # === BETA DRIFT ===
    beta_factor = np.sin(lat_rad - BETA_PHASE_RAD if lat_rad < 0 else lat_rad + BETA_PHASE_RAD)
    beta_v = MAX_BETA_V * beta_factor + (rng.random_sample() - 0.5)
    beta_u = MAX_BETA_U * beta_factor + (rng.random_sample() - 0.5)

    steer_u = u_geo + beta_u + bias[0]
    steer_v = v_geo + beta_v + bias[1]

    # === SPEED CLAMP (direction preserved) ===
    speed = np.hypot(steer_u, steer_v)
    cap = max_steering_speed(lat)
    if speed > cap:
        ratio = cap / speed
        steer_u *= ratio
        steer_v *= ratio

    return float(steer_u), float(steer_v)


def steering_bearing(steer_u, steer_v):
    """Compass bearing (degrees, 0 = north, clockwise) the flow points toward."""
    return float((np.degrees(np.arctan2(steer_u, steer_v)) + 360.0) % 360.0)


def steering_speed_knots(steer_u, steer_v):
    return float(ms_to_kts(np.hypot(steer_u, steer_v)))
