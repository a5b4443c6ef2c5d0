"""
===============================================================================
CYCLONE SIM - UNIT CONVERSION & GEO UTILITIES
===============================================================================

This module provides the unit conversions and small geographic helpers
shared by every part of the cyclone simulator.

INTERNAL UNITS:
    - Steering flow: m/s
    - Storm motion and intensity: knots
    - Pressure: hPa
    - Distance: km (track step) and degrees (positions)

LONGITUDE CONVENTION:
    - Positions are kept in [-180, 180]
    - Differences between longitudes always take the short way round,
      so Gaussian cells and ocean currents stay continuous across the
      dateline

===============================================================================
"""

import numpy as np

# ============================================================================
# FUNDAMENTAL CONSTANTS
# ============================================================================

# Earth
EARTH_RADIUS_M = 6.371e6  # meters
EARTH_RADIUS_KM = 6371.0  # kilometers
KM_PER_DEGREE = 111.0     # km per degree of latitude (simulation convention)

# Atmospheric
OMEGA_EARTH = 7.292115e-5  # Earth's angular velocity (rad/s)
AIR_DENSITY = 1.225        # kg/m³ at sea level
BASE_PRESSURE_HPA = 1012.0  # Background pressure of the synthetic field
STANDARD_PRESSURE_HPA = 1013.25

# Track stepping
HOURS_PER_TICK = 3
KM_PER_NM = 1.852

# Minimum central pressure reported for any intensity (hPa)
PRESSURE_FLOOR_HPA = 640

# ============================================================================
# VELOCITY CONVERSIONS
# ============================================================================

def ms_to_kts(speed_ms):
    """Convert wind speed from meters per second to knots."""
    return speed_ms * 1.94384

def knots_to_kph(speed_kts):
    return int(round(speed_kts * KM_PER_NM))

def knots_to_mph(speed_kts):
    return int(round(speed_kts * 1.15078))

# ============================================================================
# DISTANCE CONVERSIONS
# ============================================================================

def km_to_deg(distance_km):
    """
    Convert distance in kilometers to degrees (approximate).

    Note:
        Uses 111 km/degree as standard approximation
    """
    return distance_km / KM_PER_DEGREE

def tick_distance_deg(speed_kts, hours=HOURS_PER_TICK):
    """Distance in degrees covered at speed_kts during one simulation tick."""
    return km_to_deg(speed_kts * hours * KM_PER_NM)

# ============================================================================
# LONGITUDE HANDLING
# ============================================================================

def normalize_longitude(lon):
    """
    Wrap a longitude into [-180, 180).

    Works on scalars and numpy arrays. Idempotent.
    """
    return (lon + 180.0) % 360.0 - 180.0

def shortest_longitude_distance(lon1, lon2):
    """
    Signed shortest angular distance lon1 - lon2 in degrees.

    A raw difference beyond +/-180 is wrapped the other way round the
    globe, so 179.9 and -179.9 are 0.2 degrees apart.
    """
    return (lon1 - lon2 + 180.0) % 360.0 - 180.0

def shortest_angle_difference(target_deg, current_deg):
    """Signed compass difference target - current in (-180, 180]."""
    diff = (target_deg - current_deg) % 360.0
    if diff > 180.0:
        diff -= 360.0
    return diff

# ============================================================================
# HAVERSINE DISTANCE (Great Circle)
# ============================================================================

def haversine_distance_km(lon1, lat1, lon2, lat2):
    """
    Calculate great circle distance between two points on Earth.

    Args:
        lon1, lat1: Longitude and latitude of point 1 (degrees)
        lon2, lat2: Longitude and latitude of point 2 (degrees)

    Returns:
        Distance in kilometers
    """
    lon1_rad, lat1_rad, lon2_rad, lat2_rad = map(np.deg2rad, [lon1, lat1, lon2, lat2])
    dlon = lon2_rad - lon1_rad
    dlat = lat2_rad - lat1_rad

    a = np.sin(dlat/2)**2 + np.cos(lat1_rad) * np.cos(lat2_rad) * np.sin(dlon/2)**2
    c = 2 * np.arctan2(np.sqrt(a), np.sqrt(1-a))

    return EARTH_RADIUS_KM * c

# ============================================================================
# WIND <-> PRESSURE
# ============================================================================

_PRESSURE_REF_WIND = 48.0 ** 1.6

def wind_to_pressure(wind_kts, circulation_size=300.0):
    """
    Estimate minimum central pressure (hPa) from maximum sustained wind.

    The base wind-pressure curve is deepened in proportion to the size of
    the circulation. Downstream report writers rely on this exact formula.

    Args:
        wind_kts: Maximum sustained wind in knots
        circulation_size: Outer circulation size in km

    Returns:
        Integer pressure in hPa, never below 640
    """
    base = STANDARD_PRESSURE_HPA - 11.5 * (wind_kts ** 1.6) / _PRESSURE_REF_WIND
    pressure = base + (base - STANDARD_PRESSURE_HPA) * (0.002 * circulation_size)
    return max(PRESSURE_FLOOR_HPA, int(round(pressure)))

def pressure_to_wind(pressure_hpa, circulation_size=300.0):
    """
    Inverse of wind_to_pressure for the same circulation size.

    Returns:
        Maximum sustained wind in knots (>= 0)
    """
    deficit = (STANDARD_PRESSURE_HPA - pressure_hpa) / (1.0 + 0.002 * circulation_size)
    if deficit <= 0:
        return 0.0
    return (deficit * _PRESSURE_REF_WIND / 11.5) ** (1 / 1.6)

# ============================================================================
# CLASSIFICATION
# ============================================================================

def get_category(wind_kts, is_transitioning=False, is_extratropical=False, is_subtropical=False):
    """
    Classify a storm for display.

    Returns:
        Tuple (name, short_name)
    """
    if is_subtropical:
        if wind_kts < 34:
            return "Subtropical Depression", "SD"
        return "Subtropical Storm", "SS"
    if is_extratropical:
        return "Extratropical Cyclone", "EXT"
    if is_transitioning:
        return "Extratropical Transition", "ET"
    if wind_kts < 24:  return "Low Pressure Area", "LPA"
    if wind_kts < 34:  return "Tropical Depression", "TD"
    if wind_kts < 64:  return "Tropical Storm", "TS"
    if wind_kts < 83:  return "Category 1", "Cat 1"
    if wind_kts < 96:  return "Category 2", "Cat 2"
    if wind_kts < 113: return "Category 3", "Cat 3"
    if wind_kts < 137: return "Category 4", "Cat 4"
    return "Category 5", "Cat 5"

def atcf_type_code(wind_kts, is_extratropical=False, is_subtropical=False):
    """
    Best-track storm type code.

    Thresholds (kt): 24 TD, 34 TS, 64 TY, 130 ST. Subtropical and
    extratropical flags override the intensity tiers.
    """
    if is_subtropical:
        return 'SD' if wind_kts < 34 else 'SS'
    if is_extratropical:
        return 'EX'
    if wind_kts >= 130: return 'ST'
    if wind_kts >= 64:  return 'TY'
    if wind_kts >= 34:  return 'TS'
    if wind_kts >= 24:  return 'TD'
    if wind_kts > 0:    return 'DB'
    return 'LO'

_COMPASS_POINTS = ["N", "NNE", "NE", "ENE", "E", "ESE", "SE", "SSE",
                   "S", "SSW", "SW", "WSW", "W", "WNW", "NW", "NNW"]

def direction_to_compass(deg):
    """Convert a bearing in degrees to a 16-point compass name."""
    val = int(np.floor((deg % 360.0) / 22.5 + 0.5))
    return _COMPASS_POINTS[val % 16]

MIN_COS_LAT = np.cos(np.radians(89.0))

def safe_cos_lat(lat):
    """cos(lat) floored at its 89-degree value so east-west terms stay finite at the poles."""
    return max(float(np.cos(np.radians(lat))), MIN_COS_LAT)
