"""
Sea-surface temperature synthesis.

SST is a smooth function of latitude, month and the global temperature
parameter, perturbed by a fixed set of named ocean currents. All functions
accept scalars or numpy arrays.

UNIT HANDLING:
    - global_temp_k: Kelvin (baseline 289 K = 16 degC)
    - Output: degC, clamped to [0, 60]
"""

import numpy as np

from config import BASELINE_GLOBAL_TEMP_K, OCEAN_CURRENTS, SOUTH_CHINA_SEA_CENTER
from utils import shortest_longitude_distance

SST_MIN_C = 0.0
SST_MAX_C = 60.0
EQUATORIAL_BAND_DEG = 12.0


def _gaussian_influence(lat, lon, center_lat, center_lon, sigma_lat, sigma_lon):
    d_lon = shortest_longitude_distance(lon, center_lon)
    d_lat = lat - center_lat
    return np.exp(-((d_lon ** 2) / (2 * sigma_lon ** 2) + (d_lat ** 2) / (2 * sigma_lat ** 2)))


def ocean_current_adjustment(lat, lon, month):
    """Summed SST perturbation (degC) from all ocean currents."""
    adjustment = 0.0
    for current in OCEAN_CURRENTS:
        adjustment = adjustment + current.max_effect * _gaussian_influence(
            lat, lon, current.center_lat, current.center_lon, current.sigma_lat, current.sigma_lon)

    # South China Sea: cooling widens and strengthens away from August
    month_offset = abs(month - 8)
    scs_effect = -1.0 - 0.5 * month_offset
    scs_sigma_lon = 8.0 + month_offset
    adjustment = adjustment + scs_effect * _gaussian_influence(
        lat, lon, SOUTH_CHINA_SEA_CENTER[0], SOUTH_CHINA_SEA_CENTER[1], 12.0, scs_sigma_lon)
    return adjustment


def sea_surface_temperature(lat, lon, month, global_temp_k=BASELINE_GLOBAL_TEMP_K):
    """
    Synthesize SST at a point (or array of points).

    Args:
        lat, lon: Position in degrees
        month: Calendar month 1-12
        global_temp_k: Global mean temperature parameter in Kelvin

    Returns:
        SST in degC
    """
    anomaly = global_temp_k - BASELINE_GLOBAL_TEMP_K
    lat = np.asarray(lat, dtype=float)
    lon = np.asarray(lon, dtype=float)
    abs_lat = np.abs(lat)

    seasonal_cos = np.cos((month - 8) * (np.pi / 6))
    seasonal_modifier = np.where(lat > 0, 2.7 + seasonal_cos * 1.9, 2.0 - seasonal_cos * 1.3)

    tropical_sst = 32.0 + 0.6 * anomaly
    extratropical_sst = np.maximum(
        10.0,
        tropical_sst - (abs_lat - EQUATORIAL_BAND_DEG) / seasonal_modifier + np.abs(lat / 60.0) ** 1.6)
    base_sst = np.where(abs_lat < EQUATORIAL_BAND_DEG, tropical_sst, extratropical_sst)

    sst = np.clip(base_sst + ocean_current_adjustment(lat, lon, month), SST_MIN_C, SST_MAX_C)
    if sst.ndim == 0:
        return float(sst)
    return sst


def sst_grid(lons, lats, month, global_temp_k=BASELINE_GLOBAL_TEMP_K):
    """SST on a regular grid; returns an array shaped (len(lats), len(lons))."""
    lon_grid, lat_grid = np.meshgrid(np.asarray(lons, dtype=float), np.asarray(lats, dtype=float))
    return sea_surface_temperature(lat_grid, lon_grid, month, global_temp_k)
