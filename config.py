"""
Static configuration for the cyclone simulator.

Everything here is loaded once at import time and is read-only for the
lifetime of the process:
    - BASIN_CONFIG: genesis seeding ranges per basin code
    - TERRAIN_FEATURES: named elevated terrain polygons (GeoJSON features)
    - OCEAN_CURRENTS: Gaussian SST perturbations
    - FORECAST_MODELS: named ensemble members and their steering bias
"""

from collections import namedtuple
from types import MappingProxyType

import geojson

# ============================================================================
# SIMULATION DEFAULTS
# ============================================================================

DEFAULT_BASIN = 'WPAC'
DEFAULT_MONTH = 8
BASELINE_GLOBAL_TEMP_K = 289.0
BASELINE_GLOBAL_SHEAR = 100.0
MAX_SEEDING_ATTEMPTS = 1000
FORECAST_HORIZON_TICKS = 24

# ============================================================================
# BASIN CLIMATOLOGY
# ============================================================================

Range = namedtuple('Range', ['min', 'max'])
BasinRange = namedtuple('BasinRange', ['lon', 'lat'])

# Longitudes above 180 are east of the dateline; they are normalised when a
# seed point is drawn.
BASIN_CONFIG = MappingProxyType({
    'WPAC': BasinRange(lon=Range(100, 180), lat=Range(5, 25)),     # Western North Pacific
    'EPAC': BasinRange(lon=Range(180, 260), lat=Range(5, 20)),     # Eastern/Central North Pacific
    'NATL': BasinRange(lon=Range(260, 350), lat=Range(6, 32)),     # North Atlantic
    'NIO':  BasinRange(lon=Range(60, 100), lat=Range(5, 25)),      # North Indian Ocean
    'SHEM': BasinRange(lon=Range(140, 200), lat=Range(-20, -10)),  # South Pacific
    'SIO':  BasinRange(lon=Range(30, 140), lat=Range(-20, -10)),   # South Indian Ocean
    'SATL': BasinRange(lon=Range(-50, 15), lat=Range(-25, -10)),   # South Atlantic
})

# Two-letter basin prefixes used by best-track style outputs
BASIN_ATCF_CODES = MappingProxyType({
    'WPAC': 'WP', 'EPAC': 'EP', 'NATL': 'AL', 'NIO': 'IO',
    'SHEM': 'SH', 'SIO': 'SH', 'SATL': 'SL',
})

# ============================================================================
# TERRAIN FEATURES
# ============================================================================

def _terrain(name, ring, elevation):
    return geojson.Feature(
        geometry=geojson.Polygon([ring]),
        properties={"name": name, "elevation": elevation},
    )

# Elevation is an effective weakening value in meters, not a summit height.
TERRAIN_FEATURES = (
    _terrain("taiwan_mountains",
             [(120.8, 22.3), (121.0, 24.0), (121.4, 24.5), (121.5, 23.5), (120.8, 22.3)], 265),
    _terrain("luzon_cordillera",
             [(120.6, 15.9), (120.5, 16.5), (121.2, 18.2), (121.8, 18.0), (120.6, 15.9)], 185),
    _terrain("tibet_alps",
             [(75.0, 36.0), (97.4, 29.0), (86.5, 27.7), (79.0, 30.6), (75.0, 36.0)], 275),
    _terrain("yungui_alps",
             [(95.0, 31.6), (104.4, 29.0), (108.5, 21.7), (95.0, 24.6), (95.0, 31.6)], 205),
    _terrain("hainan_island",
             [(111.05, 20.14), (110.87, 19.98), (110.69, 19.40), (110.44, 18.77), (109.94, 18.43),
              (109.18, 18.35), (108.68, 18.93), (108.82, 19.49), (109.2, 19.99), (109.77, 20.08),
              (110.33, 20.01), (110.8, 20.07), (111.05, 20.14)], 0),
    _terrain("honshu_west",
             [(131.60, 34.20), (136.23, 34.91), (140.92, 37.14), (131.60, 34.20)], 0),
    _terrain("kyushu",
             [(131.20, 31.55), (130.30, 33.48), (131.09, 33.42), (131.50, 33.52), (131.20, 31.55)], 0),
)

# ============================================================================
# OCEAN CURRENTS (SST perturbations)
# ============================================================================

# Amplitude in degC; sigmas in degrees. The South China Sea entry is
# month-dependent and is built by sst_model.
OceanCurrent = namedtuple('OceanCurrent',
                          ['name', 'center_lat', 'center_lon', 'max_effect', 'sigma_lat', 'sigma_lon'])

OCEAN_CURRENTS = (
    OceanCurrent('california', 30.0, -125.0, -3.0, 15.0, 50.0),
    OceanCurrent('gulf_stream', 35.0, -60.0, 4.0, 20.0, 25.0),
    OceanCurrent('canary', 30.0, -20.0, -4.0, 15.0, 40.0),
    OceanCurrent('kuroshio', 27.0, 140.0, 1.0, 5.0, 20.0),
    OceanCurrent('gulf_of_mexico', 25.0, -90.0, 3.0, 7.0, 10.0),
    OceanCurrent('somali', 10.0, 50.0, -4.5, 10.0, 15.0),
    OceanCurrent('benguela', -25.0, 5.0, -6.0, 15.0, 25.0),
)

SOUTH_CHINA_SEA_CENTER = (20.0, 115.0)  # (lat, lon)

# ============================================================================
# FORECAST MODELS
# ============================================================================

ForecastModel = namedtuple('ForecastModel', ['name', 'bias_u', 'bias_v'])

FORECAST_MODELS = (
    ForecastModel('ENAI', 0.5, -0.5),
)

# ============================================================================
# REGIONAL BOXES (lat_min, lat_max, lon_min, lon_max)
# ============================================================================

JAPAN_LANDFALL_BOX = (30.0, 40.0, 130.0, 140.0)
PHILIPPINES_LANDFALL_BOX = (5.0, 18.0, 120.0, 127.0)
NORTH_INDIAN_SHEAR_BOX = (5.0, 30.0, 30.0, 100.0)
SOUTH_CHINA_SEA_SHEAR_BOX = (16.0, 90.0, 100.0, 121.0)


def in_box(lat, lon, box):
    lat_min, lat_max, lon_min, lon_max = box
    return lat_min <= lat <= lat_max and lon_min <= lon <= lon_max
