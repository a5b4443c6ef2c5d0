import pandas as pd

from config import BASIN_ATCF_CODES
from utils import HOURS_PER_TICK, atcf_type_code, wind_to_pressure

TRACK_COLUMNS = ['datetime', 'basin', 'latitude', 'longitude', 'max_wind_kts', 'min_pressure_mb', 'storm_type']


def track_to_dataframe(track, basin, month, year):
    """
    Tabulate a cyclone track as best-track style records.

    The first point is stamped 00 UTC on the first of the month and each
    following point 3 hours later. Wind is rounded to whole knots before
    the central pressure and storm type are derived from it, matching what
    report writers print.

    Returns a pandas DataFrame with one row per track point.
    """
    start = pd.Timestamp(year=int(year), month=int(month), day=1)
    basin_code = BASIN_ATCF_CODES.get(basin, 'WP')

    records = []
    for index, point in enumerate(track):
        max_wind_kts = int(round(point.intensity))
        records.append([
            start + pd.Timedelta(hours=HOURS_PER_TICK * index),
            basin_code,
            round(point.lat, 1),
            round(point.lon, 1),
            max_wind_kts,
            wind_to_pressure(max_wind_kts, point.circulation_size),
            atcf_type_code(max_wind_kts, point.is_extratropical, point.is_subtropical),
        ])

    return pd.DataFrame(records, columns=TRACK_COLUMNS)
