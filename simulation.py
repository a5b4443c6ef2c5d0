"""
Reference simulation driver.

Owns the live Cyclone and PressureField pair and advances them one
3-hour tick at a time: pressure field, frontal zone, cyclone, then (every
forecast_every ticks) a fresh forecast ensemble built from deep copies.
"""

import json
import logging
from datetime import datetime

import numpy as np

from config import (
    BASELINE_GLOBAL_SHEAR, BASELINE_GLOBAL_TEMP_K, DEFAULT_BASIN, DEFAULT_MONTH,
    FORECAST_HORIZON_TICKS, MAX_SEEDING_ATTEMPTS,
)
from cyclone_model import CycloneModel, initialize_cyclone, resolve_basin
from forecast_ensemble import generate_path_forecasts
from land import LandMask, TerrainMap
from pressure_field import seed_pressure_field, validate_month
from sim_logger import close_global_logger, log_error, log_info, setup_global_logger
from track_table import track_to_dataframe
from utils import (
    HOURS_PER_TICK, direction_to_compass, get_category, haversine_distance_km,
    knots_to_kph, knots_to_mph, wind_to_pressure,
)

PROGRESS_EVERY_TICKS = 8  # one simulated day


class Simulation:
    # Keys accepted in a JSON settings file
    SETTINGS_KEYS = ('basin', 'month', 'year', 'global_temp', 'global_shear', 'random_seed',
                     'max_ticks', 'forecast_every', 'forecast_horizon', 'max_seeding_attempts',
                     'log_dir', 'enable_file_log', 'log_level')

    def __init__(self, basin=DEFAULT_BASIN, month=DEFAULT_MONTH, year=None,
                 global_temp=BASELINE_GLOBAL_TEMP_K, global_shear=BASELINE_GLOBAL_SHEAR,
                 random_seed=None, max_ticks=400, forecast_every=1,
                 forecast_horizon=FORECAST_HORIZON_TICKS, max_seeding_attempts=MAX_SEEDING_ATTEMPTS,
                 land=None, terrain=None, log_dir='logs', enable_file_log=True, log_level=logging.INFO):
        if max_ticks <= 0:
            raise ValueError(f"Invalid max_ticks: {max_ticks}. Must be positive")
        if forecast_every < 0:
            raise ValueError(f"Invalid forecast_every: {forecast_every}. Must be >= 0 (0 disables forecasts)")

        # === SETUP LOGGING ===
        if isinstance(log_level, str):
            log_level = getattr(logging, log_level.upper())
        if enable_file_log:
            self.logger = setup_global_logger(run_name=basin, run_id=random_seed,
                                              log_dir=log_dir, level=log_level)
        else:
            close_global_logger()
            self.logger = None

        self.basin, _ = resolve_basin(basin)
        self.month = validate_month(month)
        self.year = year if year is not None else datetime.now().year
        self.global_temp = global_temp
        self.global_shear = global_shear
        self.random_seed = random_seed
        self.max_ticks = max_ticks
        self.forecast_every = forecast_every
        self.forecast_horizon = forecast_horizon

        log_info(f"Initializing cyclone simulation (Basin: {self.basin}, Month: {self.month}, "
                 f"T={global_temp} K, Shear={global_shear})...")
        log_info(f"  -> Random seed fixed to {random_seed} for reproducibility")

        self.rng = np.random.RandomState(random_seed)
        # Separate stream for forecasts; the live track is independent of forecast_every
        self.forecast_rng = np.random.RandomState(
            np.random.SeedSequence(random_seed).spawn(1)[0].generate_state(1))
        self.land = land if land is not None else LandMask.empty()
        self.terrain = terrain if terrain is not None else TerrainMap()
        self.model = CycloneModel(self.land, self.terrain, self.rng)

        # === GENESIS ===
        try:
            self.cyclone = initialize_cyclone(
                self.land, self.month, self.basin, global_temp, self.rng,
                max_attempts=max_seeding_attempts)
            log_info(f"  -> Genesis at ({self.cyclone.lat:.2f}, {self.cyclone.lon:.2f}), "
                     f"{self.cyclone.intensity:.1f} kts")

            self.field = seed_pressure_field(self.cyclone.lon, self.cyclone.lat, self.month, self.rng)
        except Exception as e:
            log_error(f"Initialization failed: {e}")
            close_global_logger()
            self.logger = None
            raise

        self.frontal_zone = self.field.frontal_zone(self.month, self.rng)
        log_info(f"  -> Pressure field seeded with {len(self.field)} cells; {self.frontal_zone}")

        self.tick = 0
        self.forecasts = []
        log_info("--- Initialization Complete ---")

    @classmethod
    def from_file(cls, filepath, **overrides):
        """
        Build a Simulation from a JSON settings file.

        Keyword overrides (e.g. land=..., terrain=...) take precedence
        over values in the file.
        """
        with open(filepath, 'r') as f:
            settings = json.load(f)

        unknown = sorted(set(settings) - set(cls.SETTINGS_KEYS))
        if unknown:
            raise ValueError(f"Unknown settings in {filepath}: {unknown}. Valid keys: {list(cls.SETTINGS_KEYS)}")

        settings.update(overrides)
        return cls(**settings)

    def step(self):
        """
        Advance the world by one tick.

        Returns:
            True while the cyclone is still active
        """
        if not self.cyclone.is_active:
            return False

        self.field.advance()
        self.frontal_zone = self.field.frontal_zone(self.month, self.rng)
        self.model.advance(self.cyclone, self.field, self.frontal_zone, self.month,
                           self.global_temp, self.global_shear)
        self.tick += 1

        if self.cyclone.is_active and self.forecast_every and self.tick % self.forecast_every == 0:
            self.forecasts = generate_path_forecasts(self.cyclone, self.field, self.forecast_rng,
                                                     horizon=self.forecast_horizon)

        if self.tick % PROGRESS_EVERY_TICKS == 0:
            self._log_progress()
        return self.cyclone.is_active

    def run(self):
        """Execute ticks until the cyclone dissipates or max_ticks is reached."""
        log_info(f"\n--- Running {self.basin} simulation: up to {self.max_ticks} ticks ---")
        try:
            while self.tick < self.max_ticks and self.step():
                pass
        finally:
            self._log_summary()
            if self.logger:
                log_info(f"    Log saved to: {self.logger.get_filename()}")
                close_global_logger()
                self.logger = None
        return self.cyclone

    def track_dataframe(self):
        return track_to_dataframe(self.cyclone.track, self.basin, self.month, self.year)

    def _log_progress(self):
        c = self.cyclone
        name, _ = get_category(c.intensity, c.is_transitioning, c.is_extratropical, c.is_subtropical)
        log_info(f"  T+{c.age:4d}h | ({c.lat:6.2f}, {c.lon:7.2f}) | {c.intensity:5.1f} kts "
                 f"({knots_to_kph(c.intensity)} km/h, {knots_to_mph(c.intensity)} mph) "
                 f"{wind_to_pressure(c.intensity, c.circulation_size)} hPa | "
                 f"{direction_to_compass(c.direction)} {c.speed:.0f} kts | {name}")

    def _log_summary(self):
        c = self.cyclone
        peak = max(point.intensity for point in c.track)
        distance_km = sum(
            haversine_distance_km(a.lon, a.lat, b.lon, b.lat) for a, b in zip(c.track, c.track[1:]))
        log_info(f"\n--- Run Complete: {self.tick} ticks ({self.tick * HOURS_PER_TICK} h) ---")
        log_info(f"    Final status: {c.status}")
        log_info(f"    Peak intensity: {peak:.1f} kts")
        log_info(f"    ACE: {c.ace:.2f}")
        log_info(f"    Track length: {distance_km:.0f} km")
        log_info(f"    Track points: {len(c.track)}")
