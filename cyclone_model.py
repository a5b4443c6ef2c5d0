"""
Cyclone lifecycle state machine.

CycloneModel.advance() is the per-tick update of a single storm: motion
from the steering flow, ocean feedback, land and terrain interaction,
intensity change and the interacting lifecycle sub-states (monsoon
depression, subtropical, extratropical transition, eyewall replacement and
shear events).

Every stochastic draw comes from the injected numpy RandomState, so two
runs seeded identically produce identical tracks.

UNIT HANDLING:
    - Intensity, speed: knots
    - Steering flow: m/s (converted to knots at the boundary)
    - Time: hours (one tick = 3 h)
    - SST: degC
"""

import numpy as np

from config import (
    BASELINE_GLOBAL_SHEAR, BASELINE_GLOBAL_TEMP_K, BASIN_CONFIG, DEFAULT_BASIN,
    JAPAN_LANDFALL_BOX, MAX_SEEDING_ATTEMPTS, NORTH_INDIAN_SHEAR_BOX,
    PHILIPPINES_LANDFALL_BOX, SOUTH_CHINA_SEA_SHEAR_BOX, in_box,
)
from cyclone import STATUS_DISSIPATED, Cyclone, ERCState, ExtratropicalStage
from land import NEAR_LAND_THRESHOLD_DEG
from pressure_field import validate_month
from sim_logger import log_debug, log_warning
from sst_model import sea_surface_temperature
from steering import compute_steering, steering_bearing, steering_speed_knots
from utils import (
    HOURS_PER_TICK, normalize_longitude, safe_cos_lat,
    shortest_angle_difference, tick_distance_deg,
)
from wind_radii import update_wind_radii

# === INTENSITY LIMITS ===
MIN_INTENSITY = 10.0
DISSIPATION_INTENSITY = 17.0
EXTRATROPICAL_DISSIPATION_INTENSITY = 25.0
MAX_ACTIVE_LATITUDE = 70.0

# === CIRCULATION SIZE (km) ===
MIN_CIRCULATION_SIZE = 100.0
MAX_CIRCULATION_SIZE = 800.0

# === THERMODYNAMICS ===
MPI_SST_THRESHOLD = 25.0
EXTRATROPICAL_SST_THRESHOLD = 25.5
# Unreachable with SST clamped at 0 and cooling capped at 5; kept as a latch
COLD_SST_TRANSITION_THRESHOLD = -8.0
MAX_UPWELLING_COOLING = 5.0
UPWELLING_SPEED_THRESHOLD = 5.0

# === MOTION ===
DIRECTION_BLEND_RATE = 0.25
MIN_TRACK_SPEED = 2.0
HEADING_JITTER_DEG = 15.0

# === EYEWALL REPLACEMENT ===
ERC_MIN_INTENSITY = 96.0
ERC_ONSET_PROBABILITY = 0.15


class CycloneSeedingError(RuntimeError):
    """Raised when no oceanic genesis point can be found for a basin/season."""


# ============================================================================
# GENESIS
# ============================================================================

def resolve_basin(basin):
    """Return (code, BasinRange); unknown codes fall back to WPAC."""
    if basin in BASIN_CONFIG:
        return basin, BASIN_CONFIG[basin]
    log_warning(f"Unknown basin {basin!r}; falling back to {DEFAULT_BASIN}")
    return DEFAULT_BASIN, BASIN_CONFIG[DEFAULT_BASIN]


def genesis_latitude_window(basin_range, month, global_temp=BASELINE_GLOBAL_TEMP_K):
    """
    Latitude window (min, max) for genesis in this basin and month.

    The whole window slides by a quarter of its span with the season
    (poleward toward August in the north, equatorward in the south) and
    widens poleward when the planet runs warmer than the 289 K baseline.
    """
    lat_range = basin_range.lat
    span = lat_range.max - lat_range.min
    hemisphere = 1 if lat_range.max > 0 else -1
    seasonal_factor = (np.cos((month - 8) * (np.pi / 6)) + 1) / 2
    seasonal_shift = (span / 4) * (seasonal_factor - 0.5)
    warming_shift = global_temp / 2.89 - 100

    min_lat = lat_range.min + seasonal_shift + hemisphere * max(0.0, warming_shift)
    max_lat = lat_range.max + seasonal_shift + hemisphere * warming_shift
    return min(min_lat, max_lat), max(min_lat, max_lat)


def initialize_cyclone(land, month, basin=DEFAULT_BASIN, global_temp=BASELINE_GLOBAL_TEMP_K, rng=None,
                       max_attempts=MAX_SEEDING_ATTEMPTS, sst_fn=sea_surface_temperature):
    """
    Seed a new cyclone over open water in the requested basin.

    Args:
        land: Landmass collaborator exposing contains((lon, lat))
        month: Calendar month 1-12
        basin: Basin code (WPAC, EPAC, NATL, NIO, SHEM, SIO, SATL)
        global_temp: Global temperature parameter (K)
        rng: numpy RandomState
        max_attempts: Position draws before giving up

    Returns:
        Cyclone with its genesis point recorded as the first track entry

    Raises:
        CycloneSeedingError: if every draw landed on land
    """
    if rng is None:
        rng = np.random.RandomState()
    month = validate_month(month)
    basin, basin_range = resolve_basin(basin)
    min_lat, max_lat = genesis_latitude_window(basin_range, month, global_temp)

    for attempt in range(max_attempts):
        lat = rng.uniform(min_lat, max_lat)
        lon = normalize_longitude(rng.uniform(basin_range.lon.min, basin_range.lon.max))
        if not land.contains((lon, lat)):
            break
    else:
        raise CycloneSeedingError(
            f"No oceanic genesis point found in {basin} (month {month}) after {max_attempts} attempts")

    cyclone = Cyclone(
        lat=lat, lon=lon,
        intensity=rng.uniform(23, 25),
        direction=280.0,
        speed=rng.uniform(10, 15),
        circulation_size=rng.uniform(150, 500),
    )

    # Subtropical genesis over marginal water
    initial_sst = sst_fn(lat, lon, month, global_temp)
    if initial_sst < 27.5 and rng.random_sample() < 0.75 and (lon > 125 or lon < 20):
        cyclone.is_subtropical = True
        cyclone.subtropical_transition_time = rng.randint(0, 25) * HOURS_PER_TICK

    # Monsoon depression genesis; likelier on a warmer planet
    monsoon_probability = min(1.0, max(0.0, 0.7 + global_temp / 72.25 - 4))
    if rng.random_sample() < monsoon_probability:
        cyclone.is_monsoon_depression = True
        cyclone.monsoon_depression_end_time = rng.randint(8, 68) * HOURS_PER_TICK

    cyclone.record_track_point()
    log_debug(f"  -> Genesis in {basin} after {attempt + 1} draw(s): {cyclone}"
              f" subtropical={cyclone.is_subtropical} monsoon={cyclone.is_monsoon_depression}")
    return cyclone


# ============================================================================
# SHARED MOTION HELPERS (also used by the forecast ensemble)
# ============================================================================

def blend_motion(cyclone, steer_u, steer_v, direction_rate, speed_rate):
    """Turn and accelerate the storm part of the way toward the steering flow."""
    angle_diff = shortest_angle_difference(steering_bearing(steer_u, steer_v), cyclone.direction)
    cyclone.direction = (cyclone.direction + angle_diff * direction_rate) % 360.0
    cyclone.speed += (steering_speed_knots(steer_u, steer_v) - cyclone.speed) * speed_rate


def motion_speed_rate(lat):
    """Share of the steering speed taken per tick; faster adjustment poleward of 15 degrees."""
    return 0.15 + max(0.0, abs(lat) / 100.0 - 0.15)


def step_position(cyclone, heading, speed_floor):
    """
    Move the storm one tick along heading (compass degrees).

    The east-west step is divided by a floored cos(lat) so the update
    stays finite at the poles.
    """
    speed = max(speed_floor, cyclone.speed)
    angle_rad = np.radians(90.0 - heading)
    distance_deg = tick_distance_deg(speed)

    new_lat = cyclone.lat + distance_deg * np.sin(angle_rad)
    new_lon = cyclone.lon + distance_deg * np.cos(angle_rad) / safe_cos_lat(cyclone.lat)
    cyclone.lon = float(normalize_longitude(new_lon))
    cyclone.lat = float(np.clip(new_lat, -90.0, 90.0))


# ============================================================================
# STATE MACHINE
# ============================================================================

class CycloneModel:
    """
    Per-tick cyclone update.

    Args:
        land: Landmass collaborator (contains / is_near)
        terrain: Terrain collaborator (elevation_at), or None for flat land
        rng: numpy RandomState shared by every stochastic term
        sst_fn: SST provider with the signature of sea_surface_temperature
    """

    def __init__(self, land, terrain=None, rng=None, sst_fn=sea_surface_temperature):
        self.land = land
        self.terrain = terrain
        self.rng = rng if rng is not None else np.random.RandomState()
        self.sst_fn = sst_fn

    def advance(self, cyclone, field, frontal_zone, month,
                global_temp=BASELINE_GLOBAL_TEMP_K, global_shear=BASELINE_GLOBAL_SHEAR):
        """
        Advance cyclone by one 3-hour tick. Mutates and returns cyclone.

        A dissipated cyclone is terminal and is returned unchanged.
        """
        if not cyclone.is_active:
            log_warning(f"advance() called on a dissipated cyclone at T+{cyclone.age}h; ignored")
            return cyclone

        rng = self.rng
        cyclone.age += HOURS_PER_TICK

        # ACE counts tropical storm strength and above, every 6 hours
        if cyclone.age % 6 == 0 and cyclone.intensity >= 34 and not cyclone.is_extratropical:
            cyclone.ace += cyclone.intensity ** 2 / 10000.0

        if cyclone.is_monsoon_depression and cyclone.age >= cyclone.monsoon_depression_end_time:
            cyclone.is_monsoon_depression = False
            log_debug(f"  -> T+{cyclone.age}h: monsoon depression phase ended")

        # === MOTION ===
        steer_u, steer_v = compute_steering(cyclone.lon, cyclone.lat, field, rng)
        blend_motion(cyclone, steer_u, steer_v, DIRECTION_BLEND_RATE, motion_speed_rate(cyclone.lat))

        # === OCEAN FEEDBACK ===
        self._update_upwelling(cyclone)
        sst = self.sst_fn(cyclone.lat, cyclone.lon, month, global_temp) - cyclone.upwelling_cooling_effect
        if not cyclone.is_transitioning and sst < COLD_SST_TRANSITION_THRESHOLD:
            cyclone.is_transitioning = True
            log_debug(f"  -> T+{cyclone.age}h: transition latched (SST {sst:.1f}C)")

        # === LAND & TERRAIN ===
        point = (cyclone.lon, cyclone.lat)
        over_land = bool(self.land.contains(point))
        near_land = over_land or bool(self.land.is_near(point, NEAR_LAND_THRESHOLD_DEG))
        elevation = self.terrain.elevation_at(point) if self.terrain is not None else 0.0

        # === INTENSITY (exactly one branch) ===
        old_intensity = cyclone.intensity
        if elevation > 0 and cyclone.intensity > 45:
            cyclone.intensity *= 0.90 + cyclone.circulation_size * 0.0001 - elevation / 1000.0
        elif near_land:
            self._land_decay(cyclone)
        elif cyclone.is_extratropical:
            self._extratropical_evolution(cyclone)
        else:
            self._ocean_intensity_change(cyclone, sst, over_land, month, global_shear)

        self._check_extratropical_transition(cyclone, sst, frontal_zone)

        if cyclone.is_subtropical and (cyclone.age >= cyclone.subtropical_transition_time
                                       or cyclone.is_extratropical):
            cyclone.is_subtropical = False
            log_debug(f"  -> T+{cyclone.age}h: subtropical phase ended")

        self._update_circulation_size(cyclone, cyclone.intensity - old_intensity)

        cyclone.intensity = max(MIN_INTENSITY, cyclone.intensity)
        update_wind_radii(cyclone, rng)

        heading = cyclone.direction + rng.uniform(-HEADING_JITTER_DEG, HEADING_JITTER_DEG)
        step_position(cyclone, heading, MIN_TRACK_SPEED)
        cyclone.record_track_point()

        self._check_dissipation(cyclone)
        return cyclone

    # ------------------------------------------------------------------
    # Branch helpers
    # ------------------------------------------------------------------

    def _update_upwelling(self, cyclone):
        if cyclone.speed < UPWELLING_SPEED_THRESHOLD:
            cooling_rate = (UPWELLING_SPEED_THRESHOLD - cyclone.speed) / UPWELLING_SPEED_THRESHOLD * 0.4
            cyclone.upwelling_cooling_effect = min(
                cyclone.upwelling_cooling_effect + cooling_rate, MAX_UPWELLING_COOLING)
        else:
            cyclone.upwelling_cooling_effect = max(cyclone.upwelling_cooling_effect - 0.05, 0.0)

    def _land_decay(self, cyclone):
        regional = 0.0
        if in_box(cyclone.lat, cyclone.lon, JAPAN_LANDFALL_BOX):
            regional += 0.04
        if in_box(cyclone.lat, cyclone.lon, PHILIPPINES_LANDFALL_BOX) and cyclone.intensity < 35:
            regional += 0.08
        cyclone.intensity *= (0.85 + cyclone.circulation_size * 0.0002 - self.rng.random_sample() * 0.01
                              - cyclone.intensity / 1500.0 + regional)
        cyclone.speed *= 0.99

    def _extratropical_evolution(self, cyclone):
        rng = self.rng
        cyclone.speed += 0.5
        if cyclone.extratropical_stage is ExtratropicalStage.DEVELOPING:
            if cyclone.age >= cyclone.extratropical_development_end_time:
                cyclone.extratropical_stage = ExtratropicalStage.DECAYING
                cyclone.intensity += rng.uniform(-6.0, 0.0)
                log_debug(f"  -> T+{cyclone.age}h: extratropical low begins to decay")
            else:
                divisor = rng.uniform(9.0, 14.0)
                cyclone.intensity += (cyclone.extratropical_max_intensity - cyclone.intensity) / divisor
        else:
            cyclone.intensity += rng.uniform(-2.0, 0.0)

    def _ocean_intensity_change(self, cyclone, sst, over_land, month, global_shear):
        rng = self.rng
        mpi = self.maximum_potential_intensity(sst)
        mpi -= self._advance_eyewall_cycle(cyclone, over_land)

        rapid_boost = rng.random_sample() * 0.5 - 0.05 if rng.random_sample() > 0.97 else 0.0
        maturity = min(1.0, max(0.0, (cyclone.intensity - 13) / 65))
        rate = rng.random_sample() * (0.14 + rapid_boost) * maturity
        if cyclone.is_monsoon_depression:
            rate *= (rng.random_sample() + 0.05) * 0.25

        shear = self.environmental_shear(cyclone.lat, cyclone.lon, month)
        shear += self._advance_shear_event(cyclone, month, global_shear)

        cyclone.intensity += (mpi - cyclone.intensity) * rate - shear

    @staticmethod
    def maximum_potential_intensity(sst):
        """Thermodynamic intensity ceiling (kt); zero at or below 25 degC."""
        if sst <= MPI_SST_THRESHOLD:
            return 0.0
        return 264.28 * (1 - np.exp(-0.182 * (sst - MPI_SST_THRESHOLD)))

    def _advance_eyewall_cycle(self, cyclone, over_land):
        """
        Step the ERC sub-state; returns the MPI suppression for this tick.
        """
        rng = self.rng
        erc = cyclone.erc

        if erc.state is ERCState.WEAKENING:
            suppression = erc.mpi_reduction
            cyclone.circulation_size *= 1.01
            if cyclone.age >= erc.end_time:
                erc.start_recovering(cyclone.age + rng.randint(6, 15) * HOURS_PER_TICK)
                log_debug(f"  -> T+{cyclone.age}h: ERC recovering until T+{erc.end_time}h")
            return suppression

        if erc.state is ERCState.RECOVERING:
            cyclone.circulation_size *= 0.995
            if cyclone.age >= erc.end_time:
                erc.finish()
                log_debug(f"  -> T+{cyclone.age}h: ERC complete")
            return 0.0

        if (cyclone.intensity > ERC_MIN_INTENSITY and not over_land
                and not cyclone.is_transitioning and rng.random_sample() < ERC_ONSET_PROBABILITY):
            erc.start_weakening(
                end_time=cyclone.age + rng.randint(4, 13) * HOURS_PER_TICK,
                mpi_reduction=rng.uniform(15.0, 40.0))
            log_debug(f"  -> T+{cyclone.age}h: ERC weakening until T+{erc.end_time}h "
                      f"(MPI -{erc.mpi_reduction:.1f} kt)")
            return erc.mpi_reduction
        return 0.0

    def environmental_shear(self, lat, lon, month):
        """
        Baseline shear from latitude and season, with regional boosts.

        The North Indian Ocean carries a constant boost; the South Indian
        Ocean boost follows the season and turns negative in the southern
        summer.
        """
        season_cos = np.cos((month - 2) * (np.pi / 6))
        season_sin = np.sin((month - 2) * (np.pi / 6))
        nio_boost = 8.5 if in_box(lat, lon, NORTH_INDIAN_SHEAR_BOX) else 0.0
        noise = 6 * self.rng.random_sample()

        if lat > 0:
            lat_gradient = 1.0 + 1.3 * season_cos
            raw = abs(lat) * lat_gradient - noise - 30 + season_cos * 40 + nio_boost
        else:
            lat_gradient = 1.0 + 1.3 * season_sin
            shem_boost = 30.0 * season_sin if (-30 <= lat <= -5 and lon >= 50) else 0.0
            raw = (abs(lat) * lat_gradient - noise - 30 + np.cos((month - 8) * (np.pi / 6)) * 40
                   + nio_boost + shem_boost)
        return max(0.0, raw) / 15.0

    def shear_event_probability(self, lat, lon, month, global_shear):
        winter_half = month >= 11 or month <= 4
        if winter_half and in_box(lat, lon, SOUTH_CHINA_SEA_SHEAR_BOX):
            return 0.55
        scale = global_shear ** 2 / 10000.0
        return (0.045 if winter_half else 0.03) * scale

    def _advance_shear_event(self, cyclone, month, global_shear):
        """Step the shear-event sub-state; returns extra shear for this tick."""
        rng = self.rng
        event = cyclone.shear_event

        if event.active:
            if cyclone.age >= event.end_time:
                event.stop()
                log_debug(f"  -> T+{cyclone.age}h: shear event ended")
                return 0.0
            return event.magnitude

        probability = self.shear_event_probability(cyclone.lat, cyclone.lon, month, global_shear)
        if rng.random_sample() < probability and not cyclone.is_transitioning:
            duration = rng.randint(1, 49) * HOURS_PER_TICK
            magnitude = (-3 + rng.random_sample() * 7 + 1.9 * abs(month - 8) ** 0.5
                         + max(0.0, global_shear / 10 - 10))
            event.start(cyclone.age + duration, magnitude)
            log_debug(f"  -> T+{cyclone.age}h: shear event {magnitude:+.2f} for {duration}h")
            return magnitude
        return 0.0

    # ------------------------------------------------------------------
    # Lifecycle bookkeeping
    # ------------------------------------------------------------------

    def _check_extratropical_transition(self, cyclone, sst, frontal_zone):
        cold = sst < EXTRATROPICAL_SST_THRESHOLD
        poleward_of_front = abs(cyclone.lat) > frontal_zone.latitude
        if not ((not cyclone.is_extratropical and cold and poleward_of_front)
                or (cyclone.is_subtropical and cold)):
            return
        if cyclone.extratropical_stage is not ExtratropicalStage.NONE:
            return

        rng = self.rng
        if rng.random_sample() < 0.4 and abs(cyclone.lat) > 25:
            cyclone.extratropical_stage = ExtratropicalStage.DEVELOPING
            cyclone.extratropical_development_end_time = cyclone.age + rng.randint(4, 30) * HOURS_PER_TICK
            cyclone.extratropical_max_intensity = rng.uniform(45.0, 90.0)
            log_debug(f"  -> T+{cyclone.age}h: extratropical transition (developing to "
                      f"{cyclone.extratropical_max_intensity:.0f} kt until "
                      f"T+{cyclone.extratropical_development_end_time}h)")
        else:
            cyclone.extratropical_stage = ExtratropicalStage.DECAYING
            log_debug(f"  -> T+{cyclone.age}h: extratropical transition (decaying)")

    def _update_circulation_size(self, cyclone, intensity_change):
        if cyclone.is_extratropical or cyclone.is_transitioning:
            cyclone.circulation_size *= 1.03
        elif intensity_change > 0.5:
            cyclone.circulation_size *= 0.99
        else:
            cyclone.circulation_size *= 1.002
        cyclone.circulation_size = min(MAX_CIRCULATION_SIZE,
                                       max(MIN_CIRCULATION_SIZE, cyclone.circulation_size))

    def _check_dissipation(self, cyclone):
        if (cyclone.intensity < DISSIPATION_INTENSITY
                or (cyclone.is_extratropical and cyclone.intensity < EXTRATROPICAL_DISSIPATION_INTENSITY)
                or abs(cyclone.lat) > MAX_ACTIVE_LATITUDE):
            cyclone.status = STATUS_DISSIPATED
            log_debug(f"  -> T+{cyclone.age}h: dissipated at ({cyclone.lat:.1f}, {cyclone.lon:.1f}) "
                      f"with {cyclone.intensity:.0f} kt")
