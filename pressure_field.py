"""
Synthetic sea-level pressure field.

The field is a background of 1012 hPa plus a collection of anisotropic
Gaussian pressure cells (highs have positive strength, lows negative).
Each cell carries a few sinusoidal noise layers, drifts with a constant
velocity and "breathes" in the east-west direction through an oscillating
horizontal scale.

Cells are created once by seed_pressure_field() from a fixed climatology
(with bounded random jitter) and live for the whole run.
"""

import numpy as np

from config import DEFAULT_MONTH
from sim_logger import log_warning
from utils import BASE_PRESSURE_HPA, shortest_longitude_distance

DEFAULT_FRONTAL_LATITUDE = 40.0


class NoiseLayer:
    """One sinusoidal ripple: amplitude * sin((lon+ox)/fx) * cos((lat+oy)/fy)."""

    def __init__(self, offset_x, offset_y, freq_x, freq_y, amplitude):
        self.offset_x = offset_x
        self.offset_y = offset_y
        self.freq_x = freq_x
        self.freq_y = freq_y
        self.amplitude = amplitude

    def value_at(self, lon, lat):
        return self.amplitude * np.sin((lon + self.offset_x) / self.freq_x) \
            * np.cos((lat + self.offset_y) / self.freq_y)


class PressureCell:
    """
    An anisotropic Gaussian pressure anomaly.

    Attributes:
        x, y: Center longitude / latitude (degrees)
        sigma_x, sigma_y: Horizontal scales (degrees)
        base_sigma_x: If set, sigma_x oscillates around it
        strength: Peak anomaly in hPa (negative for lows)
        velocity_x, velocity_y: Drift per tick before scaling
    """

    def __init__(self, x, y, sigma_x, sigma_y, strength, velocity_x=0.0, velocity_y=0.0,
                 base_sigma_x=None, base_strength=None, oscillation_phase=0.0,
                 oscillation_speed=0.0, oscillation_amount=0.0, noise_layers=None, name=None):
        self.name = name
        self.x = x
        self.y = y
        self.sigma_x = sigma_x
        self.sigma_y = sigma_y
        self.base_sigma_x = base_sigma_x
        self.strength = strength
        self.base_strength = strength if base_strength is None else base_strength
        self.velocity_x = velocity_x
        self.velocity_y = velocity_y
        self.oscillation_phase = oscillation_phase
        self.oscillation_speed = oscillation_speed
        self.oscillation_amount = oscillation_amount
        self.noise_layers = list(noise_layers or [])

    @property
    def is_high(self):
        return self.strength > 0

    def anomaly_at(self, lon, lat):
        """Gaussian term plus noise at a point; dateline safe."""
        dx = shortest_longitude_distance(lon, self.x)
        dy = lat - self.y
        exponent = -((dx ** 2) / (2 * self.sigma_x ** 2) + (dy ** 2) / (2 * self.sigma_y ** 2))
        value = np.exp(exponent) * self.strength
        for layer in self.noise_layers:
            value = value + layer.value_at(lon, lat)
        return value

    def advance(self):
        self.x += self.velocity_x * 0.3
        self.y += self.velocity_y * 0.1
        self.oscillation_phase += self.oscillation_speed
        if self.base_sigma_x:
            stretch = np.sin(self.oscillation_phase) * self.oscillation_amount
            self.sigma_x = self.base_sigma_x * (1 + stretch)

    def __repr__(self):
        return (f"PressureCell({self.name or 'cell'}: x={self.x:.1f}, y={self.y:.1f}, "
                f"strength={self.strength:+.1f} hPa)")


class FrontalZone:
    """Latitude poleward of which extratropical transition can begin."""

    def __init__(self, latitude):
        self.latitude = latitude

    def __repr__(self):
        return f"FrontalZone(latitude={self.latitude:.1f})"


class PressureField:
    """Mutable collection of pressure cells owned by the simulation driver."""

    def __init__(self, cells=None, base_pressure=BASE_PRESSURE_HPA):
        self.cells = list(cells or [])
        self.base_pressure = base_pressure

    def __len__(self):
        return len(self.cells)

    def __iter__(self):
        return iter(self.cells)

    def add_cell(self, cell):
        self.cells.append(cell)
        return cell

    def sample_at(self, lon, lat):
        """Sea-level pressure in hPa at (lon, lat). No side effects."""
        pressure = self.base_pressure
        for cell in self.cells:
            pressure = pressure + cell.anomaly_at(lon, lat)
        if np.ndim(pressure) == 0:
            return float(pressure)
        return pressure

    def sample_grid(self, lons, lats):
        """Pressure on a regular grid, shaped (len(lats), len(lons))."""
        lon_grid, lat_grid = np.meshgrid(np.asarray(lons, dtype=float), np.asarray(lats, dtype=float))
        return self.sample_at(lon_grid, lat_grid)

    def advance(self):
        """Drift and oscillate every cell by one tick."""
        for cell in self.cells:
            cell.advance()
        return self

    def high_pressure_cells(self, hemisphere=None):
        highs = [c for c in self.cells if c.is_high]
        if hemisphere == 'north':
            return [c for c in highs if c.y > 0]
        if hemisphere == 'south':
            return [c for c in highs if c.y < 0]
        return highs

    def frontal_zone(self, month, rng):
        """
        Derive the frontal-zone latitude from the northern highs.

        The zone sits south of the mean high latitude, further so away
        from August, with up to 3 degrees of random wobble.
        """
        highs = self.high_pressure_cells('north')
        if not highs:
            return FrontalZone(DEFAULT_FRONTAL_LATITUDE)
        mean_lat = sum(c.y for c in highs) / len(highs)
        return FrontalZone(mean_lat - 3 * abs(month - 8) - 3 * rng.random_sample())


# ============================================================================
# CLIMATOLOGICAL SEEDING
# ============================================================================

def _jitter(rng, spread):
    """Uniform draw in [-spread/2, spread/2)."""
    return (rng.random_sample() - 0.5) * spread


def _standard_noise(amplitude_a=0.6, amplitude_b=0.4):
    return [NoiseLayer(0, 0, 12, 12, amplitude_a), NoiseLayer(10, 5, 3, 5, amplitude_b)]


def _subpolar_noise():
    return [NoiseLayer(0, 0, 15, 20, 0.8), NoiseLayer(30, 10, 6, 9, 0.4)]


def _lobe(rng, name, x, y, base_sigma_x, sigma_y, strength, vel_x, vel_y,
          osc_speed, osc_amount, noise_layers):
    """A block-shaped cell whose sigma_x breathes around base_sigma_x."""
    return PressureCell(
        name=name, x=x, y=y,
        base_sigma_x=base_sigma_x, sigma_x=base_sigma_x, sigma_y=sigma_y,
        strength=strength,
        velocity_x=_jitter(rng, vel_x), velocity_y=_jitter(rng, vel_y),
        oscillation_phase=rng.uniform(0, 2 * np.pi),
        oscillation_speed=osc_speed, oscillation_amount=osc_amount,
        noise_layers=noise_layers)


def validate_month(month):
    """Return month if it is an integer in 1..12, else the default month."""
    try:
        valid = float(month).is_integer() and 1 <= int(month) <= 12
    except (TypeError, ValueError):
        valid = False
    if not valid:
        log_warning(f"Invalid month {month!r}; falling back to {DEFAULT_MONTH}")
        return DEFAULT_MONTH
    return int(month)


def seed_pressure_field(cyclone_lon, cyclone_lat, month, rng):
    """
    Populate a PressureField with the fixed climatological cell set.

    Args:
        cyclone_lon, cyclone_lat: Genesis position; transient lows are
            scattered around it
        month: Calendar month 1-12 (invalid values fall back to 8)
        rng: numpy RandomState used for every jitter draw

    Returns:
        PressureField advanced by one tick
    """
    month = validate_month(month)
    seasonal = (np.cos((month - 8) * (np.pi / 6)) + 1) / 2  # 0 in Feb, 1 in Aug
    field = PressureField()

    # 1. Equatorial low-pressure belt (ITCZ)
    field.add_cell(PressureCell(
        name='equatorial_low', x=140, y=2 + _jitter(rng, 5),
        base_sigma_x=300, sigma_x=300, sigma_y=rng.uniform(10, 14),
        strength=-rng.uniform(10, 13),
        velocity_x=_jitter(rng, 0.1), velocity_y=_jitter(rng, 0.1),
        oscillation_phase=rng.uniform(0, 2 * np.pi),
        oscillation_speed=rng.uniform(0.01, 0.02), oscillation_amount=0.1,
        noise_layers=[NoiseLayer(0, 0, 20, 15, 0.5), NoiseLayer(50, 30, 5, 8, 0.2)]))

    # 2. Subtropical high lobes
    field.add_cell(_lobe(
        rng, 'west_pacific_high',
        x=150 + _jitter(rng, 40), y=29 + _jitter(rng, 8) + 12 * seasonal,
        base_sigma_x=rng.uniform(35, 65), sigma_y=rng.uniform(10, 25),
        strength=rng.uniform(12, 18), vel_x=0.9, vel_y=0.3,
        osc_speed=rng.uniform(0.02, 0.03), osc_amount=rng.uniform(0.2, 0.7),
        noise_layers=[NoiseLayer(0, 0, 8, 8, 0.5), NoiseLayer(20, 15, 2, 3, 0.3)]))
    field.add_cell(_lobe(
        rng, 'continental_rim_high',
        x=115 + _jitter(rng, 35), y=31 + _jitter(rng, 10) + 12 * seasonal,
        base_sigma_x=rng.uniform(30, 55), sigma_y=rng.uniform(15, 30),
        strength=rng.uniform(2, 18), vel_x=1.5, vel_y=1.6,
        osc_speed=rng.uniform(0.025, 0.035), osc_amount=rng.uniform(0.25, 0.55),
        noise_layers=_standard_noise()))
    field.add_cell(_lobe(
        rng, 'indian_ocean_high',
        x=50 + _jitter(rng, 15), y=28 + _jitter(rng, 10) + 10 * seasonal,
        base_sigma_x=rng.uniform(30, 40), sigma_y=rng.uniform(10, 18),
        strength=rng.uniform(10, 18), vel_x=0.5, vel_y=0.4,
        osc_speed=rng.uniform(0.025, 0.035), osc_amount=rng.uniform(0.25, 0.45),
        noise_layers=_standard_noise()))

    # 3. Northern oceanic highs
    field.add_cell(_lobe(
        rng, 'hawaiian_high',
        x=-140 + _jitter(rng, 40), y=20 + _jitter(rng, 20) + 6 * seasonal,
        base_sigma_x=rng.uniform(40, 65), sigma_y=rng.uniform(13, 26),
        strength=rng.uniform(20, 30), vel_x=0.5, vel_y=0.4,
        osc_speed=rng.uniform(0.005, 0.015), osc_amount=rng.uniform(0.25, 0.45),
        noise_layers=[NoiseLayer(0, 0, 12, 12, rng.uniform(0, 0.6)),
                      NoiseLayer(10, 5, 3, 5, rng.uniform(0, 0.2))]))
    field.add_cell(_lobe(
        rng, 'azores_high',
        x=-30 + _jitter(rng, 15), y=30 + _jitter(rng, 10) + 6 * seasonal,
        base_sigma_x=rng.uniform(50, 60), sigma_y=rng.uniform(10, 20),
        strength=rng.uniform(32, 38), vel_x=0.5, vel_y=0.4,
        osc_speed=rng.uniform(0.025, 0.035), osc_amount=rng.uniform(0.25, 0.45),
        noise_layers=_standard_noise()))

    # 4. Arctic polar high
    field.add_cell(_lobe(
        rng, 'arctic_high',
        x=-60 + _jitter(rng, 15), y=72 + _jitter(rng, 10),
        base_sigma_x=250, sigma_y=rng.uniform(10, 15),
        strength=rng.uniform(25, 31), vel_x=0.5, vel_y=0.4,
        osc_speed=rng.uniform(0.025, 0.035), osc_amount=rng.uniform(0.25, 0.45),
        noise_layers=_standard_noise()))

    # 5. Transient weak lows near the genesis longitude, kept 10 degrees off the equator
    for i in range(rng.randint(2, 9)):
        if cyclone_lat > 0:
            y = max(10.0, (rng.random_sample() - 0.2) * 20 + cyclone_lat)
        else:
            y = min(-10.0, (rng.random_sample() - 0.7) * 20 + cyclone_lat)
        field.add_cell(PressureCell(
            name=f'transient_low_{i}', x=_jitter(rng, 60) + cyclone_lon, y=y,
            sigma_x=rng.uniform(1, 5), sigma_y=rng.uniform(1, 6),
            strength=rng.uniform(-6, -2),
            velocity_x=0.5 - rng.random_sample(), velocity_y=_jitter(rng, 0.1),
            noise_layers=[NoiseLayer(0, 0, 5, 5, 0.1), NoiseLayer(0, 0, 1, 1, rng.uniform(0, 0.1))]))

    # 6. Winter monsoon trough cell (October to March)
    if (month >= 10 or month <= 3) and rng.random_sample() < 0.85:
        field.add_cell(PressureCell(
            name='winter_monsoon', x=115 + _jitter(rng, 15), y=18 + _jitter(rng, 5),
            sigma_x=rng.uniform(2, 5), sigma_y=10,
            strength=rng.uniform(5, 10),
            velocity_x=_jitter(rng, 0.2), velocity_y=-rng.random_sample(),
            noise_layers=[NoiseLayer(0, 0, 12, 12, 0.0), NoiseLayer(10, 5, 3, 5, 0.0)]))

    # 7. Southern hemisphere highs and the Australian low
    field.add_cell(_lobe(
        rng, 'south_pacific_high',
        x=190 + _jitter(rng, 15), y=-28 + _jitter(rng, 10) - 6 * seasonal,
        base_sigma_x=rng.uniform(40, 50), sigma_y=rng.uniform(5, 15),
        strength=rng.uniform(20, 26), vel_x=0.5, vel_y=0.4,
        osc_speed=rng.uniform(0.025, 0.035), osc_amount=rng.uniform(0.25, 0.45),
        noise_layers=_standard_noise(0.3, 0.2)))
    field.add_cell(_lobe(
        rng, 'south_indian_high',
        x=70 + _jitter(rng, 15), y=-25 + _jitter(rng, 10) - 6 * seasonal,
        base_sigma_x=rng.uniform(40, 50), sigma_y=rng.uniform(5, 15),
        strength=rng.uniform(20, 26), vel_x=0.5, vel_y=0.4,
        osc_speed=rng.uniform(0.025, 0.035), osc_amount=rng.uniform(0.25, 0.45),
        noise_layers=_standard_noise(0.3, 0.2)))
    field.add_cell(_lobe(
        rng, 'antarctic_high',
        x=-60 + _jitter(rng, 15), y=-65 + _jitter(rng, 10),
        base_sigma_x=250, sigma_y=rng.uniform(10, 15),
        strength=rng.uniform(25, 31), vel_x=0.5, vel_y=0.4,
        osc_speed=rng.uniform(0.025, 0.035), osc_amount=rng.uniform(0.25, 0.45),
        noise_layers=_standard_noise()))
    field.add_cell(_lobe(
        rng, 'australian_low',
        x=150 + _jitter(rng, 15), y=-12 + _jitter(rng, 10) - 6 * seasonal,
        base_sigma_x=rng.uniform(30, 40), sigma_y=rng.uniform(5, 10),
        strength=rng.uniform(-10, -4), vel_x=0.5, vel_y=0.4,
        osc_speed=rng.uniform(0.025, 0.035), osc_amount=rng.uniform(0.25, 0.45),
        noise_layers=_standard_noise(0.3, 0.2)))
    field.add_cell(_lobe(
        rng, 'south_atlantic_high',
        x=-30 + _jitter(rng, 15), y=-25 + _jitter(rng, 10) - 6 * seasonal,
        base_sigma_x=rng.uniform(30, 40), sigma_y=rng.uniform(5, 15),
        strength=rng.uniform(20, 26), vel_x=0.5, vel_y=0.4,
        osc_speed=rng.uniform(0.025, 0.035), osc_amount=rng.uniform(0.25, 0.45),
        noise_layers=_standard_noise(0.3, 0.2)))

    # 8. Subpolar low belts, placed relative to the same-hemisphere subtropical highs
    north_highs = [c for c in field.cells if c.is_high and 10 < c.y < 45]
    mean_north = sum(c.y for c in north_highs) / len(north_highs) if north_highs else 45.0
    south_highs = [c for c in field.cells if c.is_high and -40 < c.y < -10]
    mean_south = sum(c.y for c in south_highs) / len(south_highs) if south_highs else -40.0

    field.add_cell(PressureCell(
        name='north_subpolar_low', x=150, y=mean_north + 20 + _jitter(rng, 4),
        base_sigma_x=250, sigma_x=250, sigma_y=rng.uniform(8, 13),
        strength=-rng.uniform(45, 55),
        velocity_x=_jitter(rng, 0.2), velocity_y=_jitter(rng, 0.1),
        oscillation_phase=rng.uniform(0, 2 * np.pi),
        oscillation_speed=rng.uniform(0.015, 0.025), oscillation_amount=0.15,
        noise_layers=_subpolar_noise()))
    field.add_cell(PressureCell(
        name='south_subpolar_low', x=150, y=mean_south - 15 - _jitter(rng, 4),
        base_sigma_x=250, sigma_x=250, sigma_y=rng.uniform(5, 10),
        strength=-rng.uniform(35, 45),
        velocity_x=_jitter(rng, 0.2), velocity_y=_jitter(rng, 0.1),
        oscillation_phase=rng.uniform(0, 2 * np.pi),
        oscillation_speed=rng.uniform(0.015, 0.025), oscillation_amount=0.15,
        noise_layers=_subpolar_noise()))

    field.advance()
    return field
