import numpy as np
import pytest

from pressure_field import (
    DEFAULT_FRONTAL_LATITUDE, NoiseLayer, PressureCell, PressureField, seed_pressure_field, validate_month,
)


def test_base_pressure_without_cells(flat_field):
    assert flat_field.sample_at(10.0, 10.0) == pytest.approx(1012.0)


def test_gaussian_peak_at_cell_center():
    field = PressureField([PressureCell(x=100.0, y=20.0, sigma_x=5.0, sigma_y=5.0, strength=-20.0)])
    assert field.sample_at(100.0, 20.0) == pytest.approx(992.0)
    assert field.sample_at(100.0, 25.0) == pytest.approx(1012.0 - 20.0 * np.exp(-0.5))


def test_continuous_across_dateline():
    field = PressureField([PressureCell(x=179.5, y=0.0, sigma_x=3.0, sigma_y=3.0, strength=15.0)])
    east = field.sample_at(179.99, 0.0)
    west = field.sample_at(-179.99, 0.0)
    assert abs(east - west) < 0.05
    # Same point expressed past the dateline
    assert field.sample_at(-180.5, 0.0) == pytest.approx(field.sample_at(179.5, 0.0))


def test_noise_layers_are_added():
    layer = NoiseLayer(0, 0, 1, 1, 2.0)
    cell = PressureCell(x=0.0, y=0.0, sigma_x=1.0, sigma_y=1.0, strength=0.0, noise_layers=[layer])
    field = PressureField([cell])
    assert field.sample_at(1.0, 0.0) == pytest.approx(1012.0 + 2.0 * np.sin(1.0))


def test_sample_grid_shape(seeded_field):
    grid = seeded_field.sample_grid(np.arange(100, 181, 10), np.arange(-10, 31, 5))
    assert grid.shape == (9, 9)
    assert np.all(np.isfinite(grid))


class TestAdvance:

    def test_drift_and_breathing(self):
        cell = PressureCell(x=0.0, y=0.0, sigma_x=10.0, sigma_y=5.0, strength=10.0,
                            velocity_x=1.0, velocity_y=1.0, base_sigma_x=10.0,
                            oscillation_phase=0.0, oscillation_speed=np.pi / 2, oscillation_amount=0.5)
        PressureField([cell]).advance()
        assert cell.x == pytest.approx(0.3)
        assert cell.y == pytest.approx(0.1)
        assert cell.oscillation_phase == pytest.approx(np.pi / 2)
        assert cell.sigma_x == pytest.approx(15.0)

    def test_fixed_sigma_without_base(self):
        cell = PressureCell(x=0.0, y=0.0, sigma_x=10.0, sigma_y=5.0, strength=10.0, oscillation_speed=1.0,
                            oscillation_amount=0.5)
        cell.advance()
        assert cell.sigma_x == 10.0


class TestSeeding:

    def test_named_cells_present(self, seeded_field):
        names = {cell.name for cell in seeded_field}
        for expected in ('equatorial_low', 'west_pacific_high', 'azores_high', 'arctic_high',
                         'antarctic_high', 'australian_low', 'north_subpolar_low', 'south_subpolar_low'):
            assert expected in names

    def test_transient_lows_keep_off_equator(self):
        for seed in range(20):
            field = seed_pressure_field(150.0, 12.0, 8, np.random.RandomState(seed))
            lows = [c for c in field if c.name.startswith('transient_low')]
            assert 2 <= len(lows) <= 8
            # one advance() has already been applied at seeding
            assert all(c.y >= 10.0 - 0.01 for c in lows)

    def test_southern_transient_lows(self):
        field = seed_pressure_field(150.0, -15.0, 2, np.random.RandomState(5))
        lows = [c for c in field if c.name.startswith('transient_low')]
        assert all(c.y <= -10.0 + 0.01 for c in lows)

    def test_no_winter_monsoon_in_summer(self):
        for seed in range(10):
            field = seed_pressure_field(140.0, 15.0, 7, np.random.RandomState(seed))
            assert 'winter_monsoon' not in {c.name for c in field}

    def test_winter_monsoon_appears_in_winter(self):
        found = [
            'winter_monsoon' in {c.name for c in seed_pressure_field(140.0, 15.0, 1, np.random.RandomState(seed))}
            for seed in range(20)
        ]
        assert any(found)

    def test_subpolar_lows_poleward_of_subtropical_highs(self, seeded_field):
        cells = {c.name: c for c in seeded_field}
        assert cells['north_subpolar_low'].y > cells['west_pacific_high'].y
        assert cells['south_subpolar_low'].y < cells['south_pacific_high'].y

    def test_invalid_month_falls_back(self):
        assert validate_month(13) == 8
        assert validate_month(0) == 8
        assert validate_month('june') == 8
        assert validate_month(3) == 3


class TestFrontalZone:

    def test_default_without_northern_highs(self, flat_field, rng):
        assert flat_field.frontal_zone(8, rng).latitude == DEFAULT_FRONTAL_LATITUDE

    def test_moves_equatorward_away_from_august(self):
        field = PressureField([PressureCell(x=0.0, y=35.0, sigma_x=5.0, sigma_y=5.0, strength=10.0)])
        august = field.frontal_zone(8, np.random.RandomState(0)).latitude
        february = field.frontal_zone(2, np.random.RandomState(0)).latitude
        assert 32.0 <= august <= 35.0
        assert february == pytest.approx(august - 18.0)
