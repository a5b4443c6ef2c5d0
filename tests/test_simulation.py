import json

import geojson
import pytest

from cyclone_model import CycloneSeedingError
from land import LandMask
from sim_logger import get_logger, setup_global_logger
from simulation import Simulation


def should_dissipate(storm):
    return (storm.intensity < 17
            or (storm.is_extratropical and storm.intensity < 25)
            or abs(storm.lat) > 70)


def quiet_sim(**kwargs):
    kwargs.setdefault('enable_file_log', False)
    return Simulation(**kwargs)


@pytest.mark.parametrize('basin, month, seed', [
    ('WPAC', 8, 1), ('NATL', 9, 2), ('SIO', 2, 3), ('EPAC', 7, 4),
    ('NIO', 5, 5), ('SHEM', 1, 6), ('SATL', 3, 7), ('WPAC', 12, 8),
])
def test_tick_invariants_over_long_runs(basin, month, seed):
    sim = quiet_sim(basin=basin, month=month, random_seed=seed, forecast_every=0)
    storm = sim.cyclone

    while sim.tick < 400:
        prev_ace, prev_len = storm.ace, len(storm.track)
        active = sim.step()

        assert len(storm.track) == prev_len + 1
        assert storm.age == 3 * (len(storm.track) - 1)
        assert storm.intensity >= 10.0
        assert 100.0 <= storm.circulation_size <= 800.0
        assert storm.ace >= prev_ace
        if storm.ace != prev_ace:
            assert storm.age % 6 == 0
        assert -180.0 <= storm.lon <= 180.0
        assert -90.0 <= storm.lat <= 90.0
        assert active == storm.is_active
        assert (not active) == should_dissipate(storm)
        if not active:
            break

    if not storm.is_active:
        frozen = (len(storm.track), storm.age, storm.intensity)
        assert sim.step() is False
        assert (len(storm.track), storm.age, storm.intensity) == frozen
        assert not storm.is_active


def test_identical_seeds_replay_identically():
    first = quiet_sim(random_seed=42, max_ticks=60, forecast_every=4)
    second = quiet_sim(random_seed=42, max_ticks=60, forecast_every=4)
    first.run()
    second.run()
    assert first.cyclone.track == second.cyclone.track
    assert first.forecasts == second.forecasts


def test_different_seeds_diverge():
    first = quiet_sim(random_seed=1, max_ticks=5)
    second = quiet_sim(random_seed=2, max_ticks=5)
    assert first.cyclone.track[0] != second.cyclone.track[0]


def test_run_stops_at_max_ticks():
    sim = quiet_sim(random_seed=3, max_ticks=4)
    storm = sim.run()
    assert sim.tick <= 4
    assert len(storm.track) == sim.tick + 1


def test_forecasts_refreshed_while_active():
    sim = quiet_sim(random_seed=5, max_ticks=3, forecast_every=1)
    assert sim.forecasts == []
    sim.step()
    if sim.cyclone.is_active:
        assert len(sim.forecasts) == 1
        assert sim.forecasts[0].track[0].lat == sim.cyclone.lat


def test_invalid_settings():
    with pytest.raises(ValueError):
        quiet_sim(max_ticks=0)
    with pytest.raises(ValueError):
        quiet_sim(forecast_every=-1)


def test_invalid_month_and_basin_fall_back():
    sim = quiet_sim(basin='MARS', month=14, random_seed=0)
    assert sim.basin == 'WPAC'
    assert sim.month == 8


def test_all_land_planet_fails_to_seed():
    world = geojson.Polygon([[(-180.0, -89.0), (180.0, -89.0), (180.0, 89.0), (-180.0, 89.0), (-180.0, -89.0)]])
    with pytest.raises(CycloneSeedingError):
        quiet_sim(land=LandMask([world]), max_seeding_attempts=20, random_seed=0)


def test_from_file(tmp_path):
    path = tmp_path / "run.json"
    path.write_text(json.dumps({'basin': 'NATL', 'month': 9, 'random_seed': 11, 'max_ticks': 10,
                                'enable_file_log': False, 'year': 2020}))
    sim = Simulation.from_file(str(path))
    assert sim.basin == 'NATL'
    assert sim.max_ticks == 10
    sim.run()
    df = sim.track_dataframe()
    assert len(df) == len(sim.cyclone.track)
    assert df['datetime'].iloc[0].year == 2020


def test_from_file_rejects_unknown_keys(tmp_path):
    path = tmp_path / "run.json"
    path.write_text(json.dumps({'basin': 'NATL', 'warp_speed': 9}))
    with pytest.raises(ValueError, match='warp_speed'):
        Simulation.from_file(str(path))


def test_file_log_written_and_closed(tmp_path):
    sim = Simulation(random_seed=9, max_ticks=16, log_dir=str(tmp_path), log_level='DEBUG')
    log_file = sim.logger.get_filename()
    sim.run()

    assert get_logger() is None
    with open(log_file) as f:
        content = f.read()
    assert 'Initializing cyclone simulation' in content
    assert 'Run Complete' in content


def test_forecasts_do_not_steer_the_live_storm():
    without = quiet_sim(random_seed=42, max_ticks=40, forecast_every=0)
    with_cone = quiet_sim(random_seed=42, max_ticks=40, forecast_every=1)
    without.run()
    with_cone.run()
    assert with_cone.forecasts or not with_cone.cyclone.is_active
    assert without.cyclone.track == with_cone.cyclone.track


def test_failed_genesis_closes_log_file(tmp_path):
    world = geojson.Polygon([[(-180.0, -89.0), (180.0, -89.0), (180.0, 89.0), (-180.0, 89.0), (-180.0, -89.0)]])
    with pytest.raises(CycloneSeedingError):
        Simulation(land=LandMask([world]), max_seeding_attempts=5, random_seed=0, log_dir=str(tmp_path))
    assert get_logger() is None

    log_files = list(tmp_path.iterdir())
    assert len(log_files) == 1
    assert 'Initialization failed' in log_files[0].read_text()


def test_console_run_drops_stale_logger(tmp_path):
    stale = setup_global_logger('OLD', log_dir=str(tmp_path))
    sim = quiet_sim(random_seed=4, max_ticks=2)
    assert get_logger() is None
    assert not stale.logger.handlers
    sim.run()
