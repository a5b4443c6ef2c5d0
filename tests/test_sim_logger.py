import logging

import pytest

from sim_logger import (
    SimLogger, close_global_logger, get_logger, log_debug, log_error, log_info, log_warning, setup_global_logger,
)


@pytest.fixture(autouse=True)
def reset_global_logger():
    yield
    close_global_logger()


def test_log_file_name(tmp_path):
    logger = SimLogger(run_name='NATL', run_id=7, log_dir=str(tmp_path))
    name = logger.get_filename()
    logger.close()
    assert name.startswith(str(tmp_path))
    assert name.endswith('_run7.log')
    assert 'cyclone_NATL_' in name


def test_global_helpers_write_to_file(tmp_path):
    logger = setup_global_logger('WPAC', log_dir=str(tmp_path), level=logging.DEBUG)
    assert get_logger() is logger
    log_info("genesis complete")
    log_debug("ERC weakening")
    log_warning("unknown basin")
    filename = logger.get_filename()
    close_global_logger()

    with open(filename) as f:
        content = f.read()
    assert "genesis complete" in content
    assert "ERC weakening" in content
    assert "WARNING: unknown basin" in content


def test_debug_dropped_at_info_level(tmp_path):
    logger = setup_global_logger('WPAC', log_dir=str(tmp_path))
    log_debug("hidden detail")
    filename = logger.get_filename()
    close_global_logger()
    with open(filename) as f:
        assert "hidden detail" not in f.read()


def test_fallback_to_print_without_logger(capsys):
    assert get_logger() is None
    log_info("plain message")
    log_warning("careful")
    log_error("broken")
    log_debug("dropped")
    out = capsys.readouterr().out
    assert "plain message" in out
    assert "WARNING: careful" in out
    assert "ERROR: broken" in out
    assert "dropped" not in out
