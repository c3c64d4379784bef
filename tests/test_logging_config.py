import logging

import pytest

from lcresonance.logging_config import PACKAGE_LOGGER, setup_logging


@pytest.fixture
def package_logger():
    logger = logging.getLogger(PACKAGE_LOGGER)
    saved = (logger.level, logger.propagate, list(logger.handlers))
    yield logger
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.setLevel(saved[0])
    logger.propagate = saved[1]
    for handler in saved[2]:
        logger.addHandler(handler)


def test_setup_logging_is_idempotent(package_logger):
    setup_logging(logging.DEBUG)
    logger = setup_logging(logging.DEBUG)
    assert logger is package_logger
    assert logger.level == logging.DEBUG
    assert len(logger.handlers) == 1


def test_setup_logging_accepts_level_names(package_logger):
    assert setup_logging("warning").level == logging.WARNING
    with pytest.raises(ValueError):
        setup_logging("loud")


def test_setup_logging_writes_to_file(package_logger, tmp_path):
    log_file = tmp_path / "run.log"
    logger = setup_logging(logging.INFO, log_file=str(log_file))
    assert len(logger.handlers) == 2

    logging.getLogger("lcresonance.simulation.driver").info("Simulation paused.")
    for handler in logger.handlers:
        handler.flush()
    text = log_file.read_text(encoding="utf-8")
    assert "lcresonance.simulation.driver - INFO - Simulation paused." in text
