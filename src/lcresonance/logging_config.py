"""
Logging Configuration
Attaches console (and optionally file) output to the ``lcresonance`` logger.

Library modules only create module loggers; nothing is printed until a host
(or the demo in ``main.py``) calls ``setup_logging``.
"""
import logging
import sys
from typing import Optional, Union

PACKAGE_LOGGER = "lcresonance"

# Chatty at DEBUG, irrelevant to the simulation
_NOISY_LIBRARIES = ("matplotlib", "PIL", "pyvista")


def setup_logging(level: Union[int, str] = logging.INFO, log_file: Optional[str] = None) -> logging.Logger:
    """
    Configures the logger for the 'lcresonance' namespace.

    Args:
        level: Logging level, as a number or a name ("DEBUG", "INFO", ...).
        log_file: Optional path to save logs to a file.

    Returns:
        The package logger.
    """
    if isinstance(level, str):
        name = level
        level = logging.getLevelName(name.upper())
        if not isinstance(level, int):
            raise ValueError(f"Unknown logging level: {name}")

    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(level)
    # Records are handled here only
    logger.propagate = False

    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%H:%M:%S'
    )

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file, mode='w', encoding='utf-8')
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    for name in _NOISY_LIBRARIES:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))

    logger.debug(f"Logging initialized at level {logging.getLevelName(level)}.")
    return logger
