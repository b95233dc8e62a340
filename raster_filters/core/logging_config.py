#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Logging setup of the raster_filters package.

Every module logs through a child of the `raster_filters` logger, obtained
with `get_module_logger(__name__)`. The package logger is configured once at
import from LOGGING_CONFIG, and again whenever `load_config` or
`update_config` change the 'logging' section.
"""
import logging
import os
from typing import List, Optional, Union

from raster_filters.core.config import LOGGING_CONFIG

ROOT_LOGGER_NAME = "raster_filters"
DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def parse_level(level: Union[str, int]) -> int:
    """
    Convert a level name such as 'debug' or 'INFO' to its numeric value.

    Raises
    ------
    ValueError
        If the name is not a standard logging level.
    """
    if isinstance(level, int):
        return level
    numeric_level = getattr(logging, str(level).upper(), None)
    if not isinstance(numeric_level, int):
        raise ValueError(f"Invalid log level: {level}")
    return numeric_level


def _make_handlers(log_file: Optional[str], formatter: logging.Formatter) -> List[logging.Handler]:
    handlers: List[logging.Handler] = [logging.StreamHandler()]
    if log_file:
        log_dir = os.path.dirname(str(log_file))
        if log_dir:
            os.makedirs(log_dir, exist_ok=True)
        handlers.append(logging.FileHandler(log_file))
    for handler in handlers:
        handler.setFormatter(formatter)
    return handlers


def setup_logging(log_level: Optional[str] = None,
                  log_file: Optional[str] = None,
                  module_name: str = ROOT_LOGGER_NAME,
                  force: bool = False) -> logging.Logger:
    """
    Configure and return a logger with a console and an optional file handler.

    Parameters
    ----------
    log_level : str, optional
        Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        If None, uses LOGGING_CONFIG["level"].
    log_file : str, optional
        Path to a log file. If None, a file is written only when
        LOGGING_CONFIG["log_to_file"] is set, at LOGGING_CONFIG["log_file"].
    module_name : str, optional
        Name of the configured logger, by default the package logger.
    force : bool, optional
        Replace the handlers of an already configured logger.

    Returns
    -------
    logging.Logger
        The configured logger.
    """
    logger = logging.getLogger(module_name)
    if logger.handlers and not force:
        return logger

    level = log_level or LOGGING_CONFIG.get("level", "WARNING")
    numeric_level = parse_level(level)
    if log_file is None and LOGGING_CONFIG.get("log_to_file", False):
        log_file = LOGGING_CONFIG.get("log_file")
    formatter = logging.Formatter(LOGGING_CONFIG.get("log_format", DEFAULT_FORMAT))

    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    for handler in _make_handlers(log_file, formatter):
        logger.addHandler(handler)
    logger.setLevel(numeric_level)

    logger.debug(f"Logging initialized at level {logging.getLevelName(numeric_level)}")
    return logger


def reconfigure_logging() -> logging.Logger:
    """Apply the current LOGGING_CONFIG to the package logger."""
    return setup_logging(force=True)


def get_module_logger(module_name: str) -> logging.Logger:
    """
    Get a logger for a specific module.

    Parameters
    ----------
    module_name : str
        Name of the module, typically __name__.

    Returns
    -------
    logging.Logger
        The module logger, child of the package logger.
    """
    if module_name == ROOT_LOGGER_NAME or module_name.startswith(ROOT_LOGGER_NAME + "."):
        return logging.getLogger(module_name)
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{module_name}")


# Initialize the package logger
root_logger = setup_logging()
