#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Configuration settings for the raster filtering engine.

This module centralizes all configuration parameters used across the filtering
and resampling modules, making it easier to modify settings in one place.
Settings can be overridden at runtime from a YAML file with `load_config`.
"""
from typing import Dict, Any, Optional, Union
import logging
import os
from pathlib import Path
import yaml

from raster_filters.core.exceptions import ConfigError

# Plain logger: logging_config imports this module
logger = logging.getLogger(__name__)

# General configuration
DEFAULT_DTYPE: str = "float64"
CHUNK_SIZE: int = 1 << 20  # Neighbor values read per vectorized batch
N_JOBS: int = 1          # Number of parallel batches (-1 = all cores)

# Path configuration
DEFAULT_OUTPUT_DIR: Path = Path(os.environ.get("RASTER_FILTERS_OUTPUT_DIR", Path.cwd() / "output"))

# Filtering configuration
FILTER_CONFIG: Dict[str, Any] = {
    "chunk_size": CHUNK_SIZE,
    "n_jobs": N_JOBS,
    "progress": False,       # Show a progress bar over batches
    "default_dtype": DEFAULT_DTYPE,
}

# Resampling configuration
RESAMPLING_CONFIG: Dict[str, Any] = {
    "default_interpolation": "linear",   # Options: 'nearest', 'linear', 'cubic'
    "default_extrapolation": "nearest",  # Options: 'constant', 'nearest', 'periodic'
    "constant_value": 0,
}

# Performance tuning
PERFORMANCE_CONFIG: Dict[str, Any] = {
    "use_parallel": True,
    "parallel_prefer": "threads",  # Options: 'threads', 'processes'
}

# Logging configuration
LOGGING_CONFIG: Dict[str, Any] = {
    "level": "WARNING",  # DEBUG, INFO, WARNING, ERROR, CRITICAL
    "log_to_file": False,
    "log_file": DEFAULT_OUTPUT_DIR / "raster_filters.log",
    "log_format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
}

# Sections which can be overridden from a configuration file
CONFIG_SECTIONS: Dict[str, Dict[str, Any]] = {
    "filter": FILTER_CONFIG,
    "resampling": RESAMPLING_CONFIG,
    "performance": PERFORMANCE_CONFIG,
    "logging": LOGGING_CONFIG,
}


def load_config(path: Union[str, Path]) -> Dict[str, Dict[str, Any]]:
    """
    Override configuration settings from a YAML file.
    
    The file maps section names ('filter', 'resampling', 'performance',
    'logging') to dictionaries of settings. Settings are updated in place, so
    every module sees the new values.
    
    Parameters
    ----------
    path : str or Path
        Path to the YAML configuration file.
        
    Returns
    -------
    dict
        The updated configuration sections.
    """
    with open(path, "r") as f:
        overrides = yaml.safe_load(f) or {}
    logger.info(f"Loading configuration from {path}")
    return update_config(overrides)


def update_config(overrides: Optional[Dict[str, Dict[str, Any]]]) -> Dict[str, Dict[str, Any]]:
    """
    Override configuration settings from a dictionary of sections.
    
    Parameters
    ----------
    overrides : dict
        Mapping from section name to the settings to update.
        
    Returns
    -------
    dict
        The updated configuration sections.

    Raises
    ------
    ConfigError
        If a section is unknown or not a mapping; nothing is updated then.
    """
    overrides = overrides or {}
    for section, settings in overrides.items():
        if section not in CONFIG_SECTIONS:
            raise ConfigError(f"Unknown configuration section: {section}")
        if not isinstance(settings, dict):
            raise ConfigError(f"Configuration section {section} must be a mapping")
    for section, settings in overrides.items():
        CONFIG_SECTIONS[section].update(settings)
        logger.debug(f"Updated {section} settings: {sorted(settings)}")
    if "logging" in overrides:
        from raster_filters.core.logging_config import reconfigure_logging
        reconfigure_logging()
    return CONFIG_SECTIONS
