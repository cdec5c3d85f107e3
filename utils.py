# utils.py
"""
Utility functions for the particle engine.

This module provides helpers used across the application that do not
belong to a specific domain like physics or rendering: logging setup,
configuration loading, the millisecond clock, random range sampling and
the recursive dictionary merge used by the option resolver.
"""
import copy
import logging
import logging.handlers
import json
import os
import time
from typing import Dict, Any, Mapping

import numpy as np

# --- Data Contracts ---
#
# setup_logging(config: Dict[str, Any]) -> None:
#   - Inputs:
#     - config: A dictionary containing a "logging" key with "level",
#       "format", and "log_file" sub-keys.
#   - Outputs: None
#   - Side Effects: Configures the root Python logger. Creates a log
#     directory if it doesn't exist. Sets up a console handler and a
#     rotating file handler.
#   - Invariants: After this function runs, the logging system is
#     initialized and ready for use throughout the application.
#
# deep_merge(base: Mapping, override: Mapping) -> Dict[str, Any]:
#   - Outputs: A new dict. Nested mappings merge recursively, everything
#     else (lists, callables, scalars) in `override` replaces `base`.
#   - Invariants: Neither input is mutated. The result shares no mutable
#     containers with either input.

def setup_logging(config: Dict[str, Any]) -> None:
    """
    Configures the logging system from a configuration dictionary.

    Sets up logging to both the console and a rotating file.
    """
    log_config = config.get('logging', {})
    log_level = log_config.get('level', 'INFO').upper()
    log_format = log_config.get('format', '%(asctime)s - %(levelname)s - %(message)s')
    log_file_path = log_config.get('log_file', 'logs/particles.log')

    # Ensure the log directory exists
    log_dir = os.path.dirname(log_file_path)
    if log_dir:
        os.makedirs(log_dir, exist_ok=True)

    logger = logging.getLogger()
    logger.setLevel(log_level)

    # Clear existing handlers to avoid duplication
    if logger.hasHandlers():
        logger.handlers.clear()

    formatter = logging.Formatter(log_format)

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    # Rotates when the log reaches 1MB, keeps 5 backup logs.
    file_handler = logging.handlers.RotatingFileHandler(
        log_file_path, maxBytes=1024*1024, backupCount=5
    )
    file_handler.setFormatter(formatter)
    logger.addHandler(file_handler)

    logging.info("Logging system initialized.")
    logging.debug(f"Log level set to {log_level}.")
    logging.debug(f"Log file path: {log_file_path}")

def load_config(path: str) -> Dict[str, Any]:
    """Loads a JSON configuration file."""
    logging.info(f"Loading configuration from {path}...")
    try:
        with open(path, 'r') as f:
            config = json.load(f)
        logging.info("Configuration loaded successfully.")
        return config
    except FileNotFoundError:
        logging.error(f"Configuration file not found at {path}.")
        raise
    except json.JSONDecodeError:
        logging.error(f"Error decoding JSON from {path}.")
        raise

def now_ms() -> float:
    """Current time in milliseconds from a monotonic clock."""
    return time.monotonic() * 1000.0

def rand_range(rng: np.random.Generator, min_val: float, max_val: float) -> float:
    """
    Samples uniformly between two bounds.

    Equal bounds return the bound itself exactly. The bounds may be given
    in either order.
    """
    if min_val == max_val:
        return float(min_val)
    return float(min_val + rng.random() * (max_val - min_val))

def rand_range_int(rng: np.random.Generator, min_val: int, max_val: int) -> int:
    """Samples an integer in [min_val, max_val)."""
    return int(np.floor(rand_range(rng, min_val, max_val)))

def deep_merge(base: Mapping[str, Any], override: Mapping[str, Any]) -> Dict[str, Any]:
    """Recursively merges `override` on top of `base` into a new dict."""
    merged = {key: _copy_value(value) for key, value in base.items()}
    for key, value in override.items():
        if isinstance(value, Mapping) and isinstance(merged.get(key), Mapping):
            merged[key] = deep_merge(merged[key], value)
        else:
            merged[key] = _copy_value(value)
    return merged

def _copy_value(value: Any) -> Any:
    if isinstance(value, Mapping):
        return {key: _copy_value(item) for key, item in value.items()}
    if callable(value):
        return value
    return copy.deepcopy(value)
