# utils.py
"""
Utility functions for the simulation framework.

This module provides logging setup and configuration loading. They are used
by the entry point and the tests but do not belong to the physics.
"""
import json
import logging
import logging.handlers
import os
from dataclasses import dataclass
from typing import Any, Dict

# --- Data Contracts ---
#
# setup_logging(config: Dict[str, Any]) -> None:
#   - Inputs:
#     - config: The full configuration. Its optional "logging" section may
#       hold "level", "format" and "log_file" (None disables the file).
#   - Side Effects: Replaces the root logger's handlers with a console
#     handler and, if a log file is set, a rotating file handler.
#
# load_config(path: str) -> Dict[str, Any]:
#   - Outputs: The parsed JSON object.
#   - Raises: FileNotFoundError, json.JSONDecodeError, or ValueError when
#     the top level is not an object.
#
# RunControl.from_params(params: Dict[str, Any]) -> RunControl

DEFAULT_LOG_FORMAT = '%(asctime)s - %(levelname)s - %(message)s'
DEFAULT_LOG_FILE = 'logs/simulation.log'


@dataclass
class RunControl:
    """How long and how finely the headless runner steps the simulation."""
    max_steps: int = 600
    delta_time: float = 1.0 / 60.0
    log_throttle_steps: int = 60

    @classmethod
    def from_params(cls, params: Dict[str, Any]) -> "RunControl":
        return cls(
            max_steps=int(params.get('max_steps', cls.max_steps)),
            delta_time=float(params.get('delta_time', cls.delta_time)),
            log_throttle_steps=max(int(params.get('log_throttle_steps', cls.log_throttle_steps)), 1),
        )


def setup_logging(config: Dict[str, Any]) -> None:
    """
    Configures the root logger from the "logging" config section.

    Logs go to the console and, unless disabled, to a rotating file.
    """
    log_config = config.get('logging', {})
    log_level = log_config.get('level', 'INFO').upper()
    log_format = log_config.get('format', DEFAULT_LOG_FORMAT)
    log_file_path = log_config.get('log_file', DEFAULT_LOG_FILE)

    logger = logging.getLogger()
    logger.setLevel(log_level)
    if logger.hasHandlers():
        logger.handlers.clear()

    formatter = logging.Formatter(log_format)

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_file_path:
        log_dir = os.path.dirname(log_file_path)
        if log_dir:
            os.makedirs(log_dir, exist_ok=True)
        # 1MB per file, 5 backups
        file_handler = logging.handlers.RotatingFileHandler(
            log_file_path, maxBytes=1024*1024, backupCount=5
        )
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    logging.info("Logging system initialized.")
    logging.debug(f"Log level set to {log_level}. Log file: {log_file_path or 'disabled'}")


def load_config(path: str) -> Dict[str, Any]:
    """Loads the JSON configuration file."""
    logging.info(f"Loading configuration from {path}...")
    try:
        with open(path, 'r') as f:
            config = json.load(f)
    except FileNotFoundError:
        logging.error(f"Configuration file not found at {path}.")
        raise
    except json.JSONDecodeError:
        logging.error(f"Error decoding JSON from {path}.")
        raise

    if not isinstance(config, dict):
        msg = f"Configuration error: {path} must contain a JSON object at the top level."
        logging.critical(msg)
        raise ValueError(msg)

    logging.info(f"Configuration loaded successfully (sections: {sorted(config)}).")
    return config
