"""
Logging configuration for the Shared-Medium Hub Simulator.
"""

import logging
import os

from HUB_SIM.config import LOG_FORMAT

# Setup logging configuration (stderr: a station's stdout carries frames)
logging.basicConfig(level=logging.INFO, format=LOG_FORMAT)

_log_dir = None


def configure_logging(verbose=False, log_dir=None):
    """Set the global level and enable per-component log files in log_dir."""
    global _log_dir
    logging.getLogger().setLevel(logging.DEBUG if verbose else logging.INFO)

    if log_dir:
        # Create logs directory if it doesn't exist
        if not os.path.exists(log_dir):
            os.makedirs(log_dir)
        _log_dir = log_dir
    else:
        _log_dir = None


def setup_logger(name, log_file=None):
    """Setup a logger for a component"""
    logger = logging.getLogger(name)

    if log_file and _log_dir:
        path = os.path.abspath(os.path.join(_log_dir, f"{log_file}.log"))
        already_attached = any(
            isinstance(handler, logging.FileHandler) and handler.baseFilename == path
            for handler in logger.handlers
        )
        if not already_attached:
            file_handler = logging.FileHandler(path)
            file_handler.setFormatter(logging.Formatter('%(asctime)s - %(levelname)s - %(message)s'))
            logger.addHandler(file_handler)

    return logger
