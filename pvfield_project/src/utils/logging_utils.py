#!/usr/bin/env python3
"""Logging utilities for PVField.

Library modules only call ``logging.getLogger(__name__)``; the host
application (map editor, batch scripts, tests) calls :func:`setup_logging`
once to decide where the records go.
"""

import logging
import os
import sys
from typing import Optional

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# Third-party loggers that are chatty at DEBUG.
_QUIET_LOGGERS = ("pyproj", "shapely")


def _level_from_env(default: int) -> int:
    name = os.environ.get("PVFIELD_LOG_LEVEL")
    if not name:
        return default
    level = logging.getLevelName(name.upper())
    return level if isinstance(level, int) else default


def setup_logging(log_level: int = logging.INFO,
                  log_file: Optional[str] = None) -> None:
    """Set up application logging with the specified configuration.

    Args:
        log_level: The logging level (default: logging.INFO). The
            ``PVFIELD_LOG_LEVEL`` environment variable overrides it.
        log_file: Optional path to a log file. If None, logs to console only.

    """
    formatter = logging.Formatter(LOG_FORMAT)

    root_logger = logging.getLogger()
    root_logger.setLevel(_level_from_env(log_level))

    # Clear any existing handlers
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    if log_file:
        log_dir = os.path.dirname(log_file)
        if log_dir:
            os.makedirs(log_dir, exist_ok=True)

        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(logging.WARNING, root_logger.level))

    root_logger.debug("Logging initialized")


def get_logger(name: str) -> logging.Logger:
    """Get a logger with the specified name (typically ``__name__``)."""
    return logging.getLogger(name)
