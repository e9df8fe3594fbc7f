"""
Logging configuration for river_trace.

Library modules only ask for loggers; handlers are attached by
``setup_logging``, which the command line entry point calls.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Optional, Union

ROOT_LOGGER_NAME = "river_trace"
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging(log_level: str = "INFO",
                  log_file: Optional[Union[str, Path]] = None) -> logging.Logger:
    """
    Configure and return the package logger.

    Parameters
    ----------
    log_level : str
        DEBUG, INFO, WARNING, ERROR or CRITICAL.
    log_file : str or Path, optional
        Also write log records to this file.

    Returns
    -------
    logging.Logger
        The ``river_trace`` logger. Calling again only updates the level.
    """
    logger = logging.getLogger(ROOT_LOGGER_NAME)

    numeric_level = getattr(logging, str(log_level).upper(), None)
    if not isinstance(numeric_level, int):
        raise ValueError(f"Invalid log level: {log_level}")
    logger.setLevel(numeric_level)

    if logger.handlers:
        return logger

    formatter = logging.Formatter(LOG_FORMAT)

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_file:
        log_dir = os.path.dirname(str(log_file))
        if log_dir:
            os.makedirs(log_dir, exist_ok=True)
        file_handler = logging.FileHandler(str(log_file))
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    return logger


def get_module_logger(module_name: str) -> logging.Logger:
    """Logger under the package namespace, typically called with ``__name__``."""
    if module_name == ROOT_LOGGER_NAME or module_name.startswith(ROOT_LOGGER_NAME + "."):
        return logging.getLogger(module_name)
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{module_name}")
