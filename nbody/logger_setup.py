#!/usr/bin/env python3
"""
Logging setup for the N-body simulator.

Configures a dedicated application logger ("nbody"), not the root logger, so that
verbose output from third-party libraries (pygame, Dear PyGui) is not captured.
Module loggers are children of it (logging.getLogger(__name__) inside nbody.*).
"""
import logging
import os
from typing import Optional, Union

from .constants import LOG_FORMAT, LOGGER_NAME


def setup_logging(level: Union[int, str] = logging.INFO, log_file: Optional[str] = None,
                  fmt: str = LOG_FORMAT) -> logging.Logger:
    """
    Configure the "nbody" logger to write to the console and, optionally, a file.

    Side effects:
    - Sets the level of the "nbody" logger and stops propagation to the root logger.
    - Creates the directory of log_file if needed.
    - Replaces handlers from a previous call instead of duplicating them.
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level.upper() if isinstance(level, str) else level)
    logger.propagate = False

    formatter = logging.Formatter(fmt)

    if logger.hasHandlers():
        logger.handlers.clear()

    stream_handler = logging.StreamHandler()
    stream_handler.setFormatter(formatter)
    logger.addHandler(stream_handler)

    if log_file:
        log_dir = os.path.dirname(log_file)
        if log_dir:
            os.makedirs(log_dir, exist_ok=True)
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    logger.info("Logging initialized. Level: %s. Log file: %s",
                logging.getLevelName(logger.level), log_file or "-")
    return logger
