#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Logging configuration for the visage tutorials.

This module provides centralized configuration for the logging system
used throughout the package.
"""
import logging
import os
from typing import Optional

from visage.core.config import LOGGING_CONFIG

ROOT_LOGGER_NAME = "visage"


def setup_logging(log_level: Optional[str] = None,
                  log_file: Optional[str] = None,
                  module_name: str = ROOT_LOGGER_NAME) -> logging.Logger:
    """
    Configure and return a logger with the specified settings.

    Calling it again replaces the handlers set up by the previous call, so
    settings loaded later (e.g. from a YAML file) take effect.

    Parameters
    ----------
    log_level : str, optional
        Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        If None, uses the level from config.py.
    log_file : str, optional
        Path to log file. If None, uses the path from config.py when
        file logging is enabled there.
    module_name : str, optional
        Name of the logger, by default "visage".

    Returns
    -------
    logging.Logger
        Configured logger instance.
    """
    logger = logging.getLogger(module_name)

    level = log_level or LOGGING_CONFIG.get("level", "INFO")
    numeric_level = getattr(logging, str(level).upper(), None)
    if not isinstance(numeric_level, int):
        raise ValueError(f"Invalid log level: {level}")

    # Reconfiguring replaces the handlers attached by a previous call
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    logger.setLevel(numeric_level)
    log_format = LOGGING_CONFIG.get("log_format",
                                    "%(asctime)s - %(name)s - %(levelname)s - %(message)s")
    formatter = logging.Formatter(log_format)

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    log_to_file = log_file is not None or LOGGING_CONFIG.get("log_to_file", False)
    log_file_path = log_file or LOGGING_CONFIG.get("log_file")
    if log_to_file and log_file_path:
        log_dir = os.path.dirname(str(log_file_path))
        if log_dir:
            os.makedirs(log_dir, exist_ok=True)

        file_handler = logging.FileHandler(log_file_path)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    logger.debug(f"Logging initialized at level: {level}")
    return logger


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
        Logger nested under the package root logger.
    """
    if module_name == ROOT_LOGGER_NAME or module_name.startswith(ROOT_LOGGER_NAME + "."):
        return logging.getLogger(module_name)
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{module_name}")
