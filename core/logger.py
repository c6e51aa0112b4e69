#!/usr/bin/env python3
"""
Service logger setup

Configures a named stdlib logger with console and optional file handlers,
using the format and level from LoggingConfig.
"""
import logging
import sys
from typing import Optional

from .config import get_settings


def setup_service_logger(
    service_name: str,
    level: Optional[str] = None,
    log_file: Optional[str] = None,
) -> logging.Logger:
    """
    Create (or reconfigure) the logger for a service

    Args:
        service_name: Logger name, usually the service package name
        level: Log level name, defaults to LOG_LEVEL from config
        log_file: Optional file path, defaults to LOG_FILE from config

    Returns:
        Configured logger
    """
    log_config = get_settings().logging
    level_name = (level or log_config.log_level or "INFO").upper()
    log_file = log_file if log_file is not None else log_config.log_file

    logger = logging.getLogger(service_name)
    logger.setLevel(getattr(logging, level_name, logging.INFO))

    # Drop handlers from a previous setup so repeated calls don't duplicate output
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter(log_config.log_format)

    if log_config.enable_console:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setFormatter(formatter)
        logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    logger.propagate = False
    return logger


__all__ = ["setup_service_logger"]
