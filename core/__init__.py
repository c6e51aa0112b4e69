#!/usr/bin/env python3
"""
Core Module for the Pricing Service

Shared infrastructure used by the pricing engine and its tooling.

COMPONENTS:
    - config/: Dataclass configuration loaded from the environment (.env aware)
    - logger.py: Service logger setup

USAGE:
    from core.config import get_settings
    from core.logger import setup_service_logger

    settings = get_settings()
    logger = setup_service_logger("pricing_service", level=settings.logging.log_level)
"""

from .config import AppConfig, get_settings, reload_settings
from .logger import setup_service_logger

# Export public API
__all__ = [
    "AppConfig",
    "get_settings",
    "reload_settings",
    "setup_service_logger",
]

__version__ = "1.0.0"
