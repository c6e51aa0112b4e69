#!/usr/bin/env python3
"""Application configuration

Combines the logging and pricing sub-configs for the pricing service.
"""
import os
from dataclasses import dataclass, field

from .logging_config import LoggingConfig
from .pricing_config import PricingConfig


def _bool(val: str) -> bool:
    return val.lower() == "true"


@dataclass
class AppConfig:
    """Pricing service configuration"""

    service_name: str = "pricing_service"
    environment: str = "development"
    debug: bool = False

    logging: LoggingConfig = field(default_factory=LoggingConfig)
    pricing: PricingConfig = field(default_factory=PricingConfig)

    @classmethod
    def from_env(cls) -> 'AppConfig':
        """Load the complete configuration from environment variables"""
        env = os.getenv("ENV") or os.getenv("ENVIRONMENT", "development")
        return cls(
            service_name=os.getenv("SERVICE_NAME", "pricing_service"),
            environment=env,
            debug=_bool(os.getenv("DEBUG", "false")),
            logging=LoggingConfig.from_env(),
            pricing=PricingConfig.from_env(),
        )
