#!/usr/bin/env python3
"""Pricing engine configuration

Money precision, rounding policy and tenant-independent defaults used by the
pricing calculator. Everything tenant-specific (rules, tiers, tax rates)
arrives with each calculation call instead.
"""
import os
from dataclasses import dataclass
from decimal import ROUND_HALF_EVEN, ROUND_HALF_UP, ROUND_DOWN, ROUND_UP
from typing import Optional

def _int(val: str, default: int) -> int:
    try:
        return int(val) if val else default
    except ValueError:
        return default


ROUNDING_MODES = {
    "ROUND_HALF_UP": ROUND_HALF_UP,
    "ROUND_HALF_EVEN": ROUND_HALF_EVEN,
    "ROUND_DOWN": ROUND_DOWN,
    "ROUND_UP": ROUND_UP,
}


@dataclass
class PricingConfig:
    """Pricing engine settings"""

    # ===========================================
    # Money
    # ===========================================
    money_places: int = 2
    rounding: str = "ROUND_HALF_UP"
    currency: str = "USD"

    # ===========================================
    # Defaults
    # ===========================================
    default_jurisdiction: Optional[str] = None
    default_minimum_hours: int = 1

    @property
    def rounding_mode(self) -> str:
        """decimal module rounding constant for the configured policy"""
        return ROUNDING_MODES.get(self.rounding.upper(), ROUND_HALF_UP)

    @classmethod
    def from_env(cls) -> 'PricingConfig':
        """Load pricing configuration from environment variables"""
        return cls(
            money_places=_int(os.getenv("PRICING_MONEY_PLACES", "2"), 2),
            rounding=os.getenv("PRICING_ROUNDING", "ROUND_HALF_UP"),
            currency=os.getenv("PRICING_CURRENCY", "USD"),
            default_jurisdiction=os.getenv("PRICING_DEFAULT_JURISDICTION") or None,
            default_minimum_hours=_int(os.getenv("PRICING_DEFAULT_MINIMUM_HOURS", "1"), 1),
        )
