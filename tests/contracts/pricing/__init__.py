"""
Pricing Service - Contracts Package

- data_contract.py: test data factory and request builders
"""

from .data_contract import PricingTestDataFactory

__all__ = ["PricingTestDataFactory"]
