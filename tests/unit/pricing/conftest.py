"""
Unit Test Fixtures for Pricing Service

Provides rule snapshots, a mock rule source and an isolated settings object.
"""

import pytest
from decimal import Decimal
from typing import Dict, List, Optional

import sys
import os

# Add project root to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "../../.."))

from core.config import AppConfig, LoggingConfig, PricingConfig
from microservices.pricing_service.models import DiscountRule, PricingRule, TaxRule
from tests.contracts.pricing.data_contract import PricingTestDataFactory


# ====================
# Mock Rule Source
# ====================


class MockPricingRuleSource:
    """In-memory PricingRuleSourceProtocol implementation"""

    def __init__(self):
        self.pricing_rules: Dict[str, List[PricingRule]] = {}
        self.discount_rules: Dict[str, List[DiscountRule]] = {}
        self.tax_rules: Dict[str, List[TaxRule]] = {}
        self.calls: List[str] = []

    async def get_pricing_rules(self, tenant_id: str, tier_id: Optional[str] = None) -> List[PricingRule]:
        self.calls.append("get_pricing_rules")
        rules = self.pricing_rules.get(tenant_id, [])
        if tier_id is not None:
            rules = [r for r in rules if r.tier_id == tier_id]
        return list(rules)

    async def get_discount_rules(self, tenant_id: str) -> List[DiscountRule]:
        self.calls.append("get_discount_rules")
        return list(self.discount_rules.get(tenant_id, []))

    async def get_tax_rules(self, tenant_id: str, jurisdiction: Optional[str] = None) -> List[TaxRule]:
        self.calls.append("get_tax_rules")
        rules = self.tax_rules.get(tenant_id, [])
        if jurisdiction is not None:
            rules = [r for r in rules if r.jurisdiction == jurisdiction]
        return list(rules)


# ====================
# Fixtures
# ====================


@pytest.fixture
def factory():
    """Pricing test data factory"""
    return PricingTestDataFactory


@pytest.fixture
def rule_source():
    """Empty in-memory rule source"""
    return MockPricingRuleSource()


@pytest.fixture
def app_config():
    """Settings independent of the process environment"""
    return AppConfig(
        service_name="pricing_service",
        environment="test",
        debug=False,
        logging=LoggingConfig(log_level="DEBUG", enable_console=False),
        pricing=PricingConfig(),
    )


@pytest.fixture
def bulk_tiers(factory):
    """5+ → 10%, 10+ → 15%, 20+ → 20%"""
    return factory.make_bulk_tiers()


@pytest.fixture
def membership_rates(factory):
    """BRONZE 5%, SILVER 10%, GOLD 15%, PLATINUM 20%"""
    return factory.make_membership_rates()


@pytest.fixture
def peak_rule(factory):
    """1.5× weekday business-hours rule"""
    return PricingRule.model_validate(factory.make_pricing_rule(
        id="rule_peak",
        name="Peak hours",
        modifier="1.5",
        time_slots=[factory.make_time_slot("09:00", "17:00")],
    ))


@pytest.fixture
def sales_tax(factory):
    """8% US-CA sales tax"""
    return TaxRule.model_validate(factory.make_tax_rule(id="tax_ca", rate=Decimal("8")))
