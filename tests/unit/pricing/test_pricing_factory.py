"""
Unit Tests for the Pricing Calculator Factory

Tests building calculators from snapshots and from an async rule source.
"""

import pytest
from decimal import Decimal

import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), "../../.."))

from microservices.pricing_service import (
    DiscountRule,
    PricingCalculator,
    PricingRule,
    TaxRule,
    create_pricing_calculator,
    load_pricing_calculator,
)


class TestCreatePricingCalculator:
    """Test create_pricing_calculator"""

    def test_builds_calculator(self, factory, app_config):
        calculator = create_pricing_calculator(
            [factory.make_pricing_rule()],
            [factory.make_discount_rule()],
            [factory.make_tax_rule()],
            config=app_config,
        )
        assert isinstance(calculator, PricingCalculator)
        assert calculator.config is app_config

    def test_calculators_are_independent(self, factory, app_config):
        """Test each call returns a new calculator with its own rules"""
        first = create_pricing_calculator([factory.make_pricing_rule()], config=app_config)
        second = create_pricing_calculator(config=app_config)
        assert first is not second
        assert len(first.pricing_rules) == 1
        assert second.pricing_rules == ()


class TestLoadPricingCalculator:
    """Test load_pricing_calculator"""

    @pytest.mark.asyncio
    async def test_loads_tenant_rules(self, factory, rule_source, app_config):
        tenant = factory.make_tenant_id()
        rule_source.pricing_rules[tenant] = [PricingRule.model_validate(factory.make_pricing_rule())]
        rule_source.discount_rules[tenant] = [DiscountRule.model_validate(factory.make_discount_rule())]
        rule_source.tax_rules[tenant] = [TaxRule.model_validate(factory.make_tax_rule())]

        calculator = await load_pricing_calculator(rule_source, tenant, config=app_config)

        assert len(calculator.pricing_rules) == 1
        assert len(calculator.discount_rules) == 1
        assert len(calculator.tax_rules) == 1
        assert rule_source.calls == ["get_pricing_rules", "get_discount_rules", "get_tax_rules"]

    @pytest.mark.asyncio
    async def test_scopes_tier_and_jurisdiction(self, factory, rule_source, app_config):
        tenant = factory.make_tenant_id()
        rule_source.pricing_rules[tenant] = [
            PricingRule.model_validate(factory.make_pricing_rule(tier_id="tier_standard")),
            PricingRule.model_validate(factory.make_pricing_rule(tier_id="tier_premium")),
        ]
        rule_source.tax_rules[tenant] = [
            TaxRule.model_validate(factory.make_tax_rule(jurisdiction="US-CA")),
            TaxRule.model_validate(factory.make_tax_rule(jurisdiction="US-NY")),
        ]

        calculator = await load_pricing_calculator(
            rule_source, tenant, tier_id="tier_premium", jurisdiction="US-NY", config=app_config
        )

        assert [r.tier_id for r in calculator.pricing_rules] == ["tier_premium"]
        assert [t.jurisdiction for t in calculator.tax_rules] == ["US-NY"]

    @pytest.mark.asyncio
    async def test_unknown_tenant_prices_at_base(self, factory, rule_source, app_config):
        calculator = await load_pricing_calculator(rule_source, factory.make_tenant_id(), config=app_config)
        result = calculator.calculate_pricing([factory.make_line_item()], factory.make_context())
        assert result.total == Decimal("100.00")
