"""
Pricing Service Factory

Builds PricingCalculator instances from rule snapshots or from a
caller-supplied rule source. Calculators are built per call or per request
scope; there is no shared module-level instance.
"""

import logging
from typing import Any, Dict, Iterable, Optional, Union

from core.config import AppConfig

from .models import DiscountRule, PricingRule, TaxRule
from .pricing_calculator import PricingCalculator
from .protocols import PricingRuleSourceProtocol

logger = logging.getLogger(__name__)


def create_pricing_calculator(
    pricing_rules: Optional[Iterable[Union[PricingRule, Dict[str, Any]]]] = None,
    discount_rules: Optional[Iterable[Union[DiscountRule, Dict[str, Any]]]] = None,
    tax_rules: Optional[Iterable[Union[TaxRule, Dict[str, Any]]]] = None,
    config: Optional[AppConfig] = None,
) -> PricingCalculator:
    """
    Create a PricingCalculator from already-loaded rules

    Args:
        pricing_rules: Pricing rule models or dicts
        discount_rules: Discount rule models or dicts
        tax_rules: Tax rule models or dicts
        config: Optional settings override

    Returns:
        PricingCalculator
    """
    return PricingCalculator(
        pricing_rules=pricing_rules,
        discount_rules=discount_rules,
        tax_rules=tax_rules,
        config=config,
    )


async def load_pricing_calculator(
    source: PricingRuleSourceProtocol,
    tenant_id: str,
    tier_id: Optional[str] = None,
    jurisdiction: Optional[str] = None,
    config: Optional[AppConfig] = None,
) -> PricingCalculator:
    """
    Fetch a tenant's rules once and build a calculator from them

    Args:
        source: Persistence layer implementing PricingRuleSourceProtocol
        tenant_id: Tenant whose configuration is loaded
        tier_id: Optional pricing tier to scope pricing rules to
        jurisdiction: Optional jurisdiction to scope tax rules to
        config: Optional settings override

    Returns:
        PricingCalculator over the fetched snapshot
    """
    pricing_rules = await source.get_pricing_rules(tenant_id, tier_id=tier_id)
    discount_rules = await source.get_discount_rules(tenant_id)
    tax_rules = await source.get_tax_rules(tenant_id, jurisdiction=jurisdiction)

    calculator = create_pricing_calculator(pricing_rules, discount_rules, tax_rules, config=config)
    logger.info(f"Loaded pricing configuration for tenant {tenant_id}: {calculator!r}")
    return calculator


__all__ = ["create_pricing_calculator", "load_pricing_calculator"]
