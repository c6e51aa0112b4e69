"""
Tax Engine

Applies every active tax rule for the jurisdiction to the post-discount
amount. Rates are summed, not compounded.
"""

import logging
from decimal import Decimal
from typing import Iterable, List, Optional, Sequence

from .models import AppliedTax, TaxOutcome, TaxRule
from .money import ZERO, percent_of, round_money

logger = logging.getLogger(__name__)


def is_tax_applicable(
    rule: TaxRule,
    taxable_amount: Decimal,
    jurisdiction: Optional[str],
    service_types: Optional[Sequence[str]] = None,
    location: Optional[str] = None,
) -> bool:
    """
    Active, in the jurisdiction, over the threshold, and scoped to the request

    The service-type and location scopes are only checked when both the rule
    and the request set them.
    """
    if not rule.is_active:
        return False
    if jurisdiction is not None and rule.jurisdiction != jurisdiction:
        return False
    if rule.amount_threshold is not None and taxable_amount < rule.amount_threshold:
        return False
    if rule.service_types and service_types:
        if not set(rule.service_types) & set(service_types):
            return False
    if rule.client_locations and location:
        if location not in rule.client_locations:
            return False
    return True


def apply_taxes(
    taxable_amount: Decimal,
    rules: Iterable[TaxRule],
    jurisdiction: Optional[str] = None,
    places: Optional[int] = None,
    rounding: Optional[str] = None,
    service_types: Optional[Sequence[str]] = None,
    location: Optional[str] = None,
) -> TaxOutcome:
    """
    Tax the discounted subtotal

    total_taxes = round(taxable_amount × Σrates / 100). The per-rule amounts
    are rounded individually for display and may differ from total_taxes by
    rounding.
    """
    applicable = [r for r in rules if is_tax_applicable(r, taxable_amount, jurisdiction, service_types, location)]
    if not applicable:
        logger.debug(f"No tax rules apply for jurisdiction {jurisdiction!r}")
        return TaxOutcome()

    total_rate = sum((r.rate for r in applicable), ZERO)
    taxes: List[AppliedTax] = [
        AppliedTax(rule=r, rate=r.rate, amount=round_money(percent_of(taxable_amount, r.rate), places, rounding))
        for r in applicable
    ]
    return TaxOutcome(
        taxes=taxes,
        total_rate=total_rate,
        total_taxes=round_money(percent_of(taxable_amount, total_rate), places, rounding),
    )
