"""
Discount Engine

Applies coupon and automatic discounts to a subtotal in priority order.
Stackable discounts always combine; only the first non-stackable discount
that takes a positive amount is applied.
"""

import logging
from decimal import Decimal
from typing import AbstractSet, Iterable, List, Optional, Sequence

from .models import AppliedDiscount, DiscountOutcome, DiscountRule, DiscountType
from .money import ZERO, clamp_non_negative, percent_of, round_money

logger = logging.getLogger(__name__)


def is_discount_applicable(rule: DiscountRule, subtotal: Decimal, discount_codes: AbstractSet[str]) -> bool:
    if not rule.is_active:
        return False
    if rule.coupon_code is not None and rule.coupon_code not in discount_codes:
        return False
    if rule.min_amount is not None and subtotal < rule.min_amount:
        return False
    return True


def discount_amount(
    rule: DiscountRule,
    remaining: Decimal,
    places: Optional[int] = None,
    rounding: Optional[str] = None,
) -> Decimal:
    """Rounded discount for one rule against the current remaining amount"""
    if rule.type == DiscountType.PERCENTAGE:
        amount = percent_of(remaining, rule.value)
    else:
        amount = rule.value

    if rule.max_discount is not None and amount > rule.max_discount:
        amount = rule.max_discount

    amount = round_money(amount, places, rounding)
    return min(amount, clamp_non_negative(remaining))


def apply_discounts(
    subtotal: Decimal,
    rules: Iterable[DiscountRule],
    discount_codes: AbstractSet[str] = frozenset(),
    line_item_ids: Sequence[str] = (),
    places: Optional[int] = None,
    rounding: Optional[str] = None,
) -> DiscountOutcome:
    """
    Reduce subtotal by the applicable discount rules

    Args:
        subtotal: Pre-discount amount
        rules: Tenant discount rules
        discount_codes: Coupon codes supplied with the request
        line_item_ids: IDs recorded as the discount's targets
        places, rounding: Money precision override (config default)

    Returns:
        DiscountOutcome with discounted_subtotal + total_discounts == subtotal
        whenever subtotal >= 0
    """
    applicable = [r for r in rules if is_discount_applicable(r, subtotal, discount_codes)]
    applicable.sort(key=lambda r: (r.priority, r.id))

    discounts: List[AppliedDiscount] = []
    total_discounts = ZERO
    remaining = subtotal
    exclusive_applied = False

    for rule in applicable:
        if not rule.stackable and exclusive_applied:
            logger.debug(f"Skipping non-stackable discount {rule.id}: another exclusive discount applied")
            continue

        amount = discount_amount(rule, remaining, places, rounding)
        if amount <= 0:
            continue

        discounts.append(AppliedDiscount(rule=rule, amount=amount, applied_to=list(line_item_ids)))
        total_discounts += amount
        remaining -= amount
        if not rule.stackable:
            exclusive_applied = True

    return DiscountOutcome(
        discounts=discounts,
        total_discounts=total_discounts,
        discounted_subtotal=clamp_non_negative(subtotal - total_discounts),
    )
