"""
Tier Discount

Volume (bulk) tier selection and membership-level rate discounts.
"""

import logging
from decimal import Decimal
from typing import Any, Dict, Iterable, Mapping, Optional, Union

from .models import BulkTier, BulkDiscountResult, MembershipDiscountResult
from .money import ZERO, percent_of, to_decimal
from .protocols import PricingValidationError

logger = logging.getLogger(__name__)

Number = Union[Decimal, int, float, str]


def select_bulk_tier(quantity: int, tiers: Iterable[BulkTier]) -> Optional[BulkTier]:
    """
    Richest qualifying tier: highest min_quantity with quantity >= min_quantity

    Ties on min_quantity keep the tier listed first.
    """
    selected: Optional[BulkTier] = None
    for tier in tiers:
        if tier.min_quantity > quantity:
            continue
        if selected is None or tier.min_quantity > selected.min_quantity:
            selected = tier
    return selected


def calculate_bulk_discount(
    quantity: int,
    unit_price: Number,
    tiers: Iterable[Union[BulkTier, Dict[str, Any]]],
) -> BulkDiscountResult:
    """
    Apply the best qualifying volume tier to quantity × unit_price

    Args:
        quantity: Units purchased, must be >= 0
        unit_price: Price per unit
        tiers: Tier definitions (models or dicts)

    Returns:
        BulkDiscountResult; applied_tier is None when no tier qualifies
    """
    if isinstance(quantity, bool) or not isinstance(quantity, int):
        raise PricingValidationError("quantity must be an integer", field="quantity")
    if quantity < 0:
        raise PricingValidationError("quantity must be >= 0", field="quantity")

    price = to_decimal(unit_price, "unit_price")
    tier_models = [t if isinstance(t, BulkTier) else BulkTier.model_validate(t) for t in tiers]
    original_total = price * quantity

    tier = select_bulk_tier(quantity, tier_models)
    if tier is None:
        return BulkDiscountResult(
            original_total=original_total,
            discount_amount=ZERO,
            discounted_total=original_total,
        )

    discount_amount = percent_of(original_total, tier.discount_percentage)
    logger.debug(
        f"Bulk tier min={tier.min_quantity} ({tier.discount_percentage}%) "
        f"applied to quantity {quantity}: -{discount_amount}"
    )
    return BulkDiscountResult(
        original_total=original_total,
        discount_amount=discount_amount,
        discounted_total=original_total - discount_amount,
        applied_tier=tier,
    )


def calculate_membership_discount(
    amount: Number,
    membership_level: Optional[str],
    rates_by_level: Mapping[str, Number],
) -> MembershipDiscountResult:
    """Discount amount by the percentage configured for membership_level (unknown level: none)"""
    base = to_decimal(amount, "amount")

    if membership_level is None or membership_level not in rates_by_level:
        logger.debug(f"No membership rate for level {membership_level!r}")
        return MembershipDiscountResult(
            original_amount=base,
            discount_rate=ZERO,
            discount_amount=ZERO,
            discounted_amount=base,
        )

    rate = to_decimal(rates_by_level[membership_level], f"rates_by_level[{membership_level}]")
    discount_amount = percent_of(base, rate)
    return MembershipDiscountResult(
        original_amount=base,
        discount_rate=rate,
        discount_amount=discount_amount,
        discounted_amount=base - discount_amount,
    )
