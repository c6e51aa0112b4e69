"""
Money helpers

Decimal coercion and rounding shared by every pricing component. Floats are
converted through their string form so 0.1 becomes Decimal("0.1").
"""

from decimal import Decimal, InvalidOperation
from typing import Any, Optional

from core.config import get_settings

from .protocols import PricingValidationError

HUNDRED = Decimal("100")
ZERO = Decimal("0")


def to_decimal(value: Any, field: str = "value") -> Decimal:
    """Coerce a number-like value to a finite Decimal"""
    if value is None:
        raise PricingValidationError(f"{field} is required", field=field)
    if isinstance(value, bool):
        raise PricingValidationError(f"{field} must be numeric, got bool", field=field)

    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, int):
        result = Decimal(value)
    elif isinstance(value, (float, str)):
        try:
            result = Decimal(str(value).strip())
        except InvalidOperation:
            raise PricingValidationError(f"{field} is not a valid number: {value!r}", field=field)
    else:
        raise PricingValidationError(
            f"{field} must be numeric, got {type(value).__name__}", field=field
        )

    if not result.is_finite():
        raise PricingValidationError(f"{field} must be finite", field=field)
    return result


def round_money(value: Decimal, places: Optional[int] = None, rounding: Optional[str] = None) -> Decimal:
    """Quantize an amount to the configured money precision"""
    pricing_config = get_settings().pricing
    places = pricing_config.money_places if places is None else places
    rounding = pricing_config.rounding_mode if rounding is None else rounding
    return value.quantize(Decimal(1).scaleb(-places), rounding=rounding)


def percent_of(amount: Decimal, percentage: Decimal) -> Decimal:
    """amount × percentage / 100, unrounded"""
    return amount * percentage / HUNDRED


def clamp_non_negative(value: Decimal) -> Decimal:
    return value if value > ZERO else ZERO
