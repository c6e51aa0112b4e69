"""
Time Adjustment

Early-bird discounts and last-minute surcharges driven by booking lead time.
"""

import logging
from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, Union

from .models import (
    AdjustmentType,
    TimeAdjustment,
    TimeBasedPricingResult,
    TimePricingPolicy,
    check_comparable,
)
from .money import percent_of, to_decimal

logger = logging.getLogger(__name__)

SECONDS_PER_HOUR = Decimal(3600)
HOURS_PER_DAY = Decimal(24)


def lead_time_hours(booking_date: datetime, service_date: datetime) -> Decimal:
    """Hours from booking to service; zero or negative when booked at/after service time"""
    check_comparable(booking_date, service_date, "service_date")
    return Decimal(str((service_date - booking_date).total_seconds())) / SECONDS_PER_HOUR


def calculate_time_based_pricing(
    base_price: Union[Decimal, int, float, str],
    booking_date: datetime,
    service_date: datetime,
    policy: Union[TimePricingPolicy, Dict[str, Any], None] = None,
) -> TimeBasedPricingResult:
    """
    Adjust base_price for how far ahead the booking was made

    Last-minute is checked first, so a same-instant booking is last-minute
    even when an early-bird threshold of 0 days is configured.
    """
    price = to_decimal(base_price, "base_price")
    if policy is None:
        policy = TimePricingPolicy()
    elif not isinstance(policy, TimePricingPolicy):
        policy = TimePricingPolicy.model_validate(policy)

    lead_time = lead_time_hours(booking_date, service_date)

    if policy.last_minute is not None and lead_time <= policy.last_minute.hours:
        amount = percent_of(price, policy.last_minute.surcharge)
        logger.debug(f"Last-minute surcharge: lead time {lead_time}h <= {policy.last_minute.hours}h")
        return TimeBasedPricingResult(
            adjustment=TimeAdjustment(
                type=AdjustmentType.LAST_MINUTE,
                amount=amount,
                percentage=policy.last_minute.surcharge,
            ),
            adjusted_price=price + amount,
        )

    if policy.early_bird is not None and lead_time >= policy.early_bird.days * HOURS_PER_DAY:
        amount = percent_of(price, policy.early_bird.discount)
        logger.debug(f"Early-bird discount: lead time {lead_time}h >= {policy.early_bird.days}d")
        return TimeBasedPricingResult(
            adjustment=TimeAdjustment(
                type=AdjustmentType.EARLY_BIRD,
                amount=amount,
                percentage=policy.early_bird.discount,
            ),
            adjusted_price=price - amount,
        )

    return TimeBasedPricingResult(adjustment=TimeAdjustment(), adjusted_price=price)
