"""
Rate Basis

Elapsed-time charges for hourly space bookings.
"""

import logging
from datetime import datetime
from decimal import Decimal, ROUND_CEILING
from typing import Optional, Union

from core.config import get_settings

from .models import check_comparable
from .money import to_decimal
from .protocols import InvalidIntervalError, PricingValidationError

logger = logging.getLogger(__name__)

SECONDS_PER_HOUR = Decimal(3600)


def billable_hours(start: datetime, end: datetime, minimum_hours: int = 1) -> int:
    """Elapsed hours rounded up to the next whole hour, never below minimum_hours"""
    check_comparable(start, end, "end")
    if end <= start:
        raise InvalidIntervalError(
            f"Booking end {end.isoformat()} must be after start {start.isoformat()}",
            field="end",
        )
    if minimum_hours < 0:
        raise PricingValidationError("minimum_hours must be >= 0", field="minimum_hours")

    elapsed = Decimal(str((end - start).total_seconds())) / SECONDS_PER_HOUR
    elapsed_hours = int(elapsed.to_integral_value(rounding=ROUND_CEILING))
    return max(minimum_hours, elapsed_hours)


def calculate_hourly_booking_price(
    hourly_rate: Union[Decimal, int, float, str],
    start: datetime,
    end: datetime,
    minimum_hours: Optional[int] = None,
) -> Decimal:
    """
    Price an hourly booking

    A 2.5-hour booking bills as 3 hours; a booking shorter than the minimum
    bills the minimum.

    Args:
        hourly_rate: Price per started hour
        start: Booking start
        end: Booking end, must be after start
        minimum_hours: Minimum billed hours (config default when omitted)

    Returns:
        billed_hours × hourly_rate

    Raises:
        InvalidIntervalError: end is not after start
    """
    rate = to_decimal(hourly_rate, "hourly_rate")
    if rate < 0:
        raise PricingValidationError("hourly_rate must be >= 0", field="hourly_rate")
    if minimum_hours is None:
        minimum_hours = get_settings().pricing.default_minimum_hours

    hours = billable_hours(start, end, minimum_hours)
    price = rate * hours
    logger.debug(f"Hourly booking: {hours}h × {rate} = {price}")
    return price
