"""
Proration

Splits a subscription range into whole billing periods plus one trailing
partial period. Period boundaries are anchored on the start date
(start + k periods), so a subscription starting Jan 31 renews on Feb 29/28,
Mar 31, Apr 30 without drifting.
"""

import logging
import math
from datetime import date, datetime, timedelta
from decimal import Decimal
from typing import Optional, Union

from dateutil.relativedelta import relativedelta

from .models import BillingCycle, PartialPeriod, ProrationMode, SubscriptionProrationResult, check_comparable
from .money import ZERO, round_money, to_decimal
from .protocols import InvalidRangeError, PricingValidationError

logger = logging.getLogger(__name__)

DateLike = Union[date, datetime]

# Price of one period expressed in monthly rates
PERIOD_MONTHLY_FACTOR = {
    BillingCycle.DAILY: Decimal(12) / Decimal(365),
    BillingCycle.WEEKLY: Decimal(12) / Decimal(52),
    BillingCycle.MONTHLY: Decimal(1),
    BillingCycle.QUARTERLY: Decimal(3),
    BillingCycle.YEARLY: Decimal(12),
}

PERIOD_STEP = {
    BillingCycle.DAILY: relativedelta(days=1),
    BillingCycle.WEEKLY: relativedelta(weeks=1),
    BillingCycle.MONTHLY: relativedelta(months=1),
    BillingCycle.QUARTERLY: relativedelta(months=3),
    BillingCycle.YEARLY: relativedelta(years=1),
}

SECONDS_PER_DAY = 24 * 60 * 60


def period_boundary(start: DateLike, cycle: BillingCycle, count: int) -> DateLike:
    """Start of period number `count` (0-based) counted from start"""
    return start + PERIOD_STEP[cycle] * count


def count_full_periods(start: DateLike, end: DateLike, cycle: BillingCycle) -> int:
    """Largest k with start + k periods <= end"""
    if cycle in (BillingCycle.DAILY, BillingCycle.WEEKLY):
        days = (end - start).total_seconds() / SECONDS_PER_DAY
        estimate = int(days // (1 if cycle == BillingCycle.DAILY else 7))
    else:
        months_per_period = {BillingCycle.MONTHLY: 1, BillingCycle.QUARTERLY: 3, BillingCycle.YEARLY: 12}[cycle]
        delta = relativedelta(end, start)
        estimate = (delta.years * 12 + delta.months) // months_per_period

    # Correct the estimate against the anchored boundaries
    while estimate > 0 and period_boundary(start, cycle, estimate) > end:
        estimate -= 1
    while period_boundary(start, cycle, estimate + 1) <= end:
        estimate += 1
    return estimate


def _elapsed_days(start: DateLike, end: DateLike) -> int:
    """Calendar days between two boundaries, partial days rounded up"""
    delta: timedelta = end - start
    return math.ceil(delta.total_seconds() / SECONDS_PER_DAY)


def calculate_subscription_pricing(
    monthly_rate: Union[Decimal, int, float, str],
    start_date: DateLike,
    end_date: DateLike,
    billing_cycle: Union[BillingCycle, str] = BillingCycle.MONTHLY,
    proration_mode: Union[ProrationMode, str] = ProrationMode.DAILY,
    places: Optional[int] = None,
    rounding: Optional[str] = None,
) -> SubscriptionProrationResult:
    """
    Price a subscription range

    Args:
        monthly_rate: Subscription price per month
        start_date: First day of the subscription
        end_date: End of the subscription (exclusive boundary)
        billing_cycle: Period length used for whole periods
        proration_mode: DAILY charges the partial period per day, NONE doesn't
        places, rounding: Money precision override (config default)

    Returns:
        SubscriptionProrationResult

    Raises:
        InvalidRangeError: end_date before start_date
    """
    rate = to_decimal(monthly_rate, "monthly_rate")
    if rate < 0:
        raise PricingValidationError("monthly_rate must be >= 0", field="monthly_rate")
    try:
        cycle = BillingCycle(billing_cycle)
        mode = ProrationMode(proration_mode)
    except ValueError as e:
        raise PricingValidationError(str(e), field="billing_cycle")

    check_comparable(start_date, end_date, "end_date")
    if end_date < start_date:
        raise InvalidRangeError(
            f"Subscription end {end_date.isoformat()} is before start {start_date.isoformat()}",
            field="end_date",
        )

    period_amount = rate * PERIOD_MONTHLY_FACTOR[cycle]
    full_periods = count_full_periods(start_date, end_date, cycle)
    full_amount = period_amount * full_periods

    partial_start = period_boundary(start_date, cycle, full_periods)
    partial_days = _elapsed_days(partial_start, end_date)

    partial_period = None
    prorated_amount = ZERO
    if partial_days > 0:
        partial_end = period_boundary(start_date, cycle, full_periods + 1)
        days_in_period = _elapsed_days(partial_start, partial_end)
        if mode == ProrationMode.DAILY:
            prorated_amount = round_money(period_amount * partial_days / days_in_period, places, rounding)
        partial_period = PartialPeriod(days=partial_days, amount=prorated_amount)
        logger.debug(
            f"Partial {cycle.value.lower()} period: {partial_days}/{days_in_period} days = {prorated_amount}"
        )

    return SubscriptionProrationResult(
        total_amount=round_money(full_amount, places, rounding) + prorated_amount,
        full_periods=full_periods,
        partial_period=partial_period,
        billing_cycle=cycle,
        period_amount=round_money(period_amount, places, rounding),
        prorated_amount=prorated_amount,
    )
