"""
Unit Tests for Lead-Time Adjustments

Tests early-bird discounts and last-minute surcharges.
"""

import pytest
from datetime import date, datetime, timedelta, timezone
from decimal import Decimal

import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), "../../.."))

from microservices.pricing_service import (
    AdjustmentType,
    PricingCalculator,
    PricingValidationError,
    TimePricingPolicy,
    calculate_time_based_pricing,
)
from microservices.pricing_service.time_adjustment import lead_time_hours


SERVICE = datetime(2024, 1, 20, 14, 0)


class TestLeadTime:
    """Test lead time computation"""

    def test_positive(self):
        assert lead_time_hours(SERVICE - timedelta(hours=4), SERVICE) == Decimal("4")

    def test_negative_when_booked_after_service(self):
        assert lead_time_hours(SERVICE + timedelta(hours=1), SERVICE) < 0


class TestTimeBasedPricing:
    """Test calculate_time_based_pricing"""

    def test_early_bird(self):
        """Test booking 19 days ahead gets the early-bird discount"""
        result = calculate_time_based_pricing(
            100,
            datetime(2024, 1, 1),
            datetime(2024, 1, 20),
            {"early_bird": {"days": 14, "discount": 10}},
        )
        assert result.adjustment.type == AdjustmentType.EARLY_BIRD
        assert result.adjustment.amount == Decimal("10")
        assert result.adjusted_price == Decimal("90")

    def test_last_minute(self):
        """Test booking 4 hours ahead gets the surcharge"""
        result = calculate_time_based_pricing(
            100,
            datetime(2024, 1, 20, 10, 0),
            datetime(2024, 1, 20, 14, 0),
            {"last_minute": {"hours": 12, "surcharge": 25}},
        )
        assert result.adjustment.type == AdjustmentType.LAST_MINUTE
        assert result.adjustment.amount == Decimal("25")
        assert result.adjustment.percentage == Decimal("25")
        assert result.adjusted_price == Decimal("125")

    def test_last_minute_boundary_is_inclusive(self, factory):
        """Test exactly `hours` of lead time counts as last minute"""
        result = calculate_time_based_pricing(
            100, SERVICE - timedelta(hours=12), SERVICE, factory.make_time_policy()
        )
        assert result.adjustment.type == AdjustmentType.LAST_MINUTE

    def test_early_bird_boundary_is_inclusive(self, factory):
        """Test exactly `days` of lead time counts as early bird"""
        result = calculate_time_based_pricing(
            100, SERVICE - timedelta(days=14), SERVICE, factory.make_time_policy()
        )
        assert result.adjustment.type == AdjustmentType.EARLY_BIRD

    def test_booked_after_service_is_last_minute(self, factory):
        """Test negative lead time is treated as last minute"""
        result = calculate_time_based_pricing(
            100, SERVICE + timedelta(hours=2), SERVICE, factory.make_time_policy()
        )
        assert result.adjustment.type == AdjustmentType.LAST_MINUTE

    def test_last_minute_checked_first(self):
        """Test a same-instant booking is last minute even with a 0-day early bird"""
        policy = TimePricingPolicy.model_validate({
            "early_bird": {"days": 0, "discount": 10},
            "last_minute": {"hours": 1, "surcharge": 20},
        })
        result = calculate_time_based_pricing(100, SERVICE, SERVICE, policy)
        assert result.adjustment.type == AdjustmentType.LAST_MINUTE
        assert result.adjusted_price == Decimal("120")

    def test_between_thresholds(self, factory):
        """Test no adjustment between last-minute and early-bird windows"""
        result = calculate_time_based_pricing(
            100, SERVICE - timedelta(days=3), SERVICE, factory.make_time_policy()
        )
        assert result.adjustment.type == AdjustmentType.NONE
        assert result.adjustment.amount == 0
        assert result.adjusted_price == Decimal("100")

    def test_no_policy(self):
        """Test a missing policy leaves the price unchanged"""
        result = calculate_time_based_pricing(100, SERVICE - timedelta(hours=1), SERVICE)
        assert result.adjustment.type == AdjustmentType.NONE
        assert result.adjusted_price == Decimal("100")

    def test_calculator_wraps_invalid_policy(self, app_config):
        """Test the calculator surfaces policy errors as PricingValidationError"""
        calculator = PricingCalculator(config=app_config)
        with pytest.raises(PricingValidationError) as exc_info:
            calculator.calculate_time_based_pricing(
                100, SERVICE - timedelta(days=1), SERVICE, {"early_bird": {"days": -1, "discount": 10}}
            )
        assert exc_info.value.field == "policy"
        assert exc_info.value.details

    def test_date_inputs(self):
        """Test plain dates work when both sides are dates"""
        result = calculate_time_based_pricing(
            100, date(2024, 1, 1), date(2024, 1, 20), {"early_bird": {"days": 14, "discount": 10}}
        )
        assert result.adjusted_price == Decimal("90")

    def test_naive_and_aware_dates_raise(self, factory):
        """Test mixing naive and timezone-aware timestamps is a validation error"""
        with pytest.raises(PricingValidationError) as exc_info:
            calculate_time_based_pricing(
                100, datetime(2024, 1, 1), datetime(2024, 1, 20, tzinfo=timezone.utc), factory.make_time_policy()
            )
        assert exc_info.value.field == "service_date"

    def test_date_and_datetime_raise(self, factory):
        with pytest.raises(PricingValidationError):
            calculate_time_based_pricing(100, date(2024, 1, 1), datetime(2024, 1, 20), factory.make_time_policy())

    def test_calculator_surfaces_mixed_timestamps(self, factory, app_config):
        """Test the calculator raises PricingValidationError, not TypeError"""
        calculator = PricingCalculator(config=app_config)
        with pytest.raises(PricingValidationError):
            calculator.calculate_time_based_pricing(
                100, datetime(2024, 1, 1), datetime(2024, 1, 20, tzinfo=timezone.utc), factory.make_time_policy()
            )
