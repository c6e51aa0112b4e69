"""
Unit Tests for the Discount Engine

Tests eligibility, stacking, caps and the subtotal round-trip.
"""

import pytest
from decimal import Decimal

import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), "../../.."))

from microservices.pricing_service import DiscountRule, apply_discounts
from microservices.pricing_service.discount_engine import discount_amount, is_discount_applicable


def make_discount(factory, **overrides) -> DiscountRule:
    return DiscountRule.model_validate(factory.make_discount_rule(**overrides))


class TestEligibility:
    """Test is_discount_applicable"""

    def test_inactive(self, factory):
        rule = make_discount(factory, is_active=False)
        assert not is_discount_applicable(rule, Decimal("100"), frozenset())

    def test_coupon_required(self, factory):
        rule = make_discount(factory, coupon_code="SAVE10")
        assert not is_discount_applicable(rule, Decimal("100"), frozenset())
        assert is_discount_applicable(rule, Decimal("100"), frozenset({"SAVE10"}))

    def test_minimum_amount(self, factory):
        rule = make_discount(factory, min_amount="50")
        assert not is_discount_applicable(rule, Decimal("49.99"), frozenset())
        assert is_discount_applicable(rule, Decimal("50"), frozenset())


class TestDiscountAmount:
    """Test single-rule amounts"""

    def test_percentage(self, factory):
        assert discount_amount(make_discount(factory, value="15"), Decimal("200")) == Decimal("30.00")

    def test_fixed(self, factory):
        rule = make_discount(factory, type="FIXED_AMOUNT", value="25")
        assert discount_amount(rule, Decimal("200")) == Decimal("25")

    def test_max_discount_cap(self, factory):
        rule = make_discount(factory, value="50", max_discount="30")
        assert discount_amount(rule, Decimal("200")) == Decimal("30")

    def test_capped_at_remaining(self, factory):
        """Test a fixed discount never exceeds what is left"""
        rule = make_discount(factory, type="FIXED_AMOUNT", value="500")
        assert discount_amount(rule, Decimal("120")) == Decimal("120")

    def test_rounded_half_up(self, factory):
        rule = make_discount(factory, value="12.5")
        assert discount_amount(rule, Decimal("0.99")) == Decimal("0.12")
        assert discount_amount(rule, Decimal("1.00")) == Decimal("0.13")


class TestApplyDiscounts:
    """Test apply_discounts"""

    def test_no_rules(self):
        outcome = apply_discounts(Decimal("100"), [])
        assert outcome.discounts == []
        assert outcome.total_discounts == 0
        assert outcome.discounted_subtotal == Decimal("100")

    def test_only_first_non_stackable_applies(self, factory):
        rules = [
            make_discount(factory, id="d2", value="20", priority=2),
            make_discount(factory, id="d1", value="10", priority=1),
        ]
        outcome = apply_discounts(Decimal("100"), rules)
        assert [d.rule.id for d in outcome.discounts] == ["d1"]
        assert outcome.total_discounts == Decimal("10")

    def test_stackable_discounts_compound_on_remaining(self, factory):
        """Test each stackable percentage applies to the amount left after earlier discounts"""
        rules = [
            make_discount(factory, id="a", value="10", stackable=True, priority=1),
            make_discount(factory, id="b", value="10", stackable=True, priority=2),
        ]
        outcome = apply_discounts(Decimal("100"), rules)
        assert [d.amount for d in outcome.discounts] == [Decimal("10.00"), Decimal("9.00")]
        assert outcome.discounted_subtotal == Decimal("81.00")

    def test_stackable_combines_with_exclusive(self, factory):
        rules = [
            make_discount(factory, id="excl", type="FIXED_AMOUNT", value="20", priority=1),
            make_discount(factory, id="stack", value="10", stackable=True, priority=2),
            make_discount(factory, id="excl2", value="50", priority=3),
        ]
        outcome = apply_discounts(Decimal("100"), rules)
        assert [d.rule.id for d in outcome.discounts] == ["excl", "stack"]
        assert outcome.total_discounts == Decimal("28.00")

    def test_zero_amount_exclusive_does_not_block(self, factory):
        """Test a non-stackable rule that takes nothing leaves room for the next one"""
        rules = [
            make_discount(factory, id="zero", value="0", priority=1),
            make_discount(factory, id="real", value="10", priority=2),
        ]
        outcome = apply_discounts(Decimal("100"), rules)
        assert [d.rule.id for d in outcome.discounts] == ["real"]

    def test_coupon_codes(self, factory):
        rules = [make_discount(factory, id="coupon", coupon_code="SPRING", value="25")]
        assert apply_discounts(Decimal("100"), rules).discounts == []
        outcome = apply_discounts(Decimal("100"), rules, discount_codes=frozenset({"SPRING"}))
        assert outcome.total_discounts == Decimal("25.00")

    def test_min_amount_checked_against_subtotal(self, factory):
        rules = [
            make_discount(factory, id="big", type="FIXED_AMOUNT", value="90", stackable=True, priority=1),
            make_discount(factory, id="min", value="10", min_amount="100", stackable=True, priority=2),
        ]
        outcome = apply_discounts(Decimal("100"), rules)
        assert [d.rule.id for d in outcome.discounts] == ["big", "min"]

    def test_never_exceeds_subtotal(self, factory):
        rules = [
            make_discount(factory, id="a", type="FIXED_AMOUNT", value="80", stackable=True, priority=1),
            make_discount(factory, id="b", type="FIXED_AMOUNT", value="80", stackable=True, priority=2),
        ]
        outcome = apply_discounts(Decimal("100"), rules)
        assert outcome.total_discounts == Decimal("100")
        assert outcome.discounted_subtotal == 0

    def test_applied_to_records_line_items(self, factory):
        rules = [make_discount(factory)]
        outcome = apply_discounts(Decimal("100"), rules, line_item_ids=["li_1", "li_2"])
        assert outcome.discounts[0].applied_to == ["li_1", "li_2"]

    @pytest.mark.parametrize("subtotal", ["0", "0.01", "33.33", "100", "1234.56"])
    def test_round_trip(self, factory, subtotal):
        """Test discounted_subtotal + total_discounts == subtotal"""
        rules = [
            make_discount(factory, id="a", value="12.5", stackable=True, priority=1),
            make_discount(factory, id="b", type="FIXED_AMOUNT", value="7.77", priority=2),
            make_discount(factory, id="c", value="33.333", stackable=True, max_discount="50", priority=3),
        ]
        amount = Decimal(subtotal)
        outcome = apply_discounts(amount, rules)
        assert outcome.discounted_subtotal + outcome.total_discounts == amount

    def test_custom_rounding(self, factory):
        """Test precision override from the calculator config"""
        rules = [make_discount(factory, value="12.5")]
        outcome = apply_discounts(Decimal("1.00"), rules, places=1, rounding="ROUND_DOWN")
        assert outcome.total_discounts == Decimal("0.1")
