"""
Pricing Service

Pricing & discount computation engine: hourly rates, volume and membership
discounts, lead-time adjustments, tenant pricing rules, stacked discounts,
jurisdictional taxes and subscription proration.
"""

from .discount_engine import apply_discounts
from .factory import create_pricing_calculator, load_pricing_calculator
from .models import (
    AdjustmentType,
    BillingCycle,
    BulkDiscountResult,
    BulkTier,
    DiscountRule,
    DiscountType,
    LineItem,
    MembershipDiscountResult,
    ModifierType,
    PricingContext,
    PricingResult,
    PricingRule,
    ProrationMode,
    RuleRequest,
    RuleType,
    SubscriptionProrationResult,
    TaxRule,
    TaxType,
    TimeBasedPricingResult,
    TimePricingPolicy,
    TimeSlot,
)
from .pricing_calculator import PricingCalculator
from .proration import calculate_subscription_pricing
from .protocols import (
    InvalidIntervalError,
    InvalidRangeError,
    PricingRuleSourceProtocol,
    PricingServiceError,
    PricingValidationError,
)
from .rate_basis import calculate_hourly_booking_price
from .rule_matcher import (
    apply_modifiers,
    find_overlapping_slots,
    match_rules,
    rule_matches,
    time_slots_overlap,
    validate_rule_time_slots,
)
from .tax_engine import apply_taxes
from .tier_discount import calculate_bulk_discount, calculate_membership_discount
from .time_adjustment import calculate_time_based_pricing

__all__ = [
    # Entry points
    "PricingCalculator",
    "calculate_hourly_booking_price",
    "calculate_bulk_discount",
    "calculate_membership_discount",
    "calculate_time_based_pricing",
    "calculate_subscription_pricing",
    "create_pricing_calculator",
    "load_pricing_calculator",
    # Engines
    "apply_discounts",
    "apply_taxes",
    "apply_modifiers",
    "match_rules",
    "rule_matches",
    "time_slots_overlap",
    "find_overlapping_slots",
    "validate_rule_time_slots",
    # Models
    "AdjustmentType",
    "BillingCycle",
    "BulkDiscountResult",
    "BulkTier",
    "DiscountRule",
    "DiscountType",
    "LineItem",
    "MembershipDiscountResult",
    "ModifierType",
    "PricingContext",
    "PricingResult",
    "PricingRule",
    "ProrationMode",
    "RuleRequest",
    "RuleType",
    "SubscriptionProrationResult",
    "TaxRule",
    "TaxType",
    "TimeBasedPricingResult",
    "TimePricingPolicy",
    "TimeSlot",
    # Errors
    "PricingServiceError",
    "PricingValidationError",
    "InvalidIntervalError",
    "InvalidRangeError",
    "PricingRuleSourceProtocol",
]
