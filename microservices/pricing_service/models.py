"""
Pricing Service Data Models

Rule snapshots, calculation inputs and itemized results for the pricing
engine. Rules are loaded by the caller (usually from the tenant's database
rows, hence from_attributes) and treated as read-only for one calculation.
"""

from enum import Enum
from typing import Optional, Dict, Any, List, FrozenSet
from datetime import date, datetime
from decimal import Decimal
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from .money import to_decimal
from .protocols import PricingValidationError


# ====================
# Enum Types
# ====================

class RuleType(str, Enum):
    """Pricing rule category"""
    TIME_BASED = "TIME_BASED"
    VOLUME_BASED = "VOLUME_BASED"
    DURATION_BASED = "DURATION_BASED"
    SPACE_BASED = "SPACE_BASED"
    SEASONAL = "SEASONAL"
    MEMBERSHIP = "MEMBERSHIP"
    DYNAMIC = "DYNAMIC"


class ModifierType(str, Enum):
    """How a matched pricing rule changes the unit price"""
    MULTIPLIER = "MULTIPLIER"      # price *= modifier
    FIXED_AMOUNT = "FIXED_AMOUNT"  # price += modifier
    REPLACEMENT = "REPLACEMENT"    # price = modifier


class DiscountType(str, Enum):
    """Discount calculation type"""
    PERCENTAGE = "PERCENTAGE"
    FIXED_AMOUNT = "FIXED_AMOUNT"


class TaxType(str, Enum):
    """Tax category"""
    SALES_TAX = "SALES_TAX"
    VAT = "VAT"
    SERVICE_TAX = "SERVICE_TAX"
    OTHER = "OTHER"


class BillingCycle(str, Enum):
    """Subscription billing cycle"""
    DAILY = "DAILY"
    WEEKLY = "WEEKLY"
    MONTHLY = "MONTHLY"
    QUARTERLY = "QUARTERLY"
    YEARLY = "YEARLY"


class ProrationMode(str, Enum):
    """How the trailing partial period is charged"""
    NONE = "NONE"    # partial days reported, not charged
    DAILY = "DAILY"  # charged per day of the partial period


class AdjustmentType(str, Enum):
    """Lead-time adjustment outcome"""
    EARLY_BIRD = "early_bird"
    LAST_MINUTE = "last_minute"
    NONE = "none"


# ====================
# Helpers
# ====================

def minutes_since_midnight(clock: str) -> int:
    """Parse "HH:MM" into minutes since midnight ("24:00" is end of day)"""
    try:
        hours_str, minutes_str = clock.strip().split(":")
        hours, minutes = int(hours_str), int(minutes_str)
    except (AttributeError, ValueError):
        raise ValueError(f"Invalid time {clock!r}, expected HH:MM")

    if not (0 <= hours <= 24 and 0 <= minutes <= 59) or (hours == 24 and minutes != 0):
        raise ValueError(f"Invalid time {clock!r}, expected HH:MM")
    return hours * 60 + minutes


def day_of_week(moment: datetime) -> int:
    """Day index with Sunday = 0 ... Saturday = 6"""
    return (moment.weekday() + 1) % 7


def check_comparable(first: date, second: date, field: str) -> None:
    """
    Reject timestamp pairs Python cannot compare or subtract

    Both must be dates or both datetimes, and datetimes must agree on
    timezone awareness.
    """
    for value in (first, second):
        if not isinstance(value, date):
            raise PricingValidationError(
                f"{field}: expected a date or datetime, got {type(value).__name__}", field=field
            )
    if isinstance(first, datetime) != isinstance(second, datetime):
        raise PricingValidationError(
            f"{field}: dates and datetimes cannot be mixed", field=field
        )
    if isinstance(first, datetime) and (first.tzinfo is None) != (second.tzinfo is None):
        raise PricingValidationError(
            f"{field}: naive and timezone-aware timestamps cannot be mixed", field=field
        )


def _decimal_or_none(value: Any) -> Any:
    if value is None or isinstance(value, Decimal):
        return value
    if isinstance(value, (int, float, str, bool)):
        return to_decimal(value)
    return value


# ====================
# Rule Models
# ====================

class TimeSlot(BaseModel):
    """Weekly time window a rule is restricted to"""
    model_config = ConfigDict(from_attributes=True, frozen=True)

    start: str = Field(..., description="Start time, HH:MM")
    end: str = Field(..., description="End time (exclusive), HH:MM")
    days: List[int] = Field(
        default_factory=lambda: list(range(7)),
        description="Days of week, 0 = Sunday"
    )

    @field_validator('days')
    @classmethod
    def validate_days(cls, v):
        for day in v:
            if not 0 <= day <= 6:
                raise ValueError(f"Day of week must be 0-6, got {day}")
        return v

    @model_validator(mode="after")
    def validate_window(self):
        if minutes_since_midnight(self.start) >= minutes_since_midnight(self.end):
            raise ValueError(f"Time slot start {self.start} must be before end {self.end}")
        return self

    @property
    def start_minutes(self) -> int:
        return minutes_since_midnight(self.start)

    @property
    def end_minutes(self) -> int:
        return minutes_since_midnight(self.end)

    def covers(self, moment: datetime) -> bool:
        """True when moment's weekday is in days and its time is in [start, end)"""
        if day_of_week(moment) not in self.days:
            return False
        minute = moment.hour * 60 + moment.minute
        return self.start_minutes <= minute < self.end_minutes


class PricingRule(BaseModel):
    """Conditional unit-price modifier scoped to a pricing tier"""
    model_config = ConfigDict(from_attributes=True, frozen=True)

    id: str = Field(..., description="Rule ID")
    tier_id: str = Field(..., description="Pricing tier ID")
    name: str = ""
    rule_type: RuleType

    # Scope
    space_type: Optional[str] = None
    plan_type: Optional[str] = None
    time_slots: List[TimeSlot] = Field(default_factory=list)
    conditions: Dict[str, Any] = Field(default_factory=dict, description="Opaque tenant data")

    # Effect
    base_price: Decimal = Field(default=Decimal("0"), ge=0)
    modifier: Decimal
    modifier_type: ModifierType
    priority: int = 0

    # Lifecycle
    is_active: bool = True
    valid_from: Optional[datetime] = None
    valid_to: Optional[datetime] = None

    @field_validator('base_price', 'modifier', mode='before')
    @classmethod
    def coerce_decimal(cls, v):
        return _decimal_or_none(v)

    @field_validator('time_slots', mode='before')
    @classmethod
    def default_time_slots(cls, v):
        return v if v is not None else []

    @field_validator('conditions', mode='before')
    @classmethod
    def default_conditions(cls, v):
        return v if v is not None else {}

    @model_validator(mode="after")
    def validate_rule(self):
        if self.valid_from is not None and self.valid_to is not None:
            if self.valid_from >= self.valid_to:
                raise ValueError("valid_from must be before valid_to")
        if self.modifier_type in (ModifierType.MULTIPLIER, ModifierType.REPLACEMENT) and self.modifier < 0:
            raise ValueError(f"{self.modifier_type.value} modifier must be >= 0")
        return self

    @property
    def display_name(self) -> str:
        return self.name or self.id


class DiscountRule(BaseModel):
    """Coupon or automatic discount"""
    model_config = ConfigDict(from_attributes=True, frozen=True)

    id: str = Field(..., description="Discount rule ID")
    name: str = Field(..., description="Display name")
    type: DiscountType
    value: Decimal = Field(..., ge=0, description="Percent for PERCENTAGE, amount for FIXED_AMOUNT")
    max_discount: Optional[Decimal] = Field(default=None, ge=0, description="Cap per application")
    min_amount: Optional[Decimal] = Field(default=None, ge=0, description="Minimum subtotal to qualify")
    priority: int = 0
    is_active: bool = True
    stackable: bool = False
    coupon_code: Optional[str] = None

    @field_validator('value', 'max_discount', 'min_amount', mode='before')
    @classmethod
    def coerce_decimal(cls, v):
        return _decimal_or_none(v)


class TaxRule(BaseModel):
    """Jurisdictional tax rate"""
    model_config = ConfigDict(from_attributes=True, frozen=True)

    id: str = Field(..., description="Tax rule ID")
    name: str = Field(..., description="Display name")
    rate: Decimal = Field(..., ge=0, description="Percentage rate")
    type: TaxType = TaxType.OTHER
    jurisdiction: str = Field(..., description="Jurisdiction code")
    amount_threshold: Optional[Decimal] = Field(default=None, ge=0, description="Minimum taxable amount")
    service_types: Optional[List[str]] = Field(default=None, description="Taxed service types; None taxes all")
    client_locations: Optional[List[str]] = Field(default=None, description="Taxed client locations; None taxes all")
    is_active: bool = True

    @field_validator('rate', 'amount_threshold', mode='before')
    @classmethod
    def coerce_decimal(cls, v):
        return _decimal_or_none(v)


class BulkTier(BaseModel):
    """Volume discount tier"""
    model_config = ConfigDict(from_attributes=True, frozen=True)

    min_quantity: int = Field(..., ge=0)
    discount_percentage: Decimal = Field(..., ge=0)

    @field_validator('discount_percentage', mode='before')
    @classmethod
    def coerce_decimal(cls, v):
        return _decimal_or_none(v)


# ====================
# Calculation Inputs
# ====================

class LineItem(BaseModel):
    """Priced unit of a booking or invoice"""
    model_config = ConfigDict(from_attributes=True, frozen=True)

    id: str = Field(..., description="Line item ID")
    description: str = ""
    quantity: int = Field(..., ge=0)
    unit_price: Decimal = Field(..., description="May be negative; clamped during pricing")
    category: Optional[str] = None

    # Override the context for rule matching
    plan_type: Optional[str] = None
    space_type: Optional[str] = None

    metadata: Dict[str, Any] = Field(default_factory=dict)

    @field_validator('unit_price', mode='before')
    @classmethod
    def coerce_decimal(cls, v):
        return _decimal_or_none(v)


class PricingContext(BaseModel):
    """Evaluation timestamp and request-wide attributes for rule matching"""
    model_config = ConfigDict(from_attributes=True, frozen=True)

    client_id: str = Field(..., description="Client ID")
    date: datetime = Field(..., description="Evaluation timestamp")
    discount_codes: FrozenSet[str] = Field(default_factory=frozenset)

    plan_type: Optional[str] = None
    space_type: Optional[str] = None
    jurisdiction: Optional[str] = None
    membership_level: Optional[str] = None
    service_types: Optional[List[str]] = Field(default=None, description="Service types being billed")
    location: Optional[str] = Field(default=None, description="Client location")
    booking_duration: Optional[Decimal] = Field(default=None, ge=0, description="Hours")

    metadata: Dict[str, Any] = Field(default_factory=dict)

    @field_validator('discount_codes', mode='before')
    @classmethod
    def normalize_codes(cls, v):
        if v is None:
            return frozenset()
        if isinstance(v, str):
            return frozenset([v])
        return v

    @field_validator('booking_duration', mode='before')
    @classmethod
    def coerce_decimal(cls, v):
        return _decimal_or_none(v)


class RuleRequest(BaseModel):
    """What the rule matcher evaluates a pricing rule against"""
    model_config = ConfigDict(frozen=True)

    date: datetime
    plan_type: Optional[str] = None
    space_type: Optional[str] = None
    quantity: int = Field(default=1, ge=0, description="Recorded for callers, not matched on")
    duration: Optional[Decimal] = Field(default=None, description="Hours; recorded for callers, not matched on")
    metadata: Dict[str, Any] = Field(default_factory=dict)


class EarlyBirdPolicy(BaseModel):
    """Discount for bookings made at least `days` ahead"""
    days: Decimal = Field(..., ge=0)
    discount: Decimal = Field(..., ge=0, description="Percent")

    @field_validator('days', 'discount', mode='before')
    @classmethod
    def coerce_decimal(cls, v):
        return _decimal_or_none(v)


class LastMinutePolicy(BaseModel):
    """Surcharge for bookings made at most `hours` ahead"""
    hours: Decimal = Field(..., ge=0)
    surcharge: Decimal = Field(..., ge=0, description="Percent")

    @field_validator('hours', 'surcharge', mode='before')
    @classmethod
    def coerce_decimal(cls, v):
        return _decimal_or_none(v)


class TimePricingPolicy(BaseModel):
    """Lead-time adjustment policy"""
    early_bird: Optional[EarlyBirdPolicy] = None
    last_minute: Optional[LastMinutePolicy] = None


# ====================
# Results
# ====================

class BulkDiscountResult(BaseModel):
    """Volume discount outcome"""
    original_total: Decimal
    discount_amount: Decimal = Decimal("0")
    discounted_total: Decimal
    applied_tier: Optional[BulkTier] = None


class MembershipDiscountResult(BaseModel):
    """Membership-level discount outcome"""
    original_amount: Decimal
    discount_rate: Decimal = Decimal("0")
    discount_amount: Decimal = Decimal("0")
    discounted_amount: Decimal


class TimeAdjustment(BaseModel):
    type: AdjustmentType = AdjustmentType.NONE
    amount: Decimal = Decimal("0")
    percentage: Decimal = Decimal("0")


class TimeBasedPricingResult(BaseModel):
    """Lead-time adjustment outcome"""
    adjustment: TimeAdjustment = Field(default_factory=TimeAdjustment)
    adjusted_price: Decimal


class AppliedModifier(BaseModel):
    """One pricing rule applied to a unit price"""
    rule_id: str
    rule_name: str
    modifier_type: ModifierType
    price_before: Decimal
    price_after: Decimal


class ModifierOutcome(BaseModel):
    """Unit price after all matched rules"""
    price: Decimal
    applied: List[AppliedModifier] = Field(default_factory=list)
    skipped_rule_ids: List[str] = Field(default_factory=list)


class PricedLineItem(LineItem):
    """Line item after rule modifiers"""
    effective_unit_price: Decimal
    total: Decimal = Field(..., ge=0)
    applied_rule_ids: List[str] = Field(default_factory=list)


class AppliedDiscount(BaseModel):
    """Discount rule with the amount it took off"""
    rule: DiscountRule
    amount: Decimal = Field(..., ge=0)
    applied_to: List[str] = Field(default_factory=list, description="Line item IDs")


class DiscountOutcome(BaseModel):
    """Discount engine result"""
    discounts: List[AppliedDiscount] = Field(default_factory=list)
    total_discounts: Decimal = Decimal("0")
    discounted_subtotal: Decimal = Decimal("0")


class AppliedTax(BaseModel):
    """Tax rule with its itemized amount"""
    rule: TaxRule
    rate: Decimal
    amount: Decimal = Field(..., ge=0)


class TaxOutcome(BaseModel):
    """Tax engine result"""
    taxes: List[AppliedTax] = Field(default_factory=list)
    total_rate: Decimal = Decimal("0")
    total_taxes: Decimal = Decimal("0")


class PricingBreakdown(BaseModel):
    line_items: List[PricedLineItem] = Field(default_factory=list)
    applied_rules: List[str] = Field(default_factory=list)
    effective_discount_rate: Decimal = Decimal("0")
    effective_tax_rate: Decimal = Decimal("0")


class PricingResult(BaseModel):
    """Itemized price for a set of line items"""
    subtotal: Decimal
    discounts: List[AppliedDiscount] = Field(default_factory=list)
    total_discounts: Decimal = Decimal("0")
    taxable_amount: Decimal = Decimal("0")
    taxes: List[AppliedTax] = Field(default_factory=list)
    total_taxes: Decimal = Decimal("0")
    total: Decimal = Field(..., ge=0)
    currency: str = "USD"
    breakdown: PricingBreakdown = Field(default_factory=PricingBreakdown)


class PartialPeriod(BaseModel):
    days: int = Field(..., ge=0)
    amount: Decimal


class SubscriptionProrationResult(BaseModel):
    """Subscription charge split into whole periods plus a trailing partial"""
    total_amount: Decimal
    full_periods: int = Field(..., ge=0)
    partial_period: Optional[PartialPeriod] = None
    billing_cycle: BillingCycle
    period_amount: Decimal
    prorated_amount: Decimal = Decimal("0")
