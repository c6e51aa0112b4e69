"""
Pricing Calculator

Composes rule matching, discounts and taxes into an itemized price.
Build one calculator per call or per request scope from the tenant's rule
snapshots; it holds no other state.
"""

import logging
from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple, Type, TypeVar, Union

from pydantic import BaseModel, ValidationError

from core.config import AppConfig, get_settings

from .discount_engine import apply_discounts
from .models import (
    BillingCycle,
    DiscountRule,
    LineItem,
    PricedLineItem,
    PricingBreakdown,
    PricingContext,
    PricingResult,
    PricingRule,
    ProrationMode,
    RuleRequest,
    SubscriptionProrationResult,
    TaxRule,
    TimeBasedPricingResult,
    TimePricingPolicy,
)
from .money import HUNDRED, ZERO, clamp_non_negative, round_money
from .proration import calculate_subscription_pricing
from .protocols import PricingValidationError
from .rule_matcher import apply_modifiers, match_rules, rule_sort_key
from .tax_engine import apply_taxes
from .time_adjustment import calculate_time_based_pricing

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


def _validate(model: Type[ModelT], value: Union[ModelT, Dict[str, Any]], field: str) -> ModelT:
    """Coerce dicts (or ORM rows) into models, surfacing pydantic errors as PricingValidationError"""
    if isinstance(value, model):
        return value
    try:
        return model.model_validate(value)
    except ValidationError as e:
        raise PricingValidationError(
            f"Invalid {field}: {e.error_count()} validation error(s)",
            field=field,
            details=e.errors(include_url=False),
        )


def _validate_all(model: Type[ModelT], values: Iterable[Any], field: str) -> List[ModelT]:
    return [_validate(model, value, f"{field}[{i}]") for i, value in enumerate(values or ())]


class PricingCalculator:
    """Itemized pricing for one tenant's rule snapshot"""

    def __init__(
        self,
        pricing_rules: Optional[Iterable[Union[PricingRule, Dict[str, Any]]]] = None,
        discount_rules: Optional[Iterable[Union[DiscountRule, Dict[str, Any]]]] = None,
        tax_rules: Optional[Iterable[Union[TaxRule, Dict[str, Any]]]] = None,
        config: Optional[AppConfig] = None,
    ):
        """
        Initialize the calculator from rule snapshots

        Args:
            pricing_rules: Unit-price modifiers
            discount_rules: Coupon and automatic discounts
            tax_rules: Tax rates by jurisdiction
            config: Settings override (global settings when omitted)
        """
        self.config = config or get_settings()
        # Sorted copies; the caller's lists are never reordered
        self.pricing_rules: Tuple[PricingRule, ...] = tuple(
            sorted(_validate_all(PricingRule, pricing_rules, "pricing_rules"), key=rule_sort_key)
        )
        self.discount_rules: Tuple[DiscountRule, ...] = tuple(
            sorted(_validate_all(DiscountRule, discount_rules, "discount_rules"), key=lambda r: (r.priority, r.id))
        )
        self.tax_rules: Tuple[TaxRule, ...] = tuple(_validate_all(TaxRule, tax_rules, "tax_rules"))

    def __repr__(self) -> str:
        return (
            f"PricingCalculator(pricing_rules={len(self.pricing_rules)}, "
            f"discount_rules={len(self.discount_rules)}, tax_rules={len(self.tax_rules)})"
        )

    # ====================
    # Line item pricing
    # ====================

    def calculate_pricing(
        self,
        line_items: Sequence[Union[LineItem, Dict[str, Any]]],
        context: Union[PricingContext, Dict[str, Any]],
    ) -> PricingResult:
        """
        Price line items: rule modifiers → subtotal → discounts → taxes → total

        Raises:
            PricingValidationError: malformed line items or context
        """
        items = _validate_all(LineItem, line_items, "line_items")
        ctx = _validate(PricingContext, context, "context")
        places = self.config.pricing.money_places
        rounding = self.config.pricing.rounding_mode

        try:
            priced_items, applied_rule_names = self._price_line_items(items, ctx, places, rounding)
        except PricingValidationError as e:
            logger.error(f"Pricing failed for client {ctx.client_id}: {e}")
            raise

        subtotal = sum((item.total for item in priced_items), ZERO)

        discount_outcome = apply_discounts(
            subtotal,
            self.discount_rules,
            discount_codes=ctx.discount_codes,
            line_item_ids=[item.id for item in priced_items],
            places=places,
            rounding=rounding,
        )
        taxable_amount = discount_outcome.discounted_subtotal

        jurisdiction = ctx.jurisdiction or self.config.pricing.default_jurisdiction
        tax_outcome = apply_taxes(
            taxable_amount,
            self.tax_rules,
            jurisdiction,
            places,
            rounding,
            service_types=ctx.service_types,
            location=ctx.location,
        )

        total = clamp_non_negative(taxable_amount + tax_outcome.total_taxes)

        applied_rules = (
            applied_rule_names
            + [d.rule.name for d in discount_outcome.discounts]
            + [t.rule.name for t in tax_outcome.taxes]
        )
        breakdown = PricingBreakdown(
            line_items=priced_items,
            applied_rules=applied_rules,
            effective_discount_rate=(
                round_money(discount_outcome.total_discounts / subtotal * HUNDRED, places, rounding)
                if subtotal > 0 else ZERO
            ),
            effective_tax_rate=(
                round_money(tax_outcome.total_taxes / taxable_amount * HUNDRED, places, rounding)
                if taxable_amount > 0 else ZERO
            ),
        )

        logger.info(
            f"Priced {len(priced_items)} item(s) for client {ctx.client_id}: "
            f"subtotal={subtotal} discounts={discount_outcome.total_discounts} "
            f"taxes={tax_outcome.total_taxes} total={total}"
        )

        return PricingResult(
            subtotal=subtotal,
            discounts=discount_outcome.discounts,
            total_discounts=discount_outcome.total_discounts,
            taxable_amount=taxable_amount,
            taxes=tax_outcome.taxes,
            total_taxes=tax_outcome.total_taxes,
            total=total,
            currency=self.config.pricing.currency,
            breakdown=breakdown,
        )

    def _price_line_items(
        self,
        items: List[LineItem],
        ctx: PricingContext,
        places: int,
        rounding: str,
    ) -> Tuple[List[PricedLineItem], List[str]]:
        priced: List[PricedLineItem] = []
        applied_names: List[str] = []

        for item in items:
            request = RuleRequest(
                date=ctx.date,
                plan_type=item.plan_type or ctx.plan_type,
                space_type=item.space_type or ctx.space_type,
                quantity=item.quantity,
                duration=ctx.booking_duration,
                metadata=ctx.metadata,
            )
            matched = match_rules(self.pricing_rules, request)
            outcome = apply_modifiers(item.unit_price, matched)

            effective_price = clamp_non_negative(outcome.price)
            if outcome.price < 0:
                logger.debug(f"Line item {item.id}: negative unit price {outcome.price} clamped to 0")

            for modifier in outcome.applied:
                if modifier.rule_name not in applied_names:
                    applied_names.append(modifier.rule_name)

            priced.append(PricedLineItem(
                **item.model_dump(),
                effective_unit_price=effective_price,
                total=round_money(effective_price * item.quantity, places, rounding),
                applied_rule_ids=[m.rule_id for m in outcome.applied],
            ))

        return priced, applied_names

    # ====================
    # Independent entry points
    # ====================

    def calculate_subscription_pricing(
        self,
        monthly_rate: Union[Decimal, int, float, str],
        start_date: datetime,
        end_date: datetime,
        billing_cycle: Union[BillingCycle, str] = BillingCycle.MONTHLY,
        proration_mode: Union[ProrationMode, str] = ProrationMode.DAILY,
    ) -> SubscriptionProrationResult:
        """Subscription range split into whole periods plus a prorated remainder"""
        return calculate_subscription_pricing(
            monthly_rate,
            start_date,
            end_date,
            billing_cycle,
            proration_mode,
            places=self.config.pricing.money_places,
            rounding=self.config.pricing.rounding_mode,
        )

    def calculate_time_based_pricing(
        self,
        base_price: Union[Decimal, int, float, str],
        booking_date: datetime,
        service_date: datetime,
        policy: Union[TimePricingPolicy, Dict[str, Any], None] = None,
    ) -> TimeBasedPricingResult:
        """Early-bird / last-minute adjustment of base_price"""
        try:
            return calculate_time_based_pricing(base_price, booking_date, service_date, policy)
        except ValidationError as e:
            raise PricingValidationError(
                f"Invalid time pricing policy: {e.error_count()} validation error(s)",
                field="policy",
                details=e.errors(include_url=False),
            )
