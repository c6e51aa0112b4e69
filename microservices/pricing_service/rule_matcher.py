"""
Rule Matcher

Selects the tenant pricing rules that apply to a request and folds their
modifiers into a unit price. Also hosts the authoring-time time-slot overlap
check.

Modifier phases, each in (priority, id) order:
    1. REPLACEMENT  - first match sets the price; later replacements and all
                      MULTIPLIER rules are skipped for this price
    2. MULTIPLIER   - price *= modifier
    3. FIXED_AMOUNT - price += modifier
"""

import logging
from datetime import datetime
from decimal import Decimal
from typing import Iterable, List, Optional, Sequence, Tuple

from .models import (
    AppliedModifier,
    ModifierOutcome,
    ModifierType,
    PricingRule,
    RuleRequest,
    TimeSlot,
)
from .protocols import PricingValidationError

logger = logging.getLogger(__name__)

PHASE_ORDER = (ModifierType.REPLACEMENT, ModifierType.MULTIPLIER, ModifierType.FIXED_AMOUNT)


def _is_aware(moment: datetime) -> bool:
    return moment.tzinfo is not None and moment.tzinfo.utcoffset(moment) is not None


def _check_comparable(rule: PricingRule, moment: datetime, bound: datetime) -> None:
    if _is_aware(moment) != _is_aware(bound):
        raise PricingValidationError(
            f"Rule {rule.id} validity window and request date mix naive and timezone-aware timestamps",
            field="date",
        )


def rule_sort_key(rule: PricingRule) -> Tuple[int, str]:
    return (rule.priority, rule.id)


def within_validity(rule: PricingRule, moment: datetime) -> bool:
    """valid_from <= moment <= valid_to for whichever bounds are set"""
    if rule.valid_from is not None:
        _check_comparable(rule, moment, rule.valid_from)
        if moment < rule.valid_from:
            return False
    if rule.valid_to is not None:
        _check_comparable(rule, moment, rule.valid_to)
        if moment > rule.valid_to:
            return False
    return True


def rule_matches(rule: PricingRule, request: RuleRequest) -> bool:
    """Check one rule against a request"""
    if not rule.is_active:
        return False

    if not within_validity(rule, request.date):
        return False

    if rule.plan_type is not None and rule.plan_type != request.plan_type:
        return False

    if rule.space_type is not None and rule.space_type != request.space_type:
        return False

    if rule.time_slots and not any(slot.covers(request.date) for slot in rule.time_slots):
        return False

    return True


def match_rules(rules: Iterable[PricingRule], request: RuleRequest) -> List[PricingRule]:
    """All matching rules, sorted by (priority, id)"""
    matched = [rule for rule in rules if rule_matches(rule, request)]
    matched.sort(key=rule_sort_key)
    return matched


def apply_modifiers(base_price: Decimal, rules: Sequence[PricingRule]) -> ModifierOutcome:
    """
    Fold matched rule modifiers into base_price

    Rules are re-sorted by (priority, id) so the result never depends on
    the caller's list order.
    """
    ordered = sorted(rules, key=rule_sort_key)
    price = base_price
    applied: List[AppliedModifier] = []
    skipped: List[str] = []
    replaced = False

    for phase in PHASE_ORDER:
        for rule in ordered:
            if rule.modifier_type != phase:
                continue

            if phase == ModifierType.REPLACEMENT:
                if replaced:
                    skipped.append(rule.id)
                    continue
                new_price = rule.modifier
                replaced = True
            elif phase == ModifierType.MULTIPLIER:
                if replaced:
                    skipped.append(rule.id)
                    continue
                new_price = price * rule.modifier
            else:
                new_price = price + rule.modifier

            applied.append(AppliedModifier(
                rule_id=rule.id,
                rule_name=rule.display_name,
                modifier_type=rule.modifier_type,
                price_before=price,
                price_after=new_price,
            ))
            price = new_price

    if skipped:
        logger.debug(f"Skipped rules after replacement: {skipped}")
    return ModifierOutcome(price=price, applied=applied, skipped_rule_ids=skipped)


# ====================
# Authoring-time validation
# ====================

def time_slots_overlap(first: TimeSlot, second: TimeSlot) -> bool:
    """Day sets intersect and start1 < end2 and start2 < end1"""
    if not set(first.days) & set(second.days):
        return False
    return first.start_minutes < second.end_minutes and second.start_minutes < first.end_minutes


def find_overlapping_slots(slots: Sequence[TimeSlot]) -> List[Tuple[int, int]]:
    """Index pairs (i < j) of overlapping slots"""
    overlaps = []
    for i in range(len(slots)):
        for j in range(i + 1, len(slots)):
            if time_slots_overlap(slots[i], slots[j]):
                overlaps.append((i, j))
    return overlaps


def validate_rule_time_slots(
    rule: PricingRule,
    other_rules: Optional[Iterable[PricingRule]] = None,
) -> List[str]:
    """
    Overlap warnings for a rule being authored

    Checks the rule's own slots against each other, and against the slots of
    other active rules in the same tier with the same modifier type. Overlaps
    are reported, never rejected.
    """
    warnings = []

    for i, j in find_overlapping_slots(rule.time_slots):
        first, second = rule.time_slots[i], rule.time_slots[j]
        warnings.append(
            f"Rule {rule.id}: slot {first.start}-{first.end} overlaps slot {second.start}-{second.end}"
        )

    for other in other_rules or ():
        if other.id == rule.id or not other.is_active:
            continue
        if other.tier_id != rule.tier_id or other.modifier_type != rule.modifier_type:
            continue
        for own in rule.time_slots:
            for theirs in other.time_slots:
                if time_slots_overlap(own, theirs):
                    warnings.append(
                        f"Rule {rule.id}: slot {own.start}-{own.end} overlaps rule {other.id} "
                        f"slot {theirs.start}-{theirs.end}"
                    )

    for warning in warnings:
        logger.warning(warning)
    return warnings
