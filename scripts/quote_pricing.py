#!/usr/bin/env python3
"""
Pricing quote tool

Runs the pricing engine against JSON request files or command-line values
and prints the itemized result as JSON.

Request file format (quote / check-slots):
    {
        "pricing_rules": [...],
        "discount_rules": [...],
        "tax_rules": [...],
        "line_items": [...],
        "context": {...}
    }
"""

import argparse
import json
import sys
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List

# Add project root to Python path
sys.path.append(str(Path(__file__).parent.parent))

from core.config import get_settings
from core.logger import setup_service_logger
from microservices.pricing_service import (
    PricingCalculator,
    PricingRule,
    PricingServiceError,
    calculate_hourly_booking_price,
    validate_rule_time_slots,
)


def load_request(path: str) -> Dict[str, Any]:
    """Read a JSON request file"""
    with open(path, "r", encoding="utf-8") as f:
        return json.load(f)


def quote_request(request: Dict[str, Any]) -> Dict[str, Any]:
    """Price the line items of a request document"""
    calculator = PricingCalculator(
        pricing_rules=request.get("pricing_rules", []),
        discount_rules=request.get("discount_rules", []),
        tax_rules=request.get("tax_rules", []),
    )
    result = calculator.calculate_pricing(request.get("line_items", []), request["context"])
    return result.model_dump(mode="json")


def subscription_quote(rate: str, start: str, end: str, cycle: str, proration: str) -> Dict[str, Any]:
    """Price a subscription range"""
    calculator = PricingCalculator()
    result = calculator.calculate_subscription_pricing(
        rate,
        datetime.fromisoformat(start),
        datetime.fromisoformat(end),
        billing_cycle=cycle.upper(),
        proration_mode=proration.upper(),
    )
    return result.model_dump(mode="json")


def hourly_quote(rate: str, start: str, end: str, minimum_hours: int) -> Dict[str, Any]:
    """Price an hourly booking"""
    price = calculate_hourly_booking_price(
        rate,
        datetime.fromisoformat(start),
        datetime.fromisoformat(end),
        minimum_hours,
    )
    return {"price": str(price), "currency": get_settings().pricing.currency}


def check_slots(request: Dict[str, Any]) -> List[str]:
    """Overlap warnings for every pricing rule in a request document, one per overlapping pair"""
    rules = [PricingRule.model_validate(r) for r in request.get("pricing_rules", [])]
    warnings = []
    for i, rule in enumerate(rules):
        warnings.extend(validate_rule_time_slots(rule, rules[i + 1:]))
    return warnings


def main(argv=None) -> int:
    """Command-line entry point"""
    parser = argparse.ArgumentParser(description="Pricing engine quote tool")
    parser.add_argument("--log-level", default=None, help="Log level (defaults to LOG_LEVEL)")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Line item quote
    quote_parser = subparsers.add_parser("quote", help="Price a JSON request file")
    quote_parser.add_argument("request", help="Path to request JSON")

    # Subscription quote
    sub_parser = subparsers.add_parser("subscription", help="Price a subscription range")
    sub_parser.add_argument("--rate", required=True, help="Monthly rate")
    sub_parser.add_argument("--start", required=True, help="Start (ISO 8601)")
    sub_parser.add_argument("--end", required=True, help="End (ISO 8601)")
    sub_parser.add_argument("--cycle", default="monthly", help="Billing cycle")
    sub_parser.add_argument("--proration", default="daily", choices=["daily", "none"], help="Partial period charging")

    # Hourly quote
    hourly_parser = subparsers.add_parser("hourly", help="Price an hourly booking")
    hourly_parser.add_argument("--rate", required=True, help="Hourly rate")
    hourly_parser.add_argument("--start", required=True, help="Start (ISO 8601)")
    hourly_parser.add_argument("--end", required=True, help="End (ISO 8601)")
    hourly_parser.add_argument("--min-hours", type=int, default=None, help="Minimum billed hours")

    # Slot overlap check
    slots_parser = subparsers.add_parser("check-slots", help="Report overlapping rule time slots")
    slots_parser.add_argument("request", help="Path to request JSON")

    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    logger = setup_service_logger("microservices.pricing_service", level=args.log_level)

    try:
        if args.command == "quote":
            output = quote_request(load_request(args.request))
        elif args.command == "subscription":
            output = subscription_quote(args.rate, args.start, args.end, args.cycle, args.proration)
        elif args.command == "hourly":
            output = hourly_quote(args.rate, args.start, args.end, args.min_hours)
        else:
            output = {"warnings": check_slots(load_request(args.request))}
    except PricingServiceError as e:
        logger.error(f"Pricing failed: {e}")
        print(json.dumps({"error": str(e), "field": getattr(e, "field", None)}, indent=2))
        return 2
    except (OSError, ValueError, KeyError) as e:
        logger.error(f"Invalid request: {e}")
        return 2

    print(json.dumps(output, indent=2, ensure_ascii=False))
    return 0


if __name__ == "__main__":
    sys.exit(main())
