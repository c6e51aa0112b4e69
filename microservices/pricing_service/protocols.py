"""
Pricing Service Protocols

Defines the rule-source interface used to build a calculator and the
exception hierarchy raised by the pricing engine.
"""

from typing import Any, Dict, List, Optional, Protocol, TYPE_CHECKING

if TYPE_CHECKING:
    from .models import DiscountRule, PricingRule, TaxRule


# ====================
# Rule Source Protocol
# ====================


class PricingRuleSourceProtocol(Protocol):
    """
    Protocol for the caller-owned store of tenant pricing configuration

    The engine never fetches rules itself; the persistence layer implements
    this protocol and the factory awaits it once per calculator.
    """

    async def get_pricing_rules(
        self, tenant_id: str, tier_id: Optional[str] = None
    ) -> List["PricingRule"]:
        """Get pricing rules for a tenant, optionally scoped to one tier"""
        ...

    async def get_discount_rules(self, tenant_id: str) -> List["DiscountRule"]:
        """Get discount rules for a tenant"""
        ...

    async def get_tax_rules(
        self, tenant_id: str, jurisdiction: Optional[str] = None
    ) -> List["TaxRule"]:
        """Get tax rules for a tenant, optionally for one jurisdiction"""
        ...


# ====================
# Custom Exceptions
# ====================


class PricingServiceError(Exception):
    """Base exception for pricing service errors"""
    pass


class PricingValidationError(PricingServiceError, ValueError):
    """Raised when pricing input is malformed or contradictory"""

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        details: Optional[List[Dict[str, Any]]] = None,
    ):
        super().__init__(message)
        self.field = field
        self.details = details or []


class InvalidIntervalError(PricingValidationError):
    """Raised when a booking interval ends at or before its start"""
    pass


class InvalidRangeError(PricingValidationError):
    """Raised when a subscription range ends before its start"""
    pass


__all__ = [
    "PricingRuleSourceProtocol",
    "PricingServiceError",
    "PricingValidationError",
    "InvalidIntervalError",
    "InvalidRangeError",
]
