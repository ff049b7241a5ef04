"""
Price breakdown for a bundle.

Derived from a bundle's line items and discount on every request;
never persisted.
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Any

from .money import Money


@dataclass(frozen=True)
class PriceResult:
    """
    Result of a bundle price calculation.

    Attributes:
        original_price: Sum of unit price times quantity over all line items
        discount_amount: Configured discount, not capped at the original price
        final_price: Original minus discount, floored at zero
    """

    original_price: Money
    discount_amount: Money
    final_price: Money

    def to_dict(self) -> dict[str, Any]:
        """Monetary fields as fixed two-decimal strings."""
        return {
            "original_price": self.original_price.to_fixed(),
            "discount_amount": self.discount_amount.to_fixed(),
            "final_price": self.final_price.to_fixed(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any], currency: str = "USD") -> "PriceResult":
        """Build from an API payload with string or numeric amounts."""
        return cls(
            original_price=Money(amount=Decimal(str(data["original_price"])), currency=currency),
            discount_amount=Money(amount=Decimal(str(data["discount_amount"])), currency=currency),
            final_price=Money(amount=Decimal(str(data["final_price"])), currency=currency),
        )
