"""
Discount specification value object.

A bundle carries exactly one discount: either a percentage of the bundle
total or a fixed amount taken off the total.
"""

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Any, Optional


class DiscountType(str, Enum):
    """Supported bundle discount types."""

    PERCENTAGE = "percentage"
    FIXED = "fixed"

    @classmethod
    def parse(cls, value: Any) -> Optional["DiscountType"]:
        """Return the matching type, or None for anything unrecognized."""
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            return None


@dataclass(frozen=True)
class DiscountSpec:
    """
    Immutable discount specification.

    Attributes:
        type: Percentage or fixed amount
        value: Non-negative magnitude; at most 100 for percentages
    """

    type: DiscountType
    value: Decimal

    def __post_init__(self) -> None:
        """Validate discount invariants."""
        if not isinstance(self.type, DiscountType):
            object.__setattr__(self, "type", DiscountType(self.type))

        if not isinstance(self.value, Decimal):
            object.__setattr__(self, "value", Decimal(str(self.value)))

        if not self.value.is_finite() or self.value < 0:
            raise ValueError(f"Discount value must be a non-negative number: {self.value}")

        if self.type == DiscountType.PERCENTAGE and self.value > 100:
            raise ValueError(f"Percentage discount cannot exceed 100: {self.value}")

    def to_dict(self) -> dict[str, Any]:
        """Flatten to the wire/persistence representation."""
        return {"discount_type": self.type.value, "discount_value": float(self.value)}
