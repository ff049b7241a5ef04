"""
Value objects for the domain layer.

Value objects are immutable objects that represent concepts
with no conceptual identity, only defined by their attributes.
"""

from .discount import DiscountSpec, DiscountType
from .money import Money
from .price_result import PriceResult

__all__ = ["DiscountSpec", "DiscountType", "Money", "PriceResult"]
