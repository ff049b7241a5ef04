"""
Bundle pricing engine.

Pricing happens in two stages:

1. Normalization: raw line items and discount settings (as they arrive from
   the API or the database) are coerced into ``PricedLine`` and
   ``NormalizedDiscount`` values. A price that cannot be read counts as 0,
   a quantity that cannot be read counts as 1, an unknown discount type
   means no discount. Normalization never raises.
2. Computation: ``compute_price`` works only on normalized values, so it
   cannot fail either.

The discount amount is reported as configured (a fixed discount is not
capped at the bundle total); only the final price is floored at zero.
"""

import logging
import re
from dataclasses import dataclass
from decimal import MAX_EMAX, MAX_PREC, MIN_EMIN, Context, Decimal, DefaultContext, InvalidOperation, localcontext
from typing import Any, Iterable, List, Mapping, Optional, Sequence

from niche_bundler.domain.models.bundle import BundleDomain, BundleLineItemDomain
from niche_bundler.domain.value_objects import DiscountSpec, DiscountType, Money, PriceResult

logger = logging.getLogger(__name__)

ZERO = Decimal("0")
HUNDRED = Decimal("100")

# Exact arithmetic: sums, products and the division by 100 always terminate
EXACT_CONTEXT = Context(prec=MAX_PREC, Emax=MAX_EMAX, Emin=MIN_EMIN)

# Leading numeric prefix, e.g. "12.50" in "12.50 USD"
_NUMERIC_PREFIX = re.compile(r"^\s*[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?")


@dataclass(frozen=True)
class PricedLine:
    """A line item reduced to what pricing needs."""

    price: Decimal
    quantity: int

    @property
    def total(self) -> Decimal:
        return self.price * self.quantity


@dataclass(frozen=True)
class NormalizedDiscount:
    """Discount after coercion. ``type`` is None when no discount applies."""

    type: Optional[DiscountType]
    value: Decimal

    @classmethod
    def none(cls) -> "NormalizedDiscount":
        return cls(type=None, value=ZERO)


def _parse_decimal(value: Any) -> Optional[Decimal]:
    """Read a finite number from int/float/Decimal/str input, or None."""
    if value is None or isinstance(value, bool):
        return None

    if isinstance(value, Decimal):
        parsed = value
    elif isinstance(value, (int, float)):
        parsed = Decimal(str(value))
    elif isinstance(value, str):
        match = _NUMERIC_PREFIX.match(value)
        if not match:
            return None
        try:
            parsed = Decimal(match.group(0).strip())
        except InvalidOperation:
            return None
    else:
        return None

    if not parsed.is_finite() or parsed.adjusted() > DefaultContext.Emax:
        return None
    return parsed


def normalize_price(value: Any) -> Decimal:
    """Unit price: unreadable or negative values count as 0."""
    parsed = _parse_decimal(value)
    if parsed is None or parsed < 0:
        return ZERO
    return parsed


def normalize_quantity(value: Any) -> int:
    """Quantity: integer part of the value; unreadable, zero or negative counts as 1."""
    parsed = _parse_decimal(value)
    if parsed is None:
        return 1
    quantity = int(parsed)
    return quantity if quantity >= 1 else 1


def normalize_line_items(products: Iterable[Any]) -> List[PricedLine]:
    """
    Coerce raw line items into ``PricedLine`` values.

    Accepts mappings (API/database payloads) or ``BundleLineItemDomain``
    instances. Entries that are neither are priced at 0 with quantity 1.
    """
    lines: List[PricedLine] = []
    for product in products or []:
        if isinstance(product, BundleLineItemDomain):
            price, quantity = product.price, product.quantity
        elif isinstance(product, Mapping):
            price, quantity = product.get("price"), product.get("quantity")
        else:
            price, quantity = None, None

        lines.append(PricedLine(price=normalize_price(price), quantity=normalize_quantity(quantity)))
    return lines


def normalize_discount(discount_type: Any, discount_value: Any) -> NormalizedDiscount:
    """Coerce a raw discount type/value pair."""
    parsed_type = DiscountType.parse(discount_type)
    if parsed_type is None:
        return NormalizedDiscount.none()

    value = _parse_decimal(discount_value)
    if value is None or value < 0:
        value = ZERO
    return NormalizedDiscount(type=parsed_type, value=value)


def compute_price(
    lines: Sequence[PricedLine],
    discount: NormalizedDiscount,
    currency: str = "USD",
) -> PriceResult:
    """
    Compute the price breakdown for normalized line items.

    Amounts are summed at full precision and rounded half-up to two
    decimals only in the returned ``Money`` values.
    """
    with localcontext(EXACT_CONTEXT):
        original = sum((line.total for line in lines), ZERO)

        if discount.type == DiscountType.PERCENTAGE:
            discount_amount = original * discount.value / HUNDRED
        elif discount.type == DiscountType.FIXED:
            discount_amount = discount.value
        else:
            discount_amount = ZERO

        final = max(ZERO, original - discount_amount)

        return PriceResult(
            original_price=Money(amount=original, currency=currency),
            discount_amount=Money(amount=discount_amount, currency=currency),
            final_price=Money(amount=final, currency=currency),
        )


def calculate_price(
    products: Iterable[Any],
    discount_type: Any,
    discount_value: Any,
    currency: str = "USD",
) -> PriceResult:
    """Normalize raw inputs and compute their price breakdown."""
    lines = normalize_line_items(products)
    discount = normalize_discount(discount_type, discount_value)
    result = compute_price(lines, discount, currency=currency)

    logger.debug(
        f"Bundle price: {len(lines)} lines, discount={discount.type and discount.type.value}:{discount.value} "
        f"-> {result.to_dict()}"
    )
    return result


def price_bundle(bundle: BundleDomain, currency: str = "USD") -> PriceResult:
    """Price breakdown for a stored bundle."""
    spec: DiscountSpec = bundle.discount
    return compute_price(
        normalize_line_items(bundle.products),
        NormalizedDiscount(type=spec.type, value=spec.value),
        currency=currency,
    )
