"""
Money value object for handling monetary amounts with currency.

This value object ensures type safety and provides clear semantics
for monetary operations in the domain.
"""

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, getcontext, localcontext

CENTS = Decimal("0.01")


@dataclass(frozen=True)
class Money:
    """
    Immutable value object representing a monetary amount with currency.

    Amounts are normalized to two decimal places with half-up rounding,
    which is how prices are shown on the storefront and returned by the API.

    Attributes:
        amount: The monetary amount as Decimal for precision
        currency: Currency code (e.g., "USD", "EUR")

    Example:
        >>> price = Money(amount=Decimal("19.999"), currency="USD")
        >>> price.to_fixed()
        '20.00'
    """

    amount: Decimal
    currency: str = "USD"

    def __post_init__(self) -> None:
        """Validate money object after initialization."""
        if not isinstance(self.amount, Decimal):
            object.__setattr__(self, "amount", Decimal(str(self.amount)))

        if not self.amount.is_finite():
            raise ValueError(f"Money amount must be finite: {self.amount}")

        # Integer digits plus cents, so quantize never runs out of precision
        with localcontext() as ctx:
            ctx.prec = max(getcontext().prec, self.amount.adjusted() + 3)
            normalized_amount = self.amount.quantize(CENTS, rounding=ROUND_HALF_UP)
            if normalized_amount.is_zero():
                normalized_amount = normalized_amount.copy_abs()
        object.__setattr__(self, "amount", normalized_amount)

        if self.amount < 0:
            raise ValueError(f"Money amount cannot be negative: {self.amount}")

        if not self.currency or len(self.currency) != 3:
            raise ValueError(f"Invalid currency code: {self.currency}")

    def __str__(self) -> str:
        """String representation of Money."""
        return f"{self.currency} {self.to_fixed()}"

    def __repr__(self) -> str:
        """Developer-friendly representation."""
        return f"Money(amount=Decimal('{self.amount}'), currency='{self.currency}')"

    def to_fixed(self) -> str:
        """Amount as a fixed two-decimal string ("25.00")."""
        return str(self.amount)

    def display(self, symbol: str = "$") -> str:
        """Amount prefixed with a currency symbol ("$25.00")."""
        return f"{symbol}{self.to_fixed()}"

    @property
    def is_zero(self) -> bool:
        """Check if amount is zero."""
        return self.amount == Decimal("0")
