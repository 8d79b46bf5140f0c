"""Domain value objects - pure Python immutable types."""

from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP
from typing import Union
from uuid import UUID, uuid4


MINOR_UNITS_PER_MAJOR = 100
_CENT = Decimal("0.01")


def to_minor_units(amount: Union[Decimal, int, str]) -> int:
    """
    Convert a major-unit amount to gateway minor units.

    Multiplies by 100 and rounds half-up to the nearest integer.

    Args:
        amount: Amount in major units (e.g., 1500.00 KES)

    Returns:
        Amount in minor units (e.g., 150000)
    """
    if not isinstance(amount, Decimal):
        amount = Decimal(str(amount))
    scaled = amount * MINOR_UNITS_PER_MAJOR
    return int(scaled.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def from_minor_units(units: int) -> Decimal:
    """
    Convert gateway minor units back to a major-unit amount.

    Args:
        units: Amount in minor units

    Returns:
        Decimal amount with exactly two decimal places
    """
    return (Decimal(int(units)) / MINOR_UNITS_PER_MAJOR).quantize(_CENT)


@dataclass(frozen=True)
class Money:
    """
    Immutable monetary value with currency.

    CRITICAL: Always use Decimal, never float!
    """
    amount: Decimal
    currency: str = "KES"

    def __post_init__(self):
        # Convert to Decimal if needed
        if not isinstance(self.amount, Decimal):
            object.__setattr__(self, 'amount', Decimal(str(self.amount)))

        # Validate currency code (3 letters)
        if not isinstance(self.currency, str) or len(self.currency) != 3:
            raise ValueError(
                f"Currency must be 3-letter ISO code, got: {self.currency}"
            )

    def __str__(self) -> str:
        return f"{self.amount} {self.currency}"

    def to_minor_units(self) -> int:
        """Amount in gateway minor units."""
        return to_minor_units(self.amount)


@dataclass(frozen=True)
class ExecutionID:
    """Unique identifier for request execution tracing."""

    value: UUID

    @classmethod
    def generate(cls) -> "ExecutionID":
        """Generate a new ExecutionID."""
        return cls(value=uuid4())

    def __str__(self) -> str:
        """Return string representation."""
        return str(self.value)
