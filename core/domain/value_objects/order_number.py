"""Order number value object."""
import random
import re
import string
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional


_ORDER_NUMBER_PATTERN = re.compile(r"^ORD-\d{8}-[A-Z0-9]{4}$")
_SUFFIX_ALPHABET = string.ascii_uppercase + string.digits


@dataclass(frozen=True)
class OrderNumber:
    """
    Human-readable order identifier.

    Format: ORD-YYYYMMDD-XXXX (date of checkout + 4 uppercase alphanumerics)
    Examples:
    - ORD-20260125-7KQ2
    - ORD-20260201-A0B9
    """
    value: str

    def __post_init__(self):
        if not self.value:
            raise ValueError("Order number cannot be empty")

        if not _ORDER_NUMBER_PATTERN.match(self.value):
            raise ValueError(
                f"Invalid order number format (expected ORD-YYYYMMDD-XXXX): {self.value}"
            )

    @classmethod
    def generate(cls, now: Optional[datetime] = None) -> "OrderNumber":
        """Generate a new order number for the given checkout date."""
        now = now or datetime.now(timezone.utc)
        suffix = "".join(random.choices(_SUFFIX_ALPHABET, k=4))
        return cls(f"ORD-{now:%Y%m%d}-{suffix}")

    def __str__(self) -> str:
        return self.value
