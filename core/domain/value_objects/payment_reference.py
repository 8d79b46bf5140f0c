"""Payment reference value object."""
import time
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class PaymentReference:
    """
    Correlates a local order with one gateway transaction attempt.

    Format: {order_number}-{unix_millis}

    Uniqueness comes from pairing the order number with the initiation
    time in milliseconds. Two initiations of the same order inside the
    same millisecond would collide; the gateway rejects the duplicate.
    """
    value: str

    def __post_init__(self):
        if not self.value or not self.value.strip():
            raise ValueError("Payment reference cannot be empty")

    @classmethod
    def generate(cls, order_number: str, now_millis: Optional[int] = None) -> "PaymentReference":
        """Build a fresh reference for an order."""
        if now_millis is None:
            now_millis = time.time_ns() // 1_000_000
        return cls(f"{order_number}-{now_millis}")

    def __str__(self) -> str:
        return self.value
