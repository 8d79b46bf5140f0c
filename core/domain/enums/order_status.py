"""
Order and payment status enums.

All status mutation logic compares against these values; raw status
strings only appear at the persistence and HTTP boundaries.
"""
from enum import Enum


class OrderStatus(str, Enum):
    """Fulfilment status of an order."""

    PENDING = "pending"
    PROCESSING = "processing"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class PaymentStatus(str, Enum):
    """Payment status of an order."""

    PENDING = "pending"
    PAID = "paid"
    FAILED = "failed"
    REFUNDED = "refunded"

    @property
    def is_terminal(self) -> bool:
        """Paid and refunded orders never change payment status in this service."""
        return self in (PaymentStatus.PAID, PaymentStatus.REFUNDED)


class TransactionOutcome(str, Enum):
    """Normalized verdict of a gateway transaction."""

    SUCCESS = "success"
    FAILED = "failed"
    PENDING = "pending"
