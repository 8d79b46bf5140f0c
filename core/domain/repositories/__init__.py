"""Repository interfaces."""
from .order_repository import (
    OrderRepository,
    PAYMENT_MUTABLE_FIELDS,
    check_payment_changes,
)

__all__ = ["OrderRepository", "PAYMENT_MUTABLE_FIELDS", "check_payment_changes"]
