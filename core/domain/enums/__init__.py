"""Domain enums."""
from .order_status import OrderStatus, PaymentStatus, TransactionOutcome

__all__ = ["OrderStatus", "PaymentStatus", "TransactionOutcome"]
