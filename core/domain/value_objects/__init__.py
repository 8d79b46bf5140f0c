"""Domain value objects."""

from .value_objects import ExecutionID, Money, from_minor_units, to_minor_units
from .order_number import OrderNumber
from .payment_reference import PaymentReference
from .identity import AuthenticatedUser

__all__ = [
    "AuthenticatedUser",
    "ExecutionID",
    "Money",
    "OrderNumber",
    "PaymentReference",
    "from_minor_units",
    "to_minor_units",
]
