"""Domain layer - pure domain models and interfaces."""

from .entities import Order, OrderItem
from .enums import OrderStatus, PaymentStatus, TransactionOutcome
from .exceptions import (
    AlreadyPaidError,
    AuthError,
    GatewayError,
    IdentityUnavailableError,
    NotFoundError,
    OrderCancelledError,
    PaymentError,
    PersistenceError,
    ValidationError,
)
from .gateway import GatewayInitiation, GatewayVerification, PaymentGateway
from .repositories import OrderRepository
from .value_objects import AuthenticatedUser, ExecutionID, Money, OrderNumber, PaymentReference

__all__ = [
    "AlreadyPaidError",
    "AuthError",
    "AuthenticatedUser",
    "ExecutionID",
    "GatewayError",
    "GatewayInitiation",
    "GatewayVerification",
    "IdentityUnavailableError",
    "Money",
    "NotFoundError",
    "Order",
    "OrderCancelledError",
    "OrderItem",
    "OrderNumber",
    "OrderRepository",
    "OrderStatus",
    "PaymentError",
    "PaymentGateway",
    "PaymentReference",
    "PaymentStatus",
    "PersistenceError",
    "TransactionOutcome",
    "ValidationError",
]
