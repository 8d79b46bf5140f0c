"""Domain events for the payment lifecycle."""
from .base import DomainEvent
from .payment_events import (
    PaymentEvent,
    PaymentInitiatedEvent,
    PaymentInitiationFailedEvent,
    PaymentSucceededEvent,
    PaymentFailedEvent,
)

__all__ = [
    "DomainEvent",
    "PaymentEvent",
    "PaymentInitiatedEvent",
    "PaymentInitiationFailedEvent",
    "PaymentSucceededEvent",
    "PaymentFailedEvent",
]
