"""
Payment lifecycle domain events.

Published by the initiate/verify use cases after the corresponding
order write has been committed.
"""
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

from .base import DomainEvent


@dataclass
class PaymentEvent(DomainEvent):
    """Common payload for payment events."""

    order_id: str = ""
    order_number: str = ""
    payment_reference: Optional[str] = None

    def __post_init__(self):
        """Set aggregate_id to order_id."""
        if not self.aggregate_id and self.order_id:
            object.__setattr__(self, 'aggregate_id', self.order_id)
        super().__post_init__()


@dataclass
class PaymentInitiatedEvent(PaymentEvent):
    """A gateway transaction was created and recorded on the order."""

    amount: Optional[Decimal] = None
    currency: str = ""
    gateway: str = ""


@dataclass
class PaymentInitiationFailedEvent(PaymentEvent):
    """The gateway refused or failed to create a transaction."""

    error_message: str = ""


@dataclass
class PaymentSucceededEvent(PaymentEvent):
    """The order transitioned to paid."""

    amount: Optional[Decimal] = None
    channel: Optional[str] = None


@dataclass
class PaymentFailedEvent(PaymentEvent):
    """Verification found the transaction failed or abandoned."""

    transaction_status: str = ""
    reason: Optional[str] = None
