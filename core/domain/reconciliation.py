"""
Reconciliation state machine.

The one place where payment status transitions are decided. Callers
(initiator, verifier, a future webhook handler) ask for a Transition and
commit it through OrderRepository.update_payment_fields, which applies
it as a compare-and-swap on payment_status.

    pending --initiate fails-------------> failed
    pending --verify: gateway success----> paid (order completed)
    failed  --verify: gateway success----> paid (order completed)
    pending --verify: failed/abandoned---> failed
    failed  --initiate (new reference)---> pending
    paid    --anything-------------------> paid (no write)

CRITICAL: This file must contain ZERO imports from:
- sqlalchemy
- pydantic
- fastapi
"""
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Optional, Tuple

from .entities.order import Order
from .enums import OrderStatus, PaymentStatus, TransactionOutcome
from .exceptions import AlreadyPaidError, OrderCancelledError, ValidationError
from .gateway import GatewayVerification


logger = logging.getLogger(__name__)

INITIABLE_STATUSES: Tuple[PaymentStatus, ...] = (PaymentStatus.PENDING, PaymentStatus.FAILED)
SETTLEABLE_STATUSES: Tuple[PaymentStatus, ...] = (PaymentStatus.PENDING,)
# A failed retry keeps the earlier reference, which the buyer may still complete
PAYABLE_STATUSES: Tuple[PaymentStatus, ...] = (PaymentStatus.PENDING, PaymentStatus.FAILED)


@dataclass(frozen=True)
class Transition:
    """A guarded write: apply `changes` only while payment_status is in `expected`."""
    name: str
    expected: Tuple[PaymentStatus, ...]
    changes: Dict[str, Any]

    @property
    def target(self) -> PaymentStatus:
        return self.changes["payment_status"]


@dataclass(frozen=True)
class Verdict:
    """Gateway outcome after local checks against the order."""
    outcome: TransactionOutcome
    reason: Optional[str] = None


def ensure_initiable(order: Order) -> None:
    """
    Check initiation preconditions in order; first failure wins.

    Raises:
        AlreadyPaidError: Order is paid
        OrderCancelledError: Order is cancelled
        ValidationError: Order was refunded
    """
    details = {"order_id": order.id, "order_number": order.order_number}

    if order.payment_status == PaymentStatus.PAID:
        raise AlreadyPaidError(details={**details, "payment_status": PaymentStatus.PAID.value})

    if order.status == OrderStatus.CANCELLED:
        raise OrderCancelledError(details=details)

    if order.payment_status == PaymentStatus.REFUNDED:
        raise ValidationError("Order payment has been refunded", details=details)


def plan_initiation_success(
    order: Order,
    reference: str,
    payment_method: str,
    now: datetime,
) -> Transition:
    """Record a freshly created gateway transaction on the order."""
    ensure_initiable(order)
    return Transition(
        name="initiated",
        expected=INITIABLE_STATUSES,
        changes={
            "payment_reference": reference,
            "payment_method": payment_method,
            "payment_status": PaymentStatus.PENDING,
            "updated_at": now,
        },
    )


def plan_initiation_failure(now: datetime) -> Transition:
    """Make a failed initiation visible instead of leaving the order ambiguous."""
    return Transition(
        name="initiation_failed",
        expected=INITIABLE_STATUSES,
        changes={
            "payment_status": PaymentStatus.FAILED,
            "updated_at": now,
        },
    )


def judge(order: Order, verification: GatewayVerification) -> Verdict:
    """
    Normalize the gateway verdict against the order.

    A success for a different amount or currency than the order's total
    is not accepted as payment of this order.
    """
    if verification.outcome != TransactionOutcome.SUCCESS:
        return Verdict(outcome=verification.outcome)

    expected_minor = order.total.to_minor_units()
    if verification.amount_minor_units != expected_minor:
        reason = (
            f"amount mismatch: expected {expected_minor}, "
            f"gateway reported {verification.amount_minor_units}"
        )
        logger.error(f"Order {order.order_number}: {reason} (reference={verification.reference})")
        return Verdict(outcome=TransactionOutcome.FAILED, reason=reason)

    if verification.currency and verification.currency.upper() != order.currency.upper():
        reason = (
            f"currency mismatch: expected {order.currency}, "
            f"gateway reported {verification.currency}"
        )
        logger.error(f"Order {order.order_number}: {reason} (reference={verification.reference})")
        return Verdict(outcome=TransactionOutcome.FAILED, reason=reason)

    return Verdict(outcome=TransactionOutcome.SUCCESS)


def plan_verification(order: Order, verdict: Verdict, now: datetime) -> Optional[Transition]:
    """
    Decide the write for a verification verdict.

    Returns:
        Transition to commit, or None when nothing must be written
        (order already paid, or gateway still pending)
    """
    if order.payment_status == PaymentStatus.PAID:
        return None

    if verdict.outcome == TransactionOutcome.SUCCESS:
        return Transition(
            name="paid",
            expected=PAYABLE_STATUSES,
            changes={
                "payment_status": PaymentStatus.PAID,
                "status": OrderStatus.COMPLETED,
                "completed_at": now,
                "updated_at": now,
            },
        )

    if verdict.outcome == TransactionOutcome.FAILED:
        # Order status stays pending so the buyer can re-initiate
        return Transition(
            name="payment_failed",
            expected=SETTLEABLE_STATUSES,
            changes={
                "payment_status": PaymentStatus.FAILED,
                "updated_at": now,
            },
        )

    return None
