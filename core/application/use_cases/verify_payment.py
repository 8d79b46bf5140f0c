"""
Verify Payment Use Case.

Reconciles the gateway's verdict with the stored order.

Safe to call any number of times from any trigger (buyer redirect,
manual retry). An order that is already paid is answered from storage
alone; otherwise the gateway is asked and the verdict is committed with
a single guarded write on payment_status.
"""
from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal
from typing import Callable, Optional
import logging

from core.domain.entities.order import Order
from core.domain.enums import TransactionOutcome
from core.domain.event_bus import EventBus
from core.domain.events import DomainEvent, PaymentFailedEvent, PaymentSucceededEvent
from core.domain.exceptions import NotFoundError, PersistenceError, ValidationError
from core.domain.gateway import GatewayVerification, PaymentGateway
from core.domain.reconciliation import Transition, Verdict, judge, plan_verification
from core.domain.repositories.order_repository import OrderRepository
from core.domain.value_objects import AuthenticatedUser, ExecutionID, from_minor_units


logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class VerifyPaymentResult:
    """Normalized reconciliation result."""
    execution_id: ExecutionID
    order_id: str
    order_number: str
    payment_reference: Optional[str]
    payment_status: str
    order_status: str
    transaction_status: str
    amount: Decimal
    currency: Optional[str] = None
    paid_at: Optional[datetime] = None
    channel: Optional[str] = None
    still_pending: bool = False


class VerifyPaymentUseCase:
    """
    Reconcile an order's payment with the gateway.

    Outcomes:
        success           -> paid + completed (guarded on pending)
        failed/abandoned  -> failed, order status untouched
        anything else     -> no write, still_pending=True

    A gateway error never produces a local write.
    """

    def __init__(
        self,
        order_repository: OrderRepository,
        gateway: PaymentGateway,
        event_bus: Optional[EventBus] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.order_repository = order_repository
        self.gateway = gateway
        self.event_bus = event_bus
        self.clock = clock or _utcnow

    async def execute(
        self,
        user: AuthenticatedUser,
        order_id: Optional[str] = None,
        reference: Optional[str] = None,
    ) -> VerifyPaymentResult:
        """
        Execute the reconciliation workflow.

        Args:
            user: Authenticated caller
            order_id: Order to reconcile
            reference: Payment reference to reconcile

        Returns:
            VerifyPaymentResult

        Raises:
            ValidationError: Neither key given, reference mismatch, or no reference on record
            NotFoundError: Order missing or owned by someone else
            GatewayError: Gateway unreachable or malformed response (no write made)
            PersistenceError: Order store failure
        """
        execution_id = ExecutionID.generate()

        if not order_id and not reference:
            raise ValidationError("Payment reference or order ID is required")

        order = await self._resolve(user, order_id, reference)
        logger.info(
            f"[{execution_id}] Verifying payment for order {order.order_number} "
            f"(payment_status={order.payment_status.value})"
        )

        if order.is_paid:
            logger.info(f"[{execution_id}] Order {order.order_number} already paid, returning stored result")
            return self._cached_result(order, execution_id)

        if not order.payment_reference:
            raise ValidationError(
                "No payment reference found",
                details={"order_id": order.id},
            )

        # GatewayError propagates untouched: unreachable is not "not paid"
        verification = await self.gateway.verify(order.payment_reference)
        logger.info(
            f"[{execution_id}] Gateway reports {verification.transaction_status} "
            f"for {verification.reference}"
        )

        verdict = judge(order, verification)
        transition = plan_verification(order, verdict, self.clock())

        if transition is None:
            logger.info(f"[{execution_id}] Order {order.order_number} still pending on gateway")
            return self._result(order, verification, execution_id, still_pending=True)

        updated = await self.order_repository.update_payment_fields(
            order.id,
            user.user_id,
            transition.expected,
            transition.changes,
        )

        if not updated:
            return await self._after_lost_race(order, user, verdict, verification, execution_id)

        order.apply_changes(transition.changes)
        logger.info(
            f"[{execution_id}] ✅ Order {order.order_number} transitioned to "
            f"{transition.target.value}"
        )
        await self._publish(self._event_for(order, transition, verdict, verification, execution_id, user), execution_id)

        return self._result(order, verification, execution_id)

    async def _resolve(
        self,
        user: AuthenticatedUser,
        order_id: Optional[str],
        reference: Optional[str],
    ) -> Order:
        if order_id:
            order = await self.order_repository.get(order_id, user.user_id)
            if order is None:
                raise NotFoundError(details={"order_id": order_id})
            if reference and reference != order.payment_reference:
                raise ValidationError(
                    "Payment reference does not match order",
                    details={"order_id": order_id, "reference": reference},
                )
            return order

        order = await self.order_repository.get_by_reference(reference, user.user_id)
        if order is None:
            raise NotFoundError(details={"reference": reference})
        return order

    async def _after_lost_race(
        self,
        order: Order,
        user: AuthenticatedUser,
        verdict: Verdict,
        verification: GatewayVerification,
        execution_id: ExecutionID,
    ) -> VerifyPaymentResult:
        """Another writer moved payment_status first; report what is stored now."""
        current = await self.order_repository.get(order.id, user.user_id)
        if current is None:
            raise PersistenceError(
                "Order disappeared during verification",
                details={"order_id": order.id},
            )

        if current.is_paid:
            logger.info(f"[{execution_id}] Lost race on {order.order_number}; order already paid")
            return self._cached_result(current, execution_id)

        if verdict.outcome == TransactionOutcome.SUCCESS:
            # Captured funds that the stored state no longer accepts need a person
            logger.error(
                f"[{execution_id}] Gateway confirmed {verification.reference} but order "
                f"{order.order_number} is {current.payment_status.value}; not marked paid"
            )
            return self._result(current, verification, execution_id)

        logger.info(
            f"[{execution_id}] Guard failed for {order.order_number}; "
            f"stored payment_status={current.payment_status.value}"
        )
        return self._result(current, verification, execution_id)

    def _event_for(
        self,
        order: Order,
        transition: Transition,
        verdict: Verdict,
        verification: GatewayVerification,
        execution_id: ExecutionID,
        user: AuthenticatedUser,
    ) -> DomainEvent:
        common = dict(
            execution_id=str(execution_id),
            user_id=user.user_id,
            order_id=order.id,
            order_number=order.order_number,
            payment_reference=order.payment_reference,
        )
        if verdict.outcome == TransactionOutcome.SUCCESS:
            return PaymentSucceededEvent(
                amount=order.total_price,
                channel=verification.channel,
                **common,
            )
        return PaymentFailedEvent(
            transaction_status=verification.transaction_status,
            reason=verdict.reason,
            **common,
        )

    @staticmethod
    def _cached_result(order: Order, execution_id: ExecutionID) -> VerifyPaymentResult:
        # Built from stored state only so repeated calls answer identically
        return VerifyPaymentResult(
            execution_id=execution_id,
            order_id=order.id,
            order_number=order.order_number,
            payment_reference=order.payment_reference,
            payment_status=order.payment_status.value,
            order_status=order.status.value,
            transaction_status=TransactionOutcome.SUCCESS.value,
            amount=order.total_price,
            currency=order.currency,
            paid_at=order.completed_at,
            channel=None,
        )

    @staticmethod
    def _result(
        order: Order,
        verification: GatewayVerification,
        execution_id: ExecutionID,
        still_pending: bool = False,
    ) -> VerifyPaymentResult:
        return VerifyPaymentResult(
            execution_id=execution_id,
            order_id=order.id,
            order_number=order.order_number,
            payment_reference=order.payment_reference,
            payment_status=order.payment_status.value,
            order_status=order.status.value,
            transaction_status=verification.transaction_status,
            amount=from_minor_units(verification.amount_minor_units),
            currency=verification.currency or order.currency,
            paid_at=verification.paid_at,
            channel=verification.channel,
            still_pending=still_pending,
        )

    async def _publish(self, event: DomainEvent, execution_id: ExecutionID) -> None:
        if self.event_bus is None:
            return
        try:
            await self.event_bus.publish(event)
        except Exception as e:
            logger.warning(f"[{execution_id}] Failed to publish {event.event_type}: {e}")
