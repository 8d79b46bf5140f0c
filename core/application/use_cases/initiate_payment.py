"""
Initiate Payment Use Case.

Creates a gateway transaction for an order and records its reference.

Flow:
1. Load the caller's order (ownership scoped)
2. Check preconditions (not paid, not cancelled)
3. Ask the gateway for an authorization URL
4. Record reference + pending status with a guarded write
5. On gateway failure, record payment_status=failed and re-raise
"""
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, Optional
import logging

from core.domain.entities.order import Order
from core.domain.event_bus import EventBus
from core.domain.events import (
    DomainEvent,
    PaymentInitiatedEvent,
    PaymentInitiationFailedEvent,
)
from core.domain.exceptions import (
    AlreadyPaidError,
    GatewayError,
    NotFoundError,
    PaymentError,
    PersistenceError,
    ValidationError,
)
from core.domain.gateway import PaymentGateway
from core.domain.reconciliation import plan_initiation_failure, plan_initiation_success
from core.domain.repositories.order_repository import OrderRepository
from core.domain.value_objects import AuthenticatedUser, ExecutionID, PaymentReference


logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class InitiatePaymentResult:
    """Output from the initiate payment use case."""
    execution_id: ExecutionID
    order_id: str
    order_number: str
    payment_reference: str
    authorization_url: str
    access_code: Optional[str]
    payment_status: str


class InitiatePaymentUseCase:
    """
    Start a payment for an order.

    Preconditions are checked in order and the first failure wins:
    order exists for the caller, order is not paid, order is not cancelled.
    No gateway call is made when a precondition fails.
    """

    def __init__(
        self,
        order_repository: OrderRepository,
        gateway: PaymentGateway,
        event_bus: Optional[EventBus] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        """
        Initialize use case with dependencies.

        Args:
            order_repository: Repository for order persistence
            gateway: Payment gateway adapter
            event_bus: Optional bus for payment events
            clock: Optional time source (UTC), injectable for tests
        """
        self.order_repository = order_repository
        self.gateway = gateway
        self.event_bus = event_bus
        self.clock = clock or _utcnow

    async def execute(self, order_id: str, user: AuthenticatedUser) -> InitiatePaymentResult:
        """
        Execute the initiation workflow.

        Args:
            order_id: Order to pay
            user: Authenticated caller

        Returns:
            InitiatePaymentResult with the redirect target

        Raises:
            ValidationError: Missing order id, refunded order or no payer email
            NotFoundError: Order missing or owned by someone else
            AlreadyPaidError: Order already paid
            OrderCancelledError: Order cancelled
            GatewayError: Gateway refused or failed (order is marked failed)
            PersistenceError: Order store failure
        """
        execution_id = ExecutionID.generate()

        if not order_id:
            raise ValidationError("Order ID is required")

        logger.info(f"[{execution_id}] Initiating payment for order {order_id}")

        order = await self.order_repository.get(order_id, user.user_id)
        if order is None:
            logger.warning(f"[{execution_id}] Order {order_id} not found for user {user.user_id}")
            raise NotFoundError(details={"order_id": order_id})

        email = order.email or user.email
        now = self.clock()
        reference = str(PaymentReference.generate(
            order.order_number,
            now_millis=int(now.timestamp() * 1000),
        ))
        # Raises AlreadyPaidError / OrderCancelledError before any gateway call
        transition = plan_initiation_success(order, reference, self.gateway.name, now)

        if not email:
            raise ValidationError(
                "Payer email is required",
                details={"order_id": order.id},
            )

        try:
            initiation = await self.gateway.initiate(
                email=email,
                amount=order.total_price,
                reference=reference,
                metadata={
                    "order_id": order.id,
                    "order_number": order.order_number,
                },
            )
        except GatewayError as e:
            logger.error(f"[{execution_id}] ❌ Gateway initiation failed for {order.order_number}: {e.message}")
            await self._record_failure(order, e, execution_id, user)
            raise

        if initiation.reference and initiation.reference != reference:
            logger.warning(
                f"[{execution_id}] Gateway echoed reference {initiation.reference}, "
                f"expected {reference}"
            )

        updated = await self.order_repository.update_payment_fields(
            order.id,
            user.user_id,
            transition.expected,
            transition.changes,
        )
        if not updated:
            # Another writer moved the order out of an initiable state
            current = await self.order_repository.get(order.id, user.user_id)
            if current is not None and current.is_paid:
                logger.warning(f"[{execution_id}] Order {order.order_number} was paid concurrently")
                raise AlreadyPaidError(details={"order_id": order.id})
            raise PersistenceError(
                "Order changed while initiating payment",
                details={"order_id": order.id},
            )

        order.apply_changes(transition.changes)
        logger.info(
            f"[{execution_id}] ✅ Payment initiated for {order.order_number} "
            f"(reference={reference}, amount={order.total_price} {order.currency})"
        )

        await self._publish(
            PaymentInitiatedEvent(
                execution_id=str(execution_id),
                user_id=user.user_id,
                order_id=order.id,
                order_number=order.order_number,
                payment_reference=reference,
                amount=order.total_price,
                currency=order.currency,
                gateway=self.gateway.name,
            ),
            execution_id,
        )

        return InitiatePaymentResult(
            execution_id=execution_id,
            order_id=order.id,
            order_number=order.order_number,
            payment_reference=reference,
            authorization_url=initiation.authorization_url,
            access_code=initiation.access_code,
            payment_status=order.payment_status.value,
        )

    async def _record_failure(
        self,
        order: Order,
        error: GatewayError,
        execution_id: ExecutionID,
        user: AuthenticatedUser,
    ) -> None:
        """Mark the order failed so it is not left pending without a live transaction."""
        transition = plan_initiation_failure(self.clock())
        try:
            updated = await self.order_repository.update_payment_fields(
                order.id,
                user.user_id,
                transition.expected,
                transition.changes,
            )
        except PaymentError as store_error:
            # The gateway error is what the caller needs to see
            logger.error(
                f"[{execution_id}] Failed to record initiation failure for "
                f"{order.order_number}: {store_error.message}"
            )
            return

        if not updated:
            logger.warning(
                f"[{execution_id}] Order {order.order_number} left initiable state; "
                f"failure not recorded"
            )
            return

        await self._publish(
            PaymentInitiationFailedEvent(
                execution_id=str(execution_id),
                user_id=user.user_id,
                order_id=order.id,
                order_number=order.order_number,
                payment_reference=order.payment_reference,
                error_message=error.message,
            ),
            execution_id,
        )

    async def _publish(self, event: DomainEvent, execution_id: ExecutionID) -> None:
        if self.event_bus is None:
            return
        try:
            await self.event_bus.publish(event)
        except Exception as e:
            # State is already committed; consumers are side channels
            logger.warning(f"[{execution_id}] Failed to publish {event.event_type}: {e}")
