"""
In-Memory Order Repository Implementation.

Used by tests and local demos.
"""
from dataclasses import replace
from typing import Any, Dict, Iterable, List, Optional
import logging

from core.domain.entities.order import Order, OrderItem
from core.domain.enums import PaymentStatus
from core.domain.exceptions import PersistenceError
from core.domain.repositories.order_repository import OrderRepository, check_payment_changes


logger = logging.getLogger(__name__)


class InMemoryOrderRepository(OrderRepository):
    """
    In-memory implementation of OrderRepository.

    Callers always receive copies, so mutating a returned Order never
    changes storage. update_payment_fields contains no await between the
    status check and the write, which makes it atomic on the event loop.
    """

    def __init__(self):
        """Initialize empty storage."""
        self._storage: Dict[str, Order] = {}
        self._items: Dict[str, List[OrderItem]] = {}
        self.update_calls = 0
        logger.info("InMemoryOrderRepository initialized (in-memory storage)")

    async def add(self, order: Order, items: Iterable[OrderItem] = ()) -> None:
        if order.id in self._storage:
            raise PersistenceError("Order already exists", details={"order_id": order.id})
        if order.payment_reference:
            self._check_reference_free(order.payment_reference, order.id)
        self._storage[order.id] = replace(order)
        self._items[order.id] = [replace(item) for item in items]
        logger.info(f"✅ Order saved to in-memory repository: {order.order_number}")

    async def get(self, order_id: str, user_id: str) -> Optional[Order]:
        order = self._storage.get(order_id)
        if order is None or order.user_id != user_id:
            return None
        return replace(order)

    async def get_by_reference(self, reference: str, user_id: str) -> Optional[Order]:
        for order in self._storage.values():
            if order.payment_reference == reference and order.user_id == user_id:
                return replace(order)
        return None

    async def get_items(self, order_id: str, user_id: str) -> List[OrderItem]:
        if await self.get(order_id, user_id) is None:
            return []
        return [replace(item) for item in self._items.get(order_id, [])]

    async def update_payment_fields(
        self,
        order_id: str,
        user_id: str,
        expected_payment_statuses: Iterable[PaymentStatus],
        changes: Dict[str, Any],
    ) -> bool:
        check_payment_changes(changes)
        self.update_calls += 1

        order = self._storage.get(order_id)
        if order is None or order.user_id != user_id:
            return False
        if order.payment_status not in tuple(expected_payment_statuses):
            logger.info(f"Guard not met for order {order_id} (payment_status={order.payment_status.value})")
            return False

        reference = changes.get("payment_reference")
        if reference:
            self._check_reference_free(reference, order_id)

        order.apply_changes(changes)
        logger.info(f"✅ Order {order_id} updated: {sorted(changes)}")
        return True

    def _check_reference_free(self, reference: str, order_id: str) -> None:
        for other in self._storage.values():
            if other.id != order_id and other.payment_reference == reference:
                raise PersistenceError(
                    "Payment reference already in use",
                    details={"reference": reference},
                )
