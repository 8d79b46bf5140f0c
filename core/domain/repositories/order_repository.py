"""Repository interfaces for Order aggregate."""

from abc import ABC, abstractmethod
from typing import Any, Dict, Iterable, List, Optional

from ..entities.order import Order, OrderItem
from ..enums import PaymentStatus


# Fields the payment lifecycle is allowed to write.
PAYMENT_MUTABLE_FIELDS = frozenset({
    "payment_reference",
    "payment_method",
    "payment_status",
    "status",
    "completed_at",
    "updated_at",
})


def check_payment_changes(changes: Dict[str, Any]) -> None:
    """Reject change sets that touch fields outside the payment lifecycle."""
    if not changes:
        raise ValueError("Change set cannot be empty")
    forbidden = set(changes) - PAYMENT_MUTABLE_FIELDS
    if forbidden:
        raise ValueError(f"Fields not writable by payment lifecycle: {sorted(forbidden)}")


class OrderRepository(ABC):
    """Abstract repository for Order aggregate persistence.

    Every read and write is scoped by the owning user id.
    """

    @abstractmethod
    async def add(self, order: Order, items: Iterable[OrderItem] = ()) -> None:
        """Persist a new order with its line items.

        Args:
            order: Order aggregate to persist
            items: Write-once line items
        """
        pass

    @abstractmethod
    async def get(self, order_id: str, user_id: str) -> Optional[Order]:
        """Retrieve an order owned by `user_id`.

        Args:
            order_id: Order identifier
            user_id: Owning user identifier

        Returns:
            Order if found and owned, None otherwise
        """
        pass

    @abstractmethod
    async def get_by_reference(self, reference: str, user_id: str) -> Optional[Order]:
        """Retrieve an order by its current payment reference.

        Args:
            reference: Gateway payment reference
            user_id: Owning user identifier

        Returns:
            Order if found and owned, None otherwise
        """
        pass

    @abstractmethod
    async def get_items(self, order_id: str, user_id: str) -> List[OrderItem]:
        """List line items of an owned order."""
        pass

    @abstractmethod
    async def update_payment_fields(
        self,
        order_id: str,
        user_id: str,
        expected_payment_statuses: Iterable[PaymentStatus],
        changes: Dict[str, Any],
    ) -> bool:
        """Atomically apply `changes` if payment_status is still one of the expected values.

        This is a compare-and-swap: the status check and the write happen
        as one storage operation.

        Args:
            order_id: Order identifier
            user_id: Owning user identifier
            expected_payment_statuses: Statuses the row must currently hold
            changes: Field values to write (payment lifecycle fields only)

        Returns:
            True if exactly one row was updated, False if the guard failed
        """
        pass
