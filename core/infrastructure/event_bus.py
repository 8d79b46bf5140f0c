"""
Event Bus Implementation (Infrastructure Layer).

Delivers payment events to in-process subscribers.
"""
import asyncio
import json
import logging
from typing import Callable, List, Optional

from core.domain.event_bus import EventBus
from core.domain.events.base import DomainEvent


logger = logging.getLogger(__name__)


class InMemoryEventBus(EventBus):
    """
    In-Memory Event Bus Implementation.

    Subscribers run in registration order. A failing subscriber is logged
    and skipped; it never fails the publisher, because by the time an
    event is published the order write has already been committed.

    Can be replaced with a message broker without touching the use cases.
    """

    def __init__(self):
        """Initialize event bus with no subscribers."""
        self._subscribers: List[Callable[[DomainEvent], None]] = []

    async def publish(self, event: DomainEvent) -> None:
        """
        Publish a single domain event.

        Args:
            event: Domain event to publish
        """
        logger.info(f"Publishing event: {event.event_type} (aggregate: {event.aggregate_id})")
        await self._notify_subscribers(event)

    async def publish_all(self, events: List[DomainEvent]) -> None:
        """
        Publish multiple domain events in order.

        Args:
            events: List of domain events to publish
        """
        if not events:
            return

        logger.info(f"Publishing {len(events)} events")
        for event in events:
            await self.publish(event)

    def subscribe(self, handler: Callable[[DomainEvent], None]) -> None:
        """
        Subscribe to all domain events.

        Args:
            handler: Sync or async callable that receives events
        """
        if handler not in self._subscribers:
            self._subscribers.append(handler)
        logger.info(f"Registered event subscriber: {getattr(handler, '__name__', handler)}")

    def unsubscribe(self, handler: Callable[[DomainEvent], None]) -> None:
        """
        Unsubscribe from domain events.

        Args:
            handler: Callback to remove
        """
        if handler in self._subscribers:
            self._subscribers.remove(handler)
        logger.info(f"Unregistered event subscriber: {getattr(handler, '__name__', handler)}")

    async def _notify_subscribers(self, event: DomainEvent) -> None:
        """Notify all subscribers about an event."""
        if not self._subscribers:
            return

        logger.debug(f"Notifying {len(self._subscribers)} subscribers about {event.event_type}")

        for subscriber in list(self._subscribers):
            try:
                if asyncio.iscoroutinefunction(subscriber):
                    await subscriber(event)
                else:
                    subscriber(event)
            except Exception as e:
                name = getattr(subscriber, "__name__", repr(subscriber))
                logger.error(f"Subscriber {name} failed: {e}", exc_info=True)


_audit_logger = logging.getLogger("payments.audit")


def log_payment_event(event: DomainEvent) -> None:
    """
    Write every published payment event to the audit log.

    Failures are logged at WARNING; a failure with a reason (amount or
    currency mismatch on a captured payment) at ERROR.
    """
    payload = json.dumps(event.to_dict(), default=str)
    if getattr(event, "reason", None):
        _audit_logger.error(payload)
    elif event.event_type in ("PaymentFailedEvent", "PaymentInitiationFailedEvent"):
        _audit_logger.warning(payload)
    else:
        _audit_logger.info(payload)


# Global event bus instance
_event_bus_instance: Optional[InMemoryEventBus] = None


def get_event_bus() -> InMemoryEventBus:
    """
    Get or create global event bus instance.

    Returns:
        Global event bus instance
    """
    global _event_bus_instance

    if _event_bus_instance is None:
        _event_bus_instance = InMemoryEventBus()

    return _event_bus_instance
