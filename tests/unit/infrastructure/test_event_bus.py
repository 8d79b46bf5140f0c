"""Tests for InMemoryEventBus."""

import logging

import pytest

from core.domain.events import PaymentFailedEvent, PaymentInitiatedEvent, PaymentSucceededEvent
from core.infrastructure.event_bus import InMemoryEventBus, log_payment_event


def _event(**kwargs):
    return PaymentSucceededEvent(order_id="o-1", order_number="ORD-20240115-AB12", **kwargs)


@pytest.mark.asyncio
async def test_event_bus_subscribe_and_publish():
    bus = InMemoryEventBus()
    received = []

    async def handler(event):
        received.append(event)

    bus.subscribe(handler)
    await bus.publish(_event())

    assert len(received) == 1
    assert received[0].event_type == "PaymentSucceededEvent"
    assert received[0].aggregate_id == "o-1"


@pytest.mark.asyncio
async def test_sync_and_async_handlers():
    bus = InMemoryEventBus()
    sync_events, async_events = [], []

    async def async_handler(event):
        async_events.append(event)

    bus.subscribe(sync_events.append)
    bus.subscribe(async_handler)
    await bus.publish_all([_event(), PaymentInitiatedEvent(order_id="o-1")])

    assert [e.event_type for e in sync_events] == ["PaymentSucceededEvent", "PaymentInitiatedEvent"]
    assert len(async_events) == 2


@pytest.mark.asyncio
async def test_failing_subscriber_does_not_stop_others():
    bus = InMemoryEventBus()
    received = []

    def broken(event):
        raise RuntimeError("boom")

    bus.subscribe(broken)
    bus.subscribe(received.append)

    await bus.publish(_event())

    assert len(received) == 1


@pytest.mark.asyncio
async def test_unsubscribe():
    bus = InMemoryEventBus()
    received = []

    bus.subscribe(received.append)
    bus.unsubscribe(received.append)
    await bus.publish(_event())

    assert received == []


def test_event_to_dict_is_json_safe():
    from decimal import Decimal

    data = _event(amount=Decimal("1500.00"), channel="card").to_dict()

    assert data["aggregate_type"] == "Order"
    assert data["data"]["amount"] == "1500.00"
    assert data["data"]["order_number"] == "ORD-20240115-AB12"


@pytest.mark.asyncio
async def test_audit_subscriber_logs_published_events(caplog):
    bus = InMemoryEventBus()
    bus.subscribe(log_payment_event)

    with caplog.at_level(logging.INFO, logger="payments.audit"):
        await bus.publish(_event(payment_reference="ORD-20240115-AB12-1"))
        await bus.publish(PaymentFailedEvent(order_id="o-1", transaction_status="abandoned"))
        await bus.publish(PaymentFailedEvent(order_id="o-1", transaction_status="success", reason="amount mismatch"))

    audit = [r for r in caplog.records if r.name == "payments.audit"]
    assert [r.levelno for r in audit] == [logging.INFO, logging.WARNING, logging.ERROR]
    assert "ORD-20240115-AB12-1" in audit[0].getMessage()
    assert "amount mismatch" in audit[2].getMessage()
