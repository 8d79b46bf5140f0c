"""Shared fixtures for payment tests."""
from datetime import datetime, timezone
from decimal import Decimal
from typing import List

import pytest

from core.domain.entities import Order
from core.domain.enums import OrderStatus, PaymentStatus
from core.domain.events import DomainEvent
from core.domain.value_objects import AuthenticatedUser
from core.infrastructure.adapters.persistence import InMemoryOrderRepository
from core.infrastructure.event_bus import InMemoryEventBus
from tests.mocks.fake_payment_gateway import FakePaymentGateway


FIXED_NOW = datetime(2024, 1, 15, 10, 30, 0, tzinfo=timezone.utc)


def make_order(
    user_id: str = "user-1",
    order_number: str = "ORD-20240115-AB12",
    total: str = "1500.00",
    email: str = "buyer@example.com",
    payment_status: PaymentStatus = PaymentStatus.PENDING,
    status: OrderStatus = OrderStatus.PENDING,
    payment_reference: str = None,
    order_id: str = None,
) -> Order:
    """Build a balanced order: sub_total + tax + shipping - discount == total."""
    total_price = Decimal(total)
    order = Order.create(
        user_id=user_id,
        order_number=order_number,
        sub_total=total_price - Decimal("100.00"),
        tax=Decimal("80.00"),
        shipping=Decimal("50.00"),
        discount=Decimal("30.00"),
        email=email,
        order_id=order_id,
    )
    order.payment_status = payment_status
    order.status = status
    order.payment_reference = payment_reference
    return order


@pytest.fixture
def user() -> AuthenticatedUser:
    return AuthenticatedUser(user_id="user-1", email="buyer@example.com")


@pytest.fixture
def other_user() -> AuthenticatedUser:
    return AuthenticatedUser(user_id="user-2", email="someone@example.com")


@pytest.fixture
def repository() -> InMemoryOrderRepository:
    return InMemoryOrderRepository()


@pytest.fixture
def gateway() -> FakePaymentGateway:
    return FakePaymentGateway()


@pytest.fixture
def clock():
    return lambda: FIXED_NOW


@pytest.fixture
def published_events():
    return []


@pytest.fixture
def event_bus(published_events: List[DomainEvent]) -> InMemoryEventBus:
    bus = InMemoryEventBus()
    bus.subscribe(published_events.append)
    return bus
