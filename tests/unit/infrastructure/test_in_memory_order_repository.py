"""
Tests for InMemoryOrderRepository.
"""
import pytest

from core.domain.entities import OrderItem
from core.domain.enums import PaymentStatus
from core.domain.exceptions import PersistenceError
from core.infrastructure.adapters.persistence import InMemoryOrderRepository
from tests.conftest import make_order


@pytest.mark.asyncio
async def test_get_is_scoped_by_owner():
    repository = InMemoryOrderRepository()
    order = make_order(user_id="user-1")
    await repository.add(order)

    assert (await repository.get(order.id, "user-1")).order_number == order.order_number
    assert await repository.get(order.id, "user-2") is None


@pytest.mark.asyncio
async def test_returned_orders_are_copies():
    repository = InMemoryOrderRepository()
    order = make_order()
    await repository.add(order)

    loaded = await repository.get(order.id, order.user_id)
    loaded.payment_status = PaymentStatus.PAID

    assert (await repository.get(order.id, order.user_id)).payment_status == PaymentStatus.PENDING


@pytest.mark.asyncio
async def test_guarded_update():
    repository = InMemoryOrderRepository()
    order = make_order()
    await repository.add(order)

    assert await repository.update_payment_fields(
        order.id, order.user_id, [PaymentStatus.PENDING], {"payment_status": PaymentStatus.PAID}
    )
    assert not await repository.update_payment_fields(
        order.id, order.user_id, [PaymentStatus.PENDING], {"payment_status": PaymentStatus.FAILED}
    )
    assert (await repository.get(order.id, order.user_id)).payment_status == PaymentStatus.PAID


@pytest.mark.asyncio
async def test_update_for_wrong_owner_matches_nothing():
    repository = InMemoryOrderRepository()
    order = make_order()
    await repository.add(order)

    assert not await repository.update_payment_fields(
        order.id, "intruder", [PaymentStatus.PENDING], {"payment_status": PaymentStatus.PAID}
    )


@pytest.mark.asyncio
async def test_update_rejects_non_payment_fields():
    repository = InMemoryOrderRepository()
    order = make_order()
    await repository.add(order)

    with pytest.raises(ValueError, match="total_price"):
        await repository.update_payment_fields(
            order.id, order.user_id, [PaymentStatus.PENDING], {"total_price": 0}
        )


@pytest.mark.asyncio
async def test_payment_reference_is_unique():
    repository = InMemoryOrderRepository()
    first = make_order(order_number="ORD-20240115-AAAA", payment_reference="ref-1")
    second = make_order(order_number="ORD-20240115-BBBB")
    await repository.add(first)
    await repository.add(second)

    with pytest.raises(PersistenceError):
        await repository.update_payment_fields(
            second.id, second.user_id, [PaymentStatus.PENDING], {"payment_reference": "ref-1"}
        )


@pytest.mark.asyncio
async def test_items_follow_ownership():
    repository = InMemoryOrderRepository()
    order = make_order()
    item = OrderItem.create(order_id=order.id, content_id="book-1", quantity=2, unit_price="700")
    await repository.add(order, [item])

    assert [i.content_id for i in await repository.get_items(order.id, order.user_id)] == ["book-1"]
    assert await repository.get_items(order.id, "user-2") == []
