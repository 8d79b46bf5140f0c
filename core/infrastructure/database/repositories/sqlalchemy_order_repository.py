"""
SQLAlchemy Order Repository Implementation.

Implements OrderRepository interface using async SQLAlchemy.
"""
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional
import logging
from sqlalchemy import select, update, and_
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import async_sessionmaker

from core.domain.entities import Order, OrderItem
from core.domain.enums import PaymentStatus
from core.domain.exceptions import PersistenceError
from core.domain.repositories import OrderRepository, check_payment_changes
from core.infrastructure.database.models import OrderModel, OrderItemModel


logger = logging.getLogger(__name__)


def _column_value(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    return value


class SQLAlchemyOrderRepository(OrderRepository):
    """
    SQLAlchemy implementation of OrderRepository.

    Each call runs in its own short session and commits before returning,
    so no transaction is held open across a gateway call.
    """

    def __init__(self, session_factory: async_sessionmaker):
        """
        Initialize repository with a session factory.

        Args:
            session_factory: Factory producing AsyncSession instances
        """
        self.session_factory = session_factory

    async def add(self, order: Order, items: Iterable[OrderItem] = ()) -> None:
        """
        Insert a new order with its items.

        Args:
            order: Order entity to persist
            items: Line items
        """
        logger.info(f"Saving order: {order.order_number}")

        try:
            async with self.session_factory() as session:
                session.add(self._to_model(order))
                for item in items:
                    session.add(OrderItemModel(
                        id=item.id,
                        order_id=order.id,
                        content_id=item.content_id,
                        quantity=item.quantity,
                        unit_price=item.unit_price,
                        total_price=item.total_price,
                    ))
                await session.commit()
        except IntegrityError as e:
            logger.error(f"Order {order.order_number} conflicts with an existing row: {e}")
            raise PersistenceError(
                "Order already exists",
                details={"order_number": order.order_number},
            ) from e
        except SQLAlchemyError as e:
            logger.error(f"Failed to save order {order.order_number}: {e}", exc_info=True)
            raise PersistenceError() from e

        logger.info(f"✅ Created order: {order.order_number}")

    async def get(self, order_id: str, user_id: str) -> Optional[Order]:
        """
        Get an order owned by user_id.

        Args:
            order_id: Order ID to lookup
            user_id: Owner

        Returns:
            Order entity if found, None otherwise
        """
        return await self._fetch_one(
            and_(OrderModel.id == order_id, OrderModel.user_id == user_id),
            f"id={order_id}",
        )

    async def get_by_reference(self, reference: str, user_id: str) -> Optional[Order]:
        """
        Get an order by payment reference, owned by user_id.

        Args:
            reference: Payment reference
            user_id: Owner

        Returns:
            Order entity if found, None otherwise
        """
        return await self._fetch_one(
            and_(OrderModel.payment_reference == reference, OrderModel.user_id == user_id),
            f"reference={reference}",
        )

    async def get_items(self, order_id: str, user_id: str) -> List[OrderItem]:
        """List items of an owned order; empty when the order is not owned."""
        try:
            async with self.session_factory() as session:
                result = await session.execute(
                    select(OrderItemModel)
                    .join(OrderModel, OrderModel.id == OrderItemModel.order_id)
                    .where(and_(OrderModel.id == order_id, OrderModel.user_id == user_id))
                )
                rows = result.scalars().all()
        except SQLAlchemyError as e:
            logger.error(f"Failed to load items for order {order_id}: {e}", exc_info=True)
            raise PersistenceError() from e

        return [
            OrderItem(
                id=row.id,
                order_id=row.order_id,
                content_id=row.content_id,
                quantity=row.quantity,
                unit_price=row.unit_price,
                total_price=row.total_price,
            )
            for row in rows
        ]

    async def update_payment_fields(
        self,
        order_id: str,
        user_id: str,
        expected_payment_statuses: Iterable[PaymentStatus],
        changes: Dict[str, Any],
    ) -> bool:
        """
        Compare-and-swap on payment_status.

        Issues one UPDATE ... WHERE id AND user_id AND payment_status IN (...),
        so the guard and the write are a single statement.

        Returns:
            True if one row changed, False if the guard did not match
        """
        check_payment_changes(changes)
        expected = [_column_value(status) for status in expected_payment_statuses]
        values = {name: _column_value(value) for name, value in changes.items()}

        try:
            async with self.session_factory() as session:
                result = await session.execute(
                    update(OrderModel)
                    .where(
                        and_(
                            OrderModel.id == order_id,
                            OrderModel.user_id == user_id,
                            OrderModel.payment_status.in_(expected),
                        )
                    )
                    .values(**values)
                    .execution_options(synchronize_session=False)
                )
                await session.commit()
        except SQLAlchemyError as e:
            logger.error(f"Guarded update failed for order {order_id}: {e}", exc_info=True)
            raise PersistenceError(details={"order_id": order_id}) from e

        updated = result.rowcount == 1
        if updated:
            logger.info(f"✅ Order {order_id} updated: {sorted(values)}")
        else:
            logger.info(f"Guard not met for order {order_id} (expected payment_status in {expected})")
        return updated

    async def _fetch_one(self, condition, label: str) -> Optional[Order]:
        try:
            async with self.session_factory() as session:
                result = await session.execute(select(OrderModel).where(condition))
                order_model = result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error(f"Failed to load order ({label}): {e}", exc_info=True)
            raise PersistenceError() from e

        if not order_model:
            logger.info(f"Order not found: {label}")
            return None

        return self._to_domain_entity(order_model)

    @staticmethod
    def _to_model(order: Order) -> OrderModel:
        return OrderModel(
            id=order.id,
            order_number=order.order_number,
            user_id=order.user_id,
            email=order.email,
            sub_total=order.sub_total,
            tax=order.tax,
            shipping=order.shipping,
            discount=order.discount,
            total_price=order.total_price,
            currency=order.currency,
            status=order.status.value,
            payment_status=order.payment_status.value,
            payment_method=order.payment_method,
            payment_reference=order.payment_reference,
            created_at=order.created_at,
            updated_at=order.updated_at,
            completed_at=order.completed_at,
            cancelled_at=order.cancelled_at,
        )

    @staticmethod
    def _to_domain_entity(order_model: OrderModel) -> Order:
        """Convert database model to domain entity."""
        return Order(
            id=order_model.id,
            user_id=order_model.user_id,
            order_number=order_model.order_number,
            sub_total=order_model.sub_total,
            tax=order_model.tax,
            shipping=order_model.shipping,
            discount=order_model.discount,
            total_price=order_model.total_price,
            currency=order_model.currency,
            email=order_model.email,
            status=order_model.status,
            payment_status=order_model.payment_status,
            payment_method=order_model.payment_method,
            payment_reference=order_model.payment_reference,
            created_at=order_model.created_at,
            updated_at=order_model.updated_at,
            completed_at=order_model.completed_at,
            cancelled_at=order_model.cancelled_at,
        )
