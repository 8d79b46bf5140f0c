"""
SQLAlchemy ORM Models.

Maps the order aggregate to database tables.
"""
from datetime import datetime, timezone
from sqlalchemy import (
    Column, String, DateTime, Integer, Numeric, Index, ForeignKey
)
from sqlalchemy.orm import declarative_base, relationship
import uuid


Base = declarative_base()


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _new_id() -> str:
    return str(uuid.uuid4())


# =============================================================================
# ORDER MODEL
# =============================================================================

class OrderModel(Base):
    """
    Order database model.

    Money columns are written once at checkout. The payment columns are
    only changed through guarded updates on payment_status.
    """

    __tablename__ = "orders"

    # Primary key
    id = Column(String(36), primary_key=True, default=_new_id)

    # Order identifiers
    order_number = Column(String(32), unique=True, nullable=False, index=True)
    user_id = Column(String(64), nullable=False, index=True)
    email = Column(String(255), nullable=True)

    # Money (major units)
    sub_total = Column(Numeric(12, 2), nullable=False)
    tax = Column(Numeric(12, 2), nullable=False, default=0)
    shipping = Column(Numeric(12, 2), nullable=False, default=0)
    discount = Column(Numeric(12, 2), nullable=False, default=0)
    total_price = Column(Numeric(12, 2), nullable=False)
    currency = Column(String(3), nullable=False, default="KES")

    # Lifecycle
    status = Column(String(20), nullable=False, default="pending", index=True)
    payment_status = Column(String(20), nullable=False, default="pending", index=True)
    payment_method = Column(String(50), nullable=True)
    # One order per gateway transaction
    payment_reference = Column(String(100), unique=True, nullable=True)

    # Timestamps
    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)
    completed_at = Column(DateTime(timezone=True), nullable=True)
    cancelled_at = Column(DateTime(timezone=True), nullable=True)

    # Relationships
    items = relationship("OrderItemModel", back_populates="order", cascade="all, delete-orphan")

    __table_args__ = (
        Index('ix_orders_user_payment_status', 'user_id', 'payment_status'),
    )

    def __repr__(self):
        return (
            f"<OrderModel(id={self.id}, order_number={self.order_number}, "
            f"payment_status={self.payment_status})>"
        )


# =============================================================================
# ORDER ITEM MODEL
# =============================================================================

class OrderItemModel(Base):
    """
    Order item database model.

    Write-once; never touched by the payment lifecycle.
    """

    __tablename__ = "order_items"

    id = Column(String(36), primary_key=True, default=_new_id)
    order_id = Column(String(36), ForeignKey("orders.id"), nullable=False, index=True)

    content_id = Column(String(64), nullable=False)
    quantity = Column(Integer, nullable=False, default=1)
    unit_price = Column(Numeric(12, 2), nullable=False)
    total_price = Column(Numeric(12, 2), nullable=False)

    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)

    order = relationship("OrderModel", back_populates="items")

    def __repr__(self):
        return f"<OrderItemModel(id={self.id}, content_id={self.content_id}, quantity={self.quantity})>"
