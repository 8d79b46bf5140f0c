"""
Order aggregate root.

This service only reads the order's money fields; the checkout flow
fixes them at creation time. Payment fields change exclusively through
the reconciliation transitions in core.domain.reconciliation.

CRITICAL: This file must contain ZERO imports from:
- sqlalchemy
- pydantic
- fastapi
"""
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Dict, Optional

from ..enums import OrderStatus, PaymentStatus
from ..exceptions import ValidationError
from ..value_objects import Money, OrderNumber


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _as_decimal(value: Any) -> Decimal:
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


@dataclass
class OrderItem:
    """Write-once line item within an order."""
    id: str
    order_id: str
    content_id: str
    quantity: int
    unit_price: Decimal
    total_price: Decimal

    @classmethod
    def create(
        cls,
        order_id: str,
        content_id: str,
        quantity: int,
        unit_price: Any,
        item_id: Optional[str] = None,
    ) -> "OrderItem":
        """
        Build a validated line item.

        Raises:
            ValidationError: If quantity is not positive or price is negative
        """
        if quantity <= 0:
            raise ValidationError(f"Quantity must be positive, got {quantity}")

        unit_price = _as_decimal(unit_price)
        if unit_price < 0:
            raise ValidationError(f"Unit price cannot be negative, got {unit_price}")

        return cls(
            id=item_id or str(uuid.uuid4()),
            order_id=order_id,
            content_id=content_id,
            quantity=quantity,
            unit_price=unit_price,
            total_price=unit_price * quantity,
        )


@dataclass
class Order:
    """
    Order aggregate root.

    Money invariant (checked at creation, never recomputed):
        total_price == sub_total + tax + shipping - discount
    """
    id: str
    user_id: str
    order_number: str
    sub_total: Decimal
    tax: Decimal
    shipping: Decimal
    discount: Decimal
    total_price: Decimal
    currency: str = "KES"
    email: Optional[str] = None
    status: OrderStatus = OrderStatus.PENDING
    payment_status: PaymentStatus = PaymentStatus.PENDING
    payment_method: Optional[str] = None
    payment_reference: Optional[str] = None
    created_at: datetime = field(default_factory=_utcnow)
    updated_at: datetime = field(default_factory=_utcnow)
    completed_at: Optional[datetime] = None
    cancelled_at: Optional[datetime] = None

    def __post_init__(self):
        # Rows loaded from storage carry plain strings
        self.status = OrderStatus(self.status)
        self.payment_status = PaymentStatus(self.payment_status)

    @property
    def total(self) -> Money:
        """Order total as Money."""
        return Money(amount=self.total_price, currency=self.currency)

    @property
    def is_paid(self) -> bool:
        return self.payment_status == PaymentStatus.PAID

    @property
    def is_cancelled(self) -> bool:
        return self.status == OrderStatus.CANCELLED

    def apply_changes(self, changes: Dict[str, Any]) -> None:
        """Apply a committed field change set to this in-memory copy."""
        for name, value in changes.items():
            setattr(self, name, value)
        self.__post_init__()

    @classmethod
    def create(
        cls,
        user_id: str,
        order_number: str,
        sub_total: Any,
        tax: Any = Decimal("0.00"),
        shipping: Any = Decimal("0.00"),
        discount: Any = Decimal("0.00"),
        total_price: Any = None,
        currency: str = "KES",
        email: Optional[str] = None,
        order_id: Optional[str] = None,
    ) -> "Order":
        """
        Factory used by the checkout flow to create a payable order.

        Args:
            user_id: Owning user
            order_number: Business key (ORD-YYYYMMDD-XXXX)
            sub_total: Sum of line items
            tax: Tax amount
            shipping: Shipping cost
            discount: Discount amount
            total_price: Expected total; computed when omitted
            currency: ISO currency code
            email: Buyer contact email
            order_id: Optional explicit identifier

        Returns:
            New Order in status=pending, payment_status=pending

        Raises:
            ValidationError: If any amount is negative or the total does not balance
        """
        if not user_id:
            raise ValidationError("Order must belong to a user")

        try:
            OrderNumber(order_number)
        except ValueError as e:
            raise ValidationError(str(e))

        amounts = {
            "sub_total": _as_decimal(sub_total),
            "tax": _as_decimal(tax),
            "shipping": _as_decimal(shipping),
            "discount": _as_decimal(discount),
        }
        expected_total = (
            amounts["sub_total"] + amounts["tax"] + amounts["shipping"] - amounts["discount"]
        )
        total = expected_total if total_price is None else _as_decimal(total_price)
        amounts["total_price"] = total

        negative = [name for name, value in amounts.items() if value < 0]
        if negative:
            raise ValidationError(
                f"Order amounts cannot be negative: {', '.join(negative)}",
                details={name: str(amounts[name]) for name in negative},
            )

        if total != expected_total:
            raise ValidationError(
                "Order total does not balance: "
                f"{amounts['sub_total']} + {amounts['tax']} + {amounts['shipping']} "
                f"- {amounts['discount']} != {total}"
            )

        # Validates the currency code
        Money(amount=total, currency=currency)

        now = _utcnow()
        return cls(
            id=order_id or str(uuid.uuid4()),
            user_id=user_id,
            order_number=order_number,
            currency=currency,
            email=email,
            created_at=now,
            updated_at=now,
            **amounts,
        )
