"""Application DTOs for payment operations."""

from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field, model_validator


class InitiatePaymentRequest(BaseModel):
    """Request DTO for starting a payment."""

    order_id: str = Field(..., min_length=1, description="Order to pay")

    model_config = {"frozen": True}


class VerifyPaymentRequest(BaseModel):
    """Request DTO for reconciling a payment. At least one field is required."""

    reference: Optional[str] = Field(None, description="Gateway payment reference")
    order_id: Optional[str] = Field(None, description="Order ID")

    model_config = {"frozen": True}

    @model_validator(mode="after")
    def _require_reference_or_order(self) -> "VerifyPaymentRequest":
        if not self.reference and not self.order_id:
            raise ValueError("Payment reference or order ID is required")
        return self


class InitiatePaymentResponse(BaseModel):
    """Response DTO for a started payment."""

    success: bool = Field(default=True)
    order_id: str
    order_number: str
    payment_reference: str
    authorization_url: str = Field(..., description="Gateway page to redirect the buyer to")
    access_code: Optional[str] = None
    payment_status: str

    model_config = {"frozen": True}


class VerifyPaymentResponse(BaseModel):
    """Response DTO for a reconciled payment."""

    success: bool = Field(default=True)
    order_id: str
    order_number: str
    payment_reference: Optional[str] = None
    payment_status: str
    order_status: str
    transaction_status: str
    amount: Decimal = Field(..., ge=0, description="Amount in major units")
    currency: Optional[str] = None
    paid_at: Optional[datetime] = None
    channel: Optional[str] = None
    still_pending: bool = Field(default=False, description="Gateway has no final verdict yet")

    model_config = {"frozen": True}


class ErrorResponse(BaseModel):
    """Structured error body."""

    error: str
    details: Optional[Dict[str, Any]] = None
