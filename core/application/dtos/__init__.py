"""Application DTOs."""

from .payment_dto import (
    ErrorResponse,
    InitiatePaymentRequest,
    InitiatePaymentResponse,
    VerifyPaymentRequest,
    VerifyPaymentResponse,
)

__all__ = [
    "ErrorResponse",
    "InitiatePaymentRequest",
    "InitiatePaymentResponse",
    "VerifyPaymentRequest",
    "VerifyPaymentResponse",
]
