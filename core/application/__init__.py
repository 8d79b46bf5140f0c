"""Application layer - use cases, interfaces, and DTOs."""

from .dtos import (
    ErrorResponse,
    InitiatePaymentRequest,
    InitiatePaymentResponse,
    VerifyPaymentRequest,
    VerifyPaymentResponse,
)
from .use_cases import (
    InitiatePaymentResult,
    InitiatePaymentUseCase,
    VerifyPaymentResult,
    VerifyPaymentUseCase,
)
from .interfaces import IIdentityProvider

__all__ = [
    # DTOs
    "ErrorResponse",
    "InitiatePaymentRequest",
    "InitiatePaymentResponse",
    "VerifyPaymentRequest",
    "VerifyPaymentResponse",
    # Use Cases
    "InitiatePaymentUseCase",
    "InitiatePaymentResult",
    "VerifyPaymentUseCase",
    "VerifyPaymentResult",
    # Interfaces
    "IIdentityProvider",
]
