"""Application use cases."""
from .initiate_payment import InitiatePaymentResult, InitiatePaymentUseCase
from .verify_payment import VerifyPaymentResult, VerifyPaymentUseCase

__all__ = [
    "InitiatePaymentUseCase",
    "InitiatePaymentResult",
    "VerifyPaymentUseCase",
    "VerifyPaymentResult",
]
