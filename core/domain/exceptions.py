"""
Payment error taxonomy.

Every error raised by the payment use cases derives from PaymentError.
The HTTP layer maps `http_status` straight onto the response, so the
class chosen here decides what the caller sees.

CRITICAL: This file must contain ZERO imports from:
- sqlalchemy
- pydantic
- fastapi
"""
from typing import Any, Dict, Optional


class PaymentError(Exception):
    """Base class for payment lifecycle errors."""

    http_status: int = 500
    default_message: str = "Payment processing failed"

    def __init__(
        self,
        message: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        """
        Initialize error.

        Args:
            message: Human-readable error message
            details: Optional structured context returned to the caller
        """
        self.message = message or self.default_message
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to the structured `{error, details?}` response shape."""
        body: Dict[str, Any] = {"error": self.message}
        if self.details:
            body["details"] = self.details
        return body


class AuthError(PaymentError):
    """Caller identity is missing or invalid."""

    http_status = 401
    default_message = "Unauthorized"


class IdentityUnavailableError(PaymentError):
    """The identity provider could not be reached or is not configured."""

    http_status = 503
    default_message = "Authentication service unavailable"


class ValidationError(PaymentError):
    """Request is malformed or the order is not in a payable shape."""

    http_status = 400
    default_message = "Invalid request"


class AlreadyPaidError(PaymentError):
    """Order has already been paid."""

    http_status = 400
    default_message = "Order is already paid"


class OrderCancelledError(PaymentError):
    """Order was cancelled and cannot be paid."""

    http_status = 400
    default_message = "Order is cancelled"


class NotFoundError(PaymentError):
    """Order does not exist or is not owned by the caller."""

    http_status = 404
    default_message = "Order not found"


class GatewayError(PaymentError):
    """Gateway call failed, timed out, or returned an unexpected shape."""

    http_status = 502
    default_message = "Payment gateway error"


class PersistenceError(PaymentError):
    """Order store read or write failed."""

    http_status = 500
    default_message = "Order store error"
