"""
Payment Gateway Interface (Domain Layer).

Pure interface definition - no implementation details.
Amounts cross this boundary in major units; adapters convert to and
from the gateway's minor units.
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, Optional

from .enums import TransactionOutcome


@dataclass(frozen=True)
class GatewayInitiation:
    """Result of creating a gateway transaction."""
    authorization_url: str
    access_code: Optional[str]
    reference: str


@dataclass(frozen=True)
class GatewayVerification:
    """Gateway ground truth for one transaction."""
    reference: str
    outcome: TransactionOutcome
    transaction_status: str
    amount_minor_units: int
    currency: Optional[str] = None
    paid_at: Optional[datetime] = None
    channel: Optional[str] = None
    fees: Optional[Decimal] = None
    raw: Dict[str, Any] = field(default_factory=dict, compare=False, repr=False)


class PaymentGateway(ABC):
    """
    Payment gateway adapter interface.

    Implementations bound every call with a timeout and never retry;
    failures surface as GatewayError.
    """

    name: str = "gateway"

    @abstractmethod
    async def initiate(
        self,
        email: str,
        amount: Decimal,
        reference: str,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> GatewayInitiation:
        """
        Create a transaction and obtain the redirect target.

        Args:
            email: Payer email
            amount: Amount in major units
            reference: Locally generated payment reference
            metadata: Extra context stored with the transaction

        Returns:
            GatewayInitiation

        Raises:
            GatewayError: If the call fails or the response is malformed
        """
        pass

    @abstractmethod
    async def verify(self, reference: str) -> GatewayVerification:
        """
        Fetch the authoritative status of a transaction.

        Args:
            reference: Payment reference

        Returns:
            GatewayVerification

        Raises:
            GatewayError: If the call fails or the response is malformed
        """
        pass
