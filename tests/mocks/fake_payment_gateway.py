"""
Fake Payment Gateway.

Scriptable stand-in for Paystack in use-case and API tests.
"""
from decimal import Decimal
from typing import Any, Dict, List, Optional
import asyncio
import logging

from core.domain.enums import TransactionOutcome
from core.domain.exceptions import GatewayError
from core.domain.gateway import GatewayInitiation, GatewayVerification, PaymentGateway
from core.domain.value_objects import to_minor_units


logger = logging.getLogger(__name__)

_OUTCOMES = {
    "success": TransactionOutcome.SUCCESS,
    "failed": TransactionOutcome.FAILED,
    "abandoned": TransactionOutcome.FAILED,
}


class FakePaymentGateway(PaymentGateway):
    """
    In-process gateway.

    Records every call. Set `initiate_error` / `verify_error` to make the
    next calls fail, and `transaction_status` / `amount` to shape verify.
    """

    name = "paystack"

    def __init__(self):
        self.initiate_calls: List[Dict[str, Any]] = []
        self.verify_calls: List[str] = []
        self.initiate_error: Optional[GatewayError] = None
        self.verify_error: Optional[GatewayError] = None
        self.transaction_status = "success"
        self.amount: Optional[Decimal] = None
        self.currency: Optional[str] = "KES"
        self.channel: Optional[str] = "card"
        self.verify_delay = 0.0
        self._amounts: Dict[str, Decimal] = {}

    async def initiate(
        self,
        email: str,
        amount: Decimal,
        reference: str,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> GatewayInitiation:
        self.initiate_calls.append({
            "email": email,
            "amount": amount,
            "reference": reference,
            "metadata": metadata or {},
        })
        if self.initiate_error is not None:
            raise self.initiate_error
        self._amounts[reference] = amount
        return GatewayInitiation(
            authorization_url=f"https://checkout.paystack.com/{reference}",
            access_code=f"ac_{len(self.initiate_calls)}",
            reference=reference,
        )

    async def verify(self, reference: str) -> GatewayVerification:
        self.verify_calls.append(reference)
        if self.verify_delay:
            await asyncio.sleep(self.verify_delay)
        if self.verify_error is not None:
            raise self.verify_error

        amount = self.amount if self.amount is not None else self._amounts.get(reference, Decimal("0"))
        return GatewayVerification(
            reference=reference,
            outcome=_OUTCOMES.get(self.transaction_status, TransactionOutcome.PENDING),
            transaction_status=self.transaction_status,
            amount_minor_units=to_minor_units(amount),
            currency=self.currency,
            channel=self.channel,
        )
