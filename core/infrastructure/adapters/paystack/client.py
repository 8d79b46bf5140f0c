"""
Paystack Gateway Client.

Implements PaymentGateway over the Paystack REST API.

Amounts go out in minor units (KES cents) and come back the same way;
everything above this module works in major units.
"""
from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, Optional
from urllib.parse import quote
import asyncio
import logging

import aiohttp

from core.domain.enums import TransactionOutcome
from core.domain.exceptions import GatewayError
from core.domain.gateway import GatewayInitiation, GatewayVerification, PaymentGateway
from core.domain.value_objects import from_minor_units, to_minor_units
from core.settings.sections.paystack import PaystackSettings


logger = logging.getLogger(__name__)


_SUCCESS_STATUSES = frozenset({"success"})
_FAILED_STATUSES = frozenset({"failed", "abandoned"})


def map_transaction_status(status: Optional[str]) -> TransactionOutcome:
    """
    Normalize a Paystack transaction status.

    success -> SUCCESS; failed/abandoned -> FAILED; anything else
    (ongoing, pending, processing, queued, reversed, unknown) -> PENDING.
    """
    normalized = (status or "").lower()
    if normalized in _SUCCESS_STATUSES:
        return TransactionOutcome.SUCCESS
    if normalized in _FAILED_STATUSES:
        return TransactionOutcome.FAILED
    return TransactionOutcome.PENDING


def _parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    if not value:
        return None
    try:
        # Paystack sends e.g. 2024-01-15T10:30:00.000Z
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        logger.warning(f"Unparseable paid_at from gateway: {value!r}")
        return None


class PaystackClient(PaymentGateway):
    """
    Paystack implementation of PaymentGateway.

    Every call opens a fresh aiohttp session bounded by the configured
    timeout. Calls are never retried here; the caller decides.
    """

    name = "paystack"

    def __init__(self, settings: PaystackSettings):
        """
        Initialize Paystack client.

        Args:
            settings: Paystack settings with secret key and base URL
        """
        self.settings = settings
        self.base_url = settings.base_url.rstrip("/")
        self.currency = settings.currency
        self.timeout = aiohttp.ClientTimeout(total=settings.timeout_seconds)
        logger.info(f"PaystackClient initialized (base_url={self.base_url})")

    async def initiate(
        self,
        email: str,
        amount: Decimal,
        reference: str,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> GatewayInitiation:
        """Create a Paystack transaction and return its checkout URL."""
        payload = self.build_initialize_payload(email, amount, reference, metadata)
        logger.info(
            f"Initializing Paystack transaction {reference} "
            f"(amount={payload['amount']} {payload['currency']})"
        )

        data = await self._request("POST", "/transaction/initialize", json=payload)

        try:
            return GatewayInitiation(
                authorization_url=data["authorization_url"],
                access_code=data.get("access_code"),
                reference=data.get("reference") or reference,
            )
        except KeyError as e:
            raise GatewayError(
                "Malformed initialize response from Paystack",
                details={"missing": str(e)},
            ) from e

    async def verify(self, reference: str) -> GatewayVerification:
        """Fetch the authoritative transaction status from Paystack."""
        logger.info(f"Verifying Paystack transaction {reference}")

        data = await self._request("GET", f"/transaction/verify/{quote(reference, safe='')}")

        try:
            status = data["status"]
            amount_minor_units = int(data["amount"])
            if not isinstance(status, str) or not status:
                raise ValueError("transaction status is not a string")
        except (KeyError, TypeError, ValueError) as e:
            raise GatewayError(
                "Malformed verify response from Paystack",
                details={"reference": reference},
            ) from e

        fees = data.get("fees")
        return GatewayVerification(
            reference=data.get("reference") or reference,
            outcome=map_transaction_status(status),
            transaction_status=status,
            amount_minor_units=amount_minor_units,
            currency=data.get("currency"),
            paid_at=_parse_timestamp(data.get("paid_at") or data.get("paidAt")),
            channel=data.get("channel"),
            fees=from_minor_units(fees) if fees is not None else None,
            raw=data,
        )

    def build_initialize_payload(
        self,
        email: str,
        amount: Decimal,
        reference: str,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        """Shape the /transaction/initialize body."""
        metadata = dict(metadata or {})
        order_id = metadata.get("order_id")
        order_number = metadata.get("order_number")
        metadata["custom_fields"] = [
            {
                "display_name": "Order Number",
                "variable_name": "order_number",
                "value": order_number,
            },
            {
                "display_name": "Order ID",
                "variable_name": "order_id",
                "value": order_id,
            },
        ]

        payload: Dict[str, Any] = {
            "email": email,
            "amount": to_minor_units(amount),
            "currency": self.currency,
            "reference": reference,
            "metadata": metadata,
            "channels": self.settings.channel_list,
        }
        if self.settings.callback_url:
            payload["callback_url"] = self.settings.callback_url
        return payload

    async def _request(self, method: str, path: str, json: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """
        Send a request and unwrap Paystack's {status, message, data} envelope.

        Raises:
            GatewayError: Missing key, transport failure, timeout, non-2xx,
                status=false, or missing data
        """
        if not self.settings.secret_key:
            raise GatewayError("Paystack secret key is not configured")

        headers = {
            "Authorization": f"Bearer {self.settings.secret_key}",
            "Content-Type": "application/json",
        }
        url = f"{self.base_url}{path}"

        try:
            async with aiohttp.ClientSession(timeout=self.timeout) as session:
                async with session.request(method, url, json=json, headers=headers) as response:
                    try:
                        body = await response.json(content_type=None)
                    except ValueError:
                        body = None
                    http_status = response.status
        except asyncio.TimeoutError as e:
            logger.error(f"Paystack {method} {path} timed out")
            raise GatewayError("Payment gateway timed out") from e
        except aiohttp.ClientError as e:
            logger.error(f"Paystack {method} {path} failed: {e}")
            raise GatewayError(f"Payment gateway unreachable: {e}") from e

        if not isinstance(body, dict):
            logger.error(f"Paystack {method} {path} returned a non-JSON body (HTTP {http_status})")
            raise GatewayError(
                "Malformed response from Paystack",
                details={"http_status": http_status},
            )

        message = body.get("message") or "Paystack request failed"
        if http_status >= 400 or not body.get("status"):
            logger.error(f"Paystack {method} {path} rejected: HTTP {http_status} - {message}")
            raise GatewayError(message, details={"http_status": http_status})

        data = body.get("data")
        if not isinstance(data, dict):
            raise GatewayError(
                "Paystack response is missing data",
                details={"http_status": http_status},
            )
        return data
