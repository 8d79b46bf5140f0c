"""
Payment endpoints.

Start a payment, reconcile it with the gateway, and bounce the buyer
back to the storefront after the hosted checkout.
"""
from typing import Optional
from urllib.parse import urlencode
import logging

from fastapi import APIRouter, Depends, Query, status
from fastapi.responses import RedirectResponse

from api.dependencies import get_current_user, get_initiate_use_case, get_verify_use_case
from core.application.dtos import (
    ErrorResponse,
    InitiatePaymentRequest,
    InitiatePaymentResponse,
    VerifyPaymentRequest,
    VerifyPaymentResponse,
)
from core.application.use_cases import InitiatePaymentUseCase, VerifyPaymentUseCase
from core.domain.value_objects import AuthenticatedUser
from core.settings import get_app_settings


logger = logging.getLogger(__name__)
router = APIRouter()

_ERROR_RESPONSES = {
    400: {"model": ErrorResponse},
    401: {"model": ErrorResponse},
    404: {"model": ErrorResponse},
    500: {"model": ErrorResponse},
    502: {"model": ErrorResponse},
}


# =============================================================================
# INITIATE
# =============================================================================

@router.post(
    "/initiate",
    response_model=InitiatePaymentResponse,
    status_code=status.HTTP_200_OK,
    summary="Start a payment for an order",
    responses=_ERROR_RESPONSES,
)
async def initiate_payment(
    request: InitiatePaymentRequest,
    user: AuthenticatedUser = Depends(get_current_user),
    use_case: InitiatePaymentUseCase = Depends(get_initiate_use_case),
) -> InitiatePaymentResponse:
    """
    Create a gateway transaction for the caller's order.

    **Returns:** the `authorization_url` the buyer must be redirected to.
    """
    result = await use_case.execute(order_id=request.order_id, user=user)

    return InitiatePaymentResponse(
        success=True,
        order_id=result.order_id,
        order_number=result.order_number,
        payment_reference=result.payment_reference,
        authorization_url=result.authorization_url,
        access_code=result.access_code,
        payment_status=result.payment_status,
    )


# =============================================================================
# VERIFY
# =============================================================================

@router.post(
    "/verify",
    response_model=VerifyPaymentResponse,
    status_code=status.HTTP_200_OK,
    summary="Reconcile an order's payment with the gateway",
    responses=_ERROR_RESPONSES,
)
async def verify_payment(
    request: VerifyPaymentRequest,
    user: AuthenticatedUser = Depends(get_current_user),
    use_case: VerifyPaymentUseCase = Depends(get_verify_use_case),
) -> VerifyPaymentResponse:
    """
    Ask the gateway for the transaction's status and record it.

    Idempotent: an order that is already paid is answered from storage.
    """
    result = await use_case.execute(
        user=user,
        order_id=request.order_id,
        reference=request.reference,
    )

    return VerifyPaymentResponse(
        success=True,
        order_id=result.order_id,
        order_number=result.order_number,
        payment_reference=result.payment_reference,
        payment_status=result.payment_status,
        order_status=result.order_status,
        transaction_status=result.transaction_status,
        amount=result.amount,
        currency=result.currency,
        paid_at=result.paid_at,
        channel=result.channel,
        still_pending=result.still_pending,
    )


# =============================================================================
# GATEWAY RETURN
# =============================================================================

@router.get(
    "/callback",
    status_code=status.HTTP_302_FOUND,
    summary="Gateway return URL",
    response_class=RedirectResponse,
)
async def payment_callback(
    reference: Optional[str] = Query(default=None),
    trxref: Optional[str] = Query(default=None),
    status_hint: Optional[str] = Query(default=None, alias="status"),
) -> RedirectResponse:
    """
    Redirect the buyer to the storefront confirmation page.

    Query parameters are only a hint; the page calls /payments/verify,
    which is the only place payment state changes.
    """
    frontend = get_app_settings().frontend
    transaction_reference = reference or trxref

    if not transaction_reference:
        logger.warning("Gateway callback without a reference")
        target = f"{frontend.confirmation_url}?{urlencode({'error': 'no_reference'})}"
    else:
        logger.info(f"Gateway callback for {transaction_reference} (status hint: {status_hint})")
        target = f"{frontend.confirmation_url}?{urlencode({'reference': transaction_reference})}"

    return RedirectResponse(url=target, status_code=status.HTTP_302_FOUND)
