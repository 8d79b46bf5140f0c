"""
FastAPI Dependencies.

Provides dependency injection for use cases and adapters.
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from fastapi import Header

# Load environment variables ONCE before any settings objects are created
_PROJECT_ROOT = Path(__file__).resolve().parents[1]
load_dotenv(dotenv_path=_PROJECT_ROOT / ".env")

from core.settings import get_app_settings
from core.application.interfaces import IIdentityProvider
from core.application.use_cases import InitiatePaymentUseCase, VerifyPaymentUseCase
from core.domain.exceptions import AuthError
from core.domain.gateway import PaymentGateway
from core.domain.repositories import OrderRepository
from core.domain.value_objects import AuthenticatedUser
from core.infrastructure.adapters.paystack import PaystackClient
from core.infrastructure.adapters.supabase import SupabaseIdentityProvider
from core.infrastructure.database.config import get_session_factory
from core.infrastructure.database.repositories import SQLAlchemyOrderRepository
from core.infrastructure.event_bus import get_event_bus

logger = logging.getLogger(__name__)


# =============================================================================
# SINGLETON INSTANCES
# =============================================================================

_order_repository: Optional[OrderRepository] = None
_payment_gateway: Optional[PaymentGateway] = None
_identity_provider: Optional[IIdentityProvider] = None
_initiate_use_case: Optional[InitiatePaymentUseCase] = None
_verify_use_case: Optional[VerifyPaymentUseCase] = None


# =============================================================================
# DEPENDENCIES
# =============================================================================

def get_order_repository() -> OrderRepository:
    global _order_repository
    if _order_repository is None:
        _order_repository = SQLAlchemyOrderRepository(get_session_factory())
        logger.info("Created SQLAlchemyOrderRepository instance")
    return _order_repository


def get_payment_gateway() -> PaymentGateway:
    global _payment_gateway
    if _payment_gateway is None:
        settings = get_app_settings()
        if not settings.paystack.secret_key:
            logger.warning("PAYSTACK_SECRET_KEY is not set; gateway calls will fail")
        _payment_gateway = PaystackClient(settings.paystack)
    return _payment_gateway


def get_identity_provider() -> IIdentityProvider:
    global _identity_provider
    if _identity_provider is None:
        _identity_provider = SupabaseIdentityProvider(get_app_settings().supabase)
        logger.info("Created SupabaseIdentityProvider instance")
    return _identity_provider


def get_initiate_use_case() -> InitiatePaymentUseCase:
    global _initiate_use_case

    if _initiate_use_case is None:
        _initiate_use_case = InitiatePaymentUseCase(
            order_repository=get_order_repository(),
            gateway=get_payment_gateway(),
            event_bus=get_event_bus(),
        )
        logger.info("Created InitiatePaymentUseCase instance")

    return _initiate_use_case


def get_verify_use_case() -> VerifyPaymentUseCase:
    global _verify_use_case

    if _verify_use_case is None:
        _verify_use_case = VerifyPaymentUseCase(
            order_repository=get_order_repository(),
            gateway=get_payment_gateway(),
            event_bus=get_event_bus(),
        )
        logger.info("Created VerifyPaymentUseCase instance")

    return _verify_use_case


def extract_bearer_token(authorization: Optional[str]) -> str:
    """
    Pull the token out of an `Authorization: Bearer <token>` header.

    Raises:
        AuthError: Header missing or not a bearer credential
    """
    if not authorization:
        raise AuthError("Missing authorization header")
    scheme, _, token = authorization.strip().partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise AuthError("Invalid authorization header")
    return token.strip()


async def get_current_user(
    authorization: Optional[str] = Header(default=None),
) -> AuthenticatedUser:
    """Resolve the caller from the bearer token."""
    token = extract_bearer_token(authorization)
    return await get_identity_provider().resolve(token)


# =============================================================================
# RESET (for testing)
# =============================================================================

def reset_dependencies():
    global _order_repository, _payment_gateway, _identity_provider
    global _initiate_use_case, _verify_use_case

    _order_repository = None
    _payment_gateway = None
    _identity_provider = None
    _initiate_use_case = None
    _verify_use_case = None

    logger.info("Dependencies reset")
