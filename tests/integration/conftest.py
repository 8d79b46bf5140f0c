"""Pytest configuration and fixtures for integration tests."""

import pytest
import pytest_asyncio
from fastapi.testclient import TestClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from api.dependencies import (
    get_current_user,
    get_initiate_use_case,
    get_verify_use_case,
    reset_dependencies,
)
from api.main import app
from core.application.use_cases import InitiatePaymentUseCase, VerifyPaymentUseCase
from core.domain.value_objects import AuthenticatedUser
from core.infrastructure.adapters.persistence import InMemoryOrderRepository
from core.infrastructure.database.models import Base
from core.infrastructure.database.repositories import SQLAlchemyOrderRepository
from tests.mocks.fake_payment_gateway import FakePaymentGateway


# Use in-memory SQLite for testing
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@pytest_asyncio.fixture(scope="function")
async def test_engine():
    """Create test database engine."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        echo=False,
    )

    # Create all tables
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    # Cleanup
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest_asyncio.fixture
async def test_session_factory(test_engine):
    """Create test session factory."""
    session_factory = async_sessionmaker(
        test_engine, class_=AsyncSession, expire_on_commit=False
    )
    yield session_factory


@pytest.fixture
def sql_repository(test_session_factory) -> SQLAlchemyOrderRepository:
    return SQLAlchemyOrderRepository(test_session_factory)


@pytest.fixture
def api_repository() -> InMemoryOrderRepository:
    return InMemoryOrderRepository()


@pytest.fixture
def api_gateway() -> FakePaymentGateway:
    return FakePaymentGateway()


@pytest.fixture
def test_client(api_repository, api_gateway) -> TestClient:
    """FastAPI test client wired to in-memory storage and a fake gateway.

    Authentication accepts `Bearer user-<n>` and maps it to that user id;
    any other token is rejected by the real header parsing.
    """
    from api.dependencies import extract_bearer_token
    from fastapi import Header
    from typing import Optional

    async def override_current_user(authorization: Optional[str] = Header(default=None)):
        token = extract_bearer_token(authorization)
        return AuthenticatedUser(user_id=token, email=f"{token}@example.com")

    app.dependency_overrides[get_current_user] = override_current_user
    app.dependency_overrides[get_initiate_use_case] = lambda: InitiatePaymentUseCase(api_repository, api_gateway)
    app.dependency_overrides[get_verify_use_case] = lambda: VerifyPaymentUseCase(api_repository, api_gateway)

    # Not used as a context manager: startup would create the real database
    client = TestClient(app, raise_server_exceptions=False)
    yield client

    # Cleanup
    app.dependency_overrides.clear()
    reset_dependencies()
