"""
Integration tests for the payment HTTP endpoints.
"""
import asyncio
from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient

from core.domain.enums import PaymentStatus
from core.domain.exceptions import GatewayError, PersistenceError
from tests.conftest import make_order


AUTH = {"Authorization": "Bearer user-1"}


@pytest.fixture
def seeded_order(api_repository):
    order = make_order(user_id="user-1")
    asyncio.run(api_repository.add(order))
    return order


def test_health(test_client: TestClient):
    response = test_client.get("/health")

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "healthy"
    assert body["service"] == "order-payments"


# =============================================================================
# AUTH
# =============================================================================

@pytest.mark.parametrize("headers", [{}, {"Authorization": "Token abc"}, {"Authorization": "Bearer"}])
def test_missing_or_malformed_auth_is_401(test_client: TestClient, headers):
    response = test_client.post("/payments/initiate", json={"order_id": "x"}, headers=headers)

    assert response.status_code == 401
    assert "error" in response.json()


# =============================================================================
# INITIATE
# =============================================================================

def test_initiate_returns_authorization_url(test_client: TestClient, seeded_order, api_repository):
    response = test_client.post("/payments/initiate", json={"order_id": seeded_order.id}, headers=AUTH)

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["order_number"] == seeded_order.order_number
    assert body["payment_status"] == "pending"
    assert body["authorization_url"].startswith("https://checkout.paystack.com/")
    assert body["payment_reference"].startswith(f"{seeded_order.order_number}-")


def test_initiate_missing_order_id_is_400(test_client: TestClient):
    response = test_client.post("/payments/initiate", json={}, headers=AUTH)

    assert response.status_code == 400
    assert response.json()["error"] == "Invalid request"


def test_initiate_unknown_order_is_404(test_client: TestClient):
    response = test_client.post("/payments/initiate", json={"order_id": "nope"}, headers=AUTH)

    assert response.status_code == 404
    assert response.json()["error"] == "Order not found"


def test_initiate_other_users_order_is_404(test_client: TestClient, seeded_order):
    response = test_client.post(
        "/payments/initiate",
        json={"order_id": seeded_order.id},
        headers={"Authorization": "Bearer user-2"},
    )

    assert response.status_code == 404


def test_initiate_paid_order_is_400(test_client: TestClient, api_repository, api_gateway):
    order = make_order(payment_status=PaymentStatus.PAID, payment_reference="ORD-20240115-AB12-1")
    asyncio.run(api_repository.add(order))

    response = test_client.post("/payments/initiate", json={"order_id": order.id}, headers=AUTH)

    assert response.status_code == 400
    assert response.json()["error"] == "Order is already paid"
    assert api_gateway.initiate_calls == []


def test_initiate_gateway_error_is_502_and_marks_failed(test_client: TestClient, seeded_order, api_repository, api_gateway):
    api_gateway.initiate_error = GatewayError("Invalid key")

    response = test_client.post("/payments/initiate", json={"order_id": seeded_order.id}, headers=AUTH)

    assert response.status_code == 502
    assert response.json()["error"] == "Invalid key"
    stored = asyncio.run(api_repository.get(seeded_order.id, "user-1"))
    assert stored.payment_status == PaymentStatus.FAILED


# =============================================================================
# VERIFY
# =============================================================================

def test_verify_requires_reference_or_order_id(test_client: TestClient):
    response = test_client.post("/payments/verify", json={}, headers=AUTH)

    assert response.status_code == 400


def test_initiate_then_verify(test_client: TestClient, seeded_order):
    initiated = test_client.post("/payments/initiate", json={"order_id": seeded_order.id}, headers=AUTH).json()

    first = test_client.post("/payments/verify", json={"reference": initiated["payment_reference"]}, headers=AUTH)
    second = test_client.post("/payments/verify", json={"order_id": seeded_order.id}, headers=AUTH)
    third = test_client.post("/payments/verify", json={"order_id": seeded_order.id}, headers=AUTH)

    assert first.status_code == 200
    body = first.json()
    assert body["payment_status"] == "paid"
    assert body["order_status"] == "completed"
    assert body["transaction_status"] == "success"
    assert body["amount"] == "1500.00"
    assert body["channel"] == "card"
    assert second.json() == third.json()


def test_verify_no_reference_on_record_is_400(test_client: TestClient, seeded_order):
    response = test_client.post("/payments/verify", json={"order_id": seeded_order.id}, headers=AUTH)

    assert response.status_code == 400
    assert response.json()["error"] == "No payment reference found"


def test_verify_unknown_reference_is_404(test_client: TestClient):
    response = test_client.post("/payments/verify", json={"reference": "ORD-20240115-XXXX-1"}, headers=AUTH)

    assert response.status_code == 404


def test_verify_gateway_timeout_is_502_without_write(test_client: TestClient, api_repository, api_gateway):
    order = make_order(payment_reference="ORD-20240115-AB12-1")
    asyncio.run(api_repository.add(order))
    api_gateway.verify_error = GatewayError("Payment gateway timed out")

    response = test_client.post("/payments/verify", json={"order_id": order.id}, headers=AUTH)

    assert response.status_code == 502
    assert api_repository.update_calls == 0


def test_store_failure_is_500(test_client: TestClient, api_repository, seeded_order):
    with patch.object(api_repository, "get", side_effect=PersistenceError()):
        response = test_client.post("/payments/initiate", json={"order_id": seeded_order.id}, headers=AUTH)

    assert response.status_code == 500
    assert response.json() == {"error": "Order store error"}


# =============================================================================
# CALLBACK
# =============================================================================

def test_callback_redirects_to_confirmation_page(test_client: TestClient, api_repository, api_gateway):
    response = test_client.get(
        "/payments/callback",
        params={"trxref": "ORD-20240115-AB12-1", "status": "success"},
        follow_redirects=False,
    )

    assert response.status_code == 302
    location = response.headers["location"]
    assert location.endswith("/checkout/payment-confirmation?reference=ORD-20240115-AB12-1")
    # Advisory only: nothing verified, nothing written
    assert api_gateway.verify_calls == []
    assert api_repository.update_calls == 0


def test_callback_without_reference(test_client: TestClient):
    response = test_client.get("/payments/callback", follow_redirects=False)

    assert response.status_code == 302
    assert response.headers["location"].endswith("?error=no_reference")
