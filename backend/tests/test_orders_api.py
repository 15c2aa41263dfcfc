"""
Tests for order management endpoints.
"""
from unittest.mock import AsyncMock

import pytest
from fastapi.testclient import TestClient

from storedash.core.exceptions import BackendError

from conftest import OTHER_STORE_ID, STORE_ID

ORDERS_URL = f"/api/stores/{STORE_ID}/orders"


def test_list_orders(client: TestClient, auth_headers: dict):
    """Test the first page of orders, newest first."""
    response = client.get(ORDERS_URL, headers=auth_headers)

    assert response.status_code == 200
    data = response.json()
    assert data["total"] == 25
    assert data["pageSize"] == 10
    assert len(data["items"]) == 10
    assert data["nextCursor"] == "order-a-015"
    assert data["notifications"] == []

    first = data["items"][0]
    assert first["id"] == "order-a-024"
    assert first["orderNumber"] == "#ORDER-A-"
    assert first["customerName"] == "Customer 24"
    assert first["formattedTotal"] == "$17.50"
    assert first["total"] == 17.5
    assert first["totalItems"] == 2
    assert first["status"] == "pending"


def test_list_orders_next_page(client: TestClient, auth_headers: dict):
    """Test following the cursor to the next page."""
    response = client.get(
        ORDERS_URL,
        params={"cursor": "order-a-015", "pageSize": 20},
        headers=auth_headers,
    )

    assert response.status_code == 200
    data = response.json()
    assert [item["id"] for item in data["items"]] == [
        f"order-a-{index:03d}" for index in reversed(range(15))
    ]
    assert data["nextCursor"] is None


def test_list_orders_by_status(client: TestClient, auth_headers: dict):
    response = client.get(ORDERS_URL, params={"status": "delivered"}, headers=auth_headers)

    assert response.status_code == 200
    data = response.json()
    assert data["total"] == 4
    assert {item["status"] for item in data["items"]} == {"delivered"}


def test_list_orders_invalid_status(client: TestClient, auth_headers: dict):
    response = client.get(ORDERS_URL, params={"status": "shipped"}, headers=auth_headers)

    assert response.status_code == 422


def test_search_orders(client: TestClient, auth_headers: dict):
    """Test searching orders by customer phone."""
    response = client.get(ORDERS_URL, params={"q": "+15550000011"}, headers=auth_headers)

    assert response.status_code == 200
    data = response.json()
    assert [item["id"] for item in data["items"]] == ["order-a-011"]
    assert data["total"] == 1
    assert data["nextCursor"] is None


def test_list_orders_of_foreign_store(client: TestClient, auth_headers: dict):
    """Test that another owner's orders are not reachable."""
    response = client.get(f"/api/stores/{OTHER_STORE_ID}/orders", headers=auth_headers)

    assert response.status_code == 404


def test_list_orders_requires_token(client: TestClient):
    response = client.get(ORDERS_URL)

    assert response.status_code == 401


async def test_list_orders_backend_failure(async_client, auth_headers, seeded_store):
    """Test a backend failure yields an empty page and a notification."""
    real_query = seeded_store.query_equal

    async def failing_order_query(collection, *args, **kwargs):
        if collection == "orders":
            raise BackendError("connection reset")
        return await real_query(collection, *args, **kwargs)

    seeded_store.query_equal = failing_order_query

    response = await async_client.get(ORDERS_URL, headers=auth_headers)

    assert response.status_code == 200
    data = response.json()
    assert data["items"] == []
    assert data["total"] == 0
    assert data["notifications"] == ["Failed to load orders"]


def test_order_counts(client: TestClient, auth_headers: dict):
    response = client.get(f"{ORDERS_URL}/counts", headers=auth_headers)

    assert response.status_code == 200
    counts = response.json()["counts"]
    assert counts == {
        "pending": 5,
        "confirmed": 4,
        "preparing": 4,
        "ready": 4,
        "delivered": 4,
        "cancelled": 4,
        "all": 21,
    }


def test_get_order(client: TestClient, auth_headers: dict):
    """Test getting one order with its timeline."""
    response = client.get(f"{ORDERS_URL}/order-a-002", headers=auth_headers)

    assert response.status_code == 200
    data = response.json()
    assert data["order"]["id"] == "order-a-002"
    assert data["order"]["storeId"] == STORE_ID
    assert data["order"]["status"] == "preparing"
    assert data["order"]["items"][0]["totalPrice"] == 15.0
    assert [step["state"] for step in data["timeline"]] == [
        "completed",
        "completed",
        "current",
        "upcoming",
        "upcoming",
    ]
    assert data["timeline"][2]["isCurrent"] is True
    assert data["timeline"][2]["date"] is not None
    assert data["nextStatuses"] == ["ready", "delivered"]
    assert data["cancelled"] is False
    assert data["terminal"] is False


@pytest.mark.parametrize("order_id", ["order-b-000", "does-not-exist"])
def test_get_order_not_found(client: TestClient, auth_headers: dict, order_id: str):
    """Test that foreign and missing orders look the same."""
    response = client.get(f"{ORDERS_URL}/{order_id}", headers=auth_headers)

    assert response.status_code == 404
    assert response.json() == {"detail": "Order not found", "type": "OrderNotFoundError"}


async def test_get_order_backend_unavailable(async_client, auth_headers, seeded_store):
    real_get = seeded_store.get_by_id

    async def failing_order_get(collection, doc_id):
        if collection == "orders":
            raise BackendError("unreachable")
        return await real_get(collection, doc_id)

    seeded_store.get_by_id = failing_order_get

    response = await async_client.get(f"{ORDERS_URL}/order-a-000", headers=auth_headers)

    assert response.status_code == 503
    assert response.json()["detail"] == "Backend unavailable"


def test_update_order_status(client: TestClient, auth_headers: dict):
    """Test changing an order status."""
    before = client.get(f"{ORDERS_URL}/order-a-000", headers=auth_headers).json()

    response = client.patch(
        f"{ORDERS_URL}/order-a-000/status",
        json={"status": "confirmed"},
        headers=auth_headers,
    )

    assert response.status_code == 200
    data = response.json()
    assert data["order"]["status"] == "confirmed"
    assert data["order"]["updatedAt"] > before["order"]["updatedAt"]
    assert data["notifications"] == ["Order status updated to confirmed"]

    reloaded = client.get(f"{ORDERS_URL}/order-a-000", headers=auth_headers).json()
    assert reloaded["order"]["status"] == "confirmed"


def test_update_order_status_invalid(client: TestClient, auth_headers: dict):
    response = client.patch(
        f"{ORDERS_URL}/order-a-000/status",
        json={"status": "shipped"},
        headers=auth_headers,
    )

    assert response.status_code == 422


def test_update_foreign_order_status(client: TestClient, auth_headers: dict):
    response = client.patch(
        f"{ORDERS_URL}/order-b-000/status",
        json={"status": "confirmed"},
        headers=auth_headers,
    )

    assert response.status_code == 404


async def test_update_order_status_write_failure(async_client, auth_headers, seeded_store):
    seeded_store.update_fields = AsyncMock(side_effect=BackendError("read only"))

    response = await async_client.patch(
        f"{ORDERS_URL}/order-a-000/status",
        json={"status": "ready"},
        headers=auth_headers,
    )

    assert response.status_code == 503


def test_cancel_order(client: TestClient, auth_headers: dict):
    """Test cancelling an order re-reads it."""
    response = client.post(f"{ORDERS_URL}/order-a-001/cancel", headers=auth_headers)

    assert response.status_code == 200
    data = response.json()
    assert data["order"]["status"] == "cancelled"
    assert data["cancelled"] is True
    assert data["terminal"] is True
    assert data["nextStatuses"] == []
    assert all(step["state"] == "upcoming" for step in data["timeline"])
    assert data["notifications"] == ["Order has been cancelled"]


def test_cancel_terminal_order(client: TestClient, auth_headers: dict):
    """Test that delivered orders cannot be cancelled."""
    response = client.post(f"{ORDERS_URL}/order-a-004/cancel", headers=auth_headers)

    assert response.status_code == 409


def test_resend_confirmation(client: TestClient, auth_headers: dict):
    response = client.post(f"{ORDERS_URL}/order-a-000/resend-confirmation", headers=auth_headers)

    assert response.status_code == 200
    assert response.json() == {"message": "Order confirmation has been resent"}
