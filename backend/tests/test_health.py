"""
Tests for health check endpoints.
"""
from unittest.mock import AsyncMock

from fastapi.testclient import TestClient

from storedash.core.exceptions import BackendError


def test_root_endpoint(client: TestClient):
    """Test the root endpoint returns API info."""
    response = client.get("/")

    assert response.status_code == 200
    data = response.json()
    assert data["name"] == "StoreDash API"
    assert "version" in data
    assert data["status"] == "running"
    assert data["mode"] == "demo"


def test_health_check(client: TestClient):
    """Test the basic health check endpoint."""
    response = client.get("/health")

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "healthy"
    assert "timestamp" in data


def test_liveness(client: TestClient):
    """Test the liveness endpoint."""
    response = client.get("/health/live")

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "alive"


def test_request_id_is_echoed(client: TestClient):
    """Test the request id header is passed back."""
    response = client.get("/health", headers={"X-Request-ID": "req-123"})

    assert response.headers["x-request-id"] == "req-123"


def test_request_id_is_generated(client: TestClient):
    response = client.get("/health")

    assert response.headers.get("x-request-id")


async def test_readiness(async_client):
    """Test the readiness endpoint."""
    response = await async_client.get("/health/ready")

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "ready"
    assert data["checks"]["document_store"] == "connected"
    assert data["checks"]["database"] == "demo"


async def test_readiness_backend_down(async_client, seeded_store):
    """Test readiness reports the document store failure."""
    seeded_store.count_where = AsyncMock(side_effect=BackendError("refused"))

    response = await async_client.get("/health/ready")

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "not_ready"
    assert data["checks"]["document_store"] == "error: refused"
