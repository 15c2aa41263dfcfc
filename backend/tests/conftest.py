"""
Shared test fixtures.
"""
import os

# Settings are read at import time
os.environ["SECRET_KEY"] = "test-secret-key-that-is-long-enough-for-hs256"
os.environ["SEED_DEMO_DATA"] = "false"
os.environ["ENVIRONMENT"] = "development"
os.environ.pop("DATABASE_URL", None)

from datetime import datetime, timedelta, timezone  # noqa: E402
from typing import Any, AsyncGenerator, Callable  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402

from storedash.core.config import settings  # noqa: E402
from storedash.core.security import create_access_token  # noqa: E402
from storedash.main import app  # noqa: E402
from storedash.repositories.memory import MemoryDocumentStore  # noqa: E402
from storedash.routers.deps import get_document_store  # noqa: E402
from storedash.services.order_gateway import OrderGateway  # noqa: E402

OWNER_ID = "owner-1"
OTHER_OWNER_ID = "owner-2"
STORE_ID = "store-a"
OTHER_STORE_ID = "store-b"

BASE_TIME = datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc)

OrderFactory = Callable[..., dict[str, Any]]


def make_order_data(index: int = 0, **overrides: Any) -> dict[str, Any]:
    """Raw order record as the backend stores it."""
    created_at = BASE_TIME + timedelta(minutes=index)
    data = {
        "storeId": STORE_ID,
        "userId": f"customer-{index}",
        "items": [
            {
                "productId": "p-1",
                "storeId": STORE_ID,
                "name": "Ground Coffee",
                "price": 7.5,
                "weight": 0.5,
                "quantity": 2,
            },
        ],
        "subtotal": 15.0,
        "deliveryFee": 2.5,
        "total": 17.5,
        "totalWeight": 1.0,
        "status": "pending",
        "paymentStatus": "pending",
        "paymentMethod": "cash",
        "name": f"Customer {index}",
        "phone": f"+1555000{index:04d}",
        "address": {"street": "1 Main St", "city": "Springfield", "postalCode": "12345", "country": "US"},
        "orderNote": "",
        "createdAt": created_at,
        "updatedAt": created_at,
    }
    data.update(overrides)
    return data


def make_product_data(index: int = 0, **overrides: Any) -> dict[str, Any]:
    """Raw product record; later indexes are newer."""
    created_at = BASE_TIME + timedelta(days=index)
    data = {
        "storeId": STORE_ID,
        "name": f"Product {index}",
        "description": "A product for the test catalog",
        "price": 10.0 + index,
        "category": "Pantry",
        "quantity": 5,
        "isAvailable": True,
        "weight": 0.5,
        "isFeatured": False,
        "images": [],
        "collectionIds": [],
        "createdAt": created_at,
        "updatedAt": created_at,
    }
    data.update(overrides)
    return data


@pytest.fixture
def order_factory() -> OrderFactory:
    """Build raw order records with overridable fields."""
    return make_order_data


@pytest.fixture
def memory_store() -> MemoryDocumentStore:
    """Empty in-memory document store."""
    return MemoryDocumentStore()


@pytest.fixture
async def seeded_store(memory_store: MemoryDocumentStore) -> MemoryDocumentStore:
    """
    Two owners, three stores.

    store-a holds 25 orders cycling through every status, store-b holds 3.
    store-a sells two products, one of them in its "Breakfast" collection;
    store-b has one product in its own collection.
    """
    statuses = ["pending", "confirmed", "preparing", "ready", "delivered", "cancelled"]
    await memory_store.put(
        settings.stores_collection,
        STORE_ID,
        {"name": "Alpha Market", "storeOwnerId": OWNER_ID, "isActive": True, "isOpen": True},
    )
    await memory_store.put(
        settings.stores_collection,
        "store-c",
        {"name": "Corner Shop", "storeOwnerId": OWNER_ID, "isActive": True, "isOpen": False},
    )
    await memory_store.put(
        settings.stores_collection,
        OTHER_STORE_ID,
        {"name": "Bravo Bakery", "storeOwnerId": OTHER_OWNER_ID, "isActive": True},
    )
    for index in range(25):
        await memory_store.put(
            settings.orders_collection,
            f"order-a-{index:03d}",
            make_order_data(index, status=statuses[index % len(statuses)]),
        )
    for index in range(3):
        await memory_store.put(
            settings.orders_collection,
            f"order-b-{index:03d}",
            make_order_data(index, storeId=OTHER_STORE_ID),
        )

    await memory_store.put(
        settings.collections_collection,
        "col-a-1",
        {"storeId": STORE_ID, "name": "Breakfast", "imageUrl": "", "createdAt": BASE_TIME},
    )
    await memory_store.put(
        settings.collections_collection,
        "col-b-1",
        {"storeId": OTHER_STORE_ID, "name": "Cakes", "imageUrl": "", "createdAt": BASE_TIME},
    )
    await memory_store.put(
        settings.products_collection,
        "prod-a-1",
        make_product_data(1, name="Ground Coffee", category="Beverages", collectionIds=["col-a-1"]),
    )
    await memory_store.put(settings.products_collection, "prod-a-2", make_product_data(2, name="Wild Honey"))
    await memory_store.put(
        settings.products_collection,
        "prod-b-1",
        make_product_data(1, storeId=OTHER_STORE_ID, collectionIds=["col-b-1"]),
    )
    return memory_store


@pytest.fixture
def notifications() -> list[str]:
    """Messages the gateway reported to the user."""
    return []


@pytest.fixture
def gateway(seeded_store: MemoryDocumentStore, notifications: list[str]) -> OrderGateway:
    """Gateway over the seeded store with a recording notifier."""
    return OrderGateway(seeded_store, page_size=10, search_limit=50, notifier=notifications.append)


@pytest.fixture
def auth_headers() -> dict[str, str]:
    """Bearer token for OWNER_ID."""
    token = create_access_token({"sub": OWNER_ID})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def client(seeded_store: MemoryDocumentStore) -> TestClient:
    """Synchronous test client running the app lifespan."""
    app.dependency_overrides[get_document_store] = lambda: seeded_store
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
async def async_client(seeded_store: MemoryDocumentStore) -> AsyncGenerator[AsyncClient, None]:
    """Async test client; the lifespan does not run, the store is injected."""
    app.dependency_overrides[get_document_store] = lambda: seeded_store
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()
