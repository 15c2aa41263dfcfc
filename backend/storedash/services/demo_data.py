"""
Demo data for running without a database.

Seeds one owner with two stores, each with a spread of orders across
every status and a small product catalog, so the dashboard has something
to page through.
"""
from datetime import timedelta

from storedash.core.config import settings
from storedash.core.logging import get_logger
from storedash.core.timestamps import utcnow
from storedash.models.order import ORDER_WORKFLOW, OrderStatus
from storedash.repositories.base import DocumentStore

logger = get_logger(__name__)

DEMO_OWNER_ID = "demo-owner"
DEMO_STORE_ID = "demo-store"

_CUSTOMERS = [
    ("Amina Diallo", "+221770000001"),
    ("Lucas Martin", "+33600000002"),
    ("Sara Haddad", "+212600000003"),
    ("", "+221770000004"),
]

_PRODUCTS = [
    ("p-coffee", "Ground Coffee 500g", 7.5, 0.5, "Beverages"),
    ("p-tea", "Mint Tea Box", 4.25, 0.2, "Beverages"),
    ("p-honey", "Wild Honey Jar", 12.0, 0.8, "Pantry"),
]

_COLLECTIONS = [
    ("c-breakfast", "Breakfast", ("p-coffee", "p-honey")),
    ("c-gifts", "Gift Ideas", ("p-honey",)),
]


def _demo_order(index: int, store_id: str) -> tuple[str, dict]:
    statuses = [*ORDER_WORKFLOW, OrderStatus.CANCELLED]
    status = statuses[index % len(statuses)]
    name, phone = _CUSTOMERS[index % len(_CUSTOMERS)]

    items = []
    for offset in range(1 + index % 3):
        product_id, product_name, price, weight, _ = _PRODUCTS[(index + offset) % len(_PRODUCTS)]
        items.append({
            "productId": f"{product_id}-{store_id[-2:]}",
            "storeId": store_id,
            "name": product_name,
            "price": price,
            "weight": weight,
            "quantity": 1 + (index + offset) % 2,
        })

    subtotal = round(sum(item["price"] * item["quantity"] for item in items), 2)
    delivery_fee = 2.5
    created_at = utcnow() - timedelta(hours=6 * index)

    order_id = f"demo{index:04d}order{store_id[-2:]}"
    return order_id, {
        "storeId": store_id,
        "userId": f"customer-{index % len(_CUSTOMERS)}",
        "items": items,
        "subtotal": subtotal,
        "deliveryFee": delivery_fee,
        "total": round(subtotal + delivery_fee, 2),
        "totalWeight": round(sum(item["weight"] * item["quantity"] for item in items), 2),
        "status": status.value,
        "paymentStatus": "paid" if status != OrderStatus.PENDING else "pending",
        "paymentMethod": ["cash", "card", "mobile_money", "stripe"][index % 4],
        "name": name,
        "phone": phone,
        "address": {
            "street": f"{10 + index} Rue des Almadies",
            "city": "Dakar",
            "postalCode": "10200",
            "country": "SN",
        },
        "orderNote": "Leave at the door" if index % 5 == 0 else "",
        "createdAt": created_at,
        "updatedAt": created_at,
    }


async def _seed_catalog(store: DocumentStore, store_id: str) -> None:
    suffix = store_id[-2:]
    created_at = utcnow() - timedelta(days=60)
    for product_id, name, price, weight, category in _PRODUCTS:
        collection_ids = [
            f"{collection_id}-{suffix}"
            for collection_id, _, members in _COLLECTIONS
            if product_id in members
        ]
        await store.put(
            settings.products_collection,
            f"{product_id}-{suffix}",
            {
                "storeId": store_id,
                "name": name,
                "description": f"{name}, sourced locally",
                "price": price,
                "category": category,
                "quantity": 40,
                "isAvailable": True,
                "weight": weight,
                "isFeatured": product_id == "p-honey",
                "images": [],
                "collectionIds": collection_ids,
                "createdAt": created_at,
                "updatedAt": created_at,
            },
        )
    for collection_id, name, _ in _COLLECTIONS:
        await store.put(
            settings.collections_collection,
            f"{collection_id}-{suffix}",
            {"storeId": store_id, "name": name, "imageUrl": "", "createdAt": created_at},
        )


async def seed_demo_data(store: DocumentStore, *, orders_per_store: int = 24) -> None:
    """Write the demo stores with their orders, products and collections."""
    stores = [
        (DEMO_STORE_ID, "Corner Grocery"),
        ("demo-store-02", "Night Market"),
    ]
    for store_id, store_name in stores:
        await store.put(
            settings.stores_collection,
            store_id,
            {
                "name": store_name,
                "description": "Demo store",
                "email": f"{store_id}@example.com",
                "storeOwnerId": DEMO_OWNER_ID,
                "isActive": True,
                "isOpen": True,
                "createdAt": utcnow() - timedelta(days=90),
            },
        )
        for index in range(orders_per_store):
            order_id, data = _demo_order(index, store_id)
            await store.put(settings.orders_collection, order_id, data)
        await _seed_catalog(store, store_id)

    logger.info(
        "Demo data seeded",
        stores=len(stores),
        orders=len(stores) * orders_per_store,
        products=len(stores) * len(_PRODUCTS),
    )
