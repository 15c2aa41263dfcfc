"""
API routers package.
"""
from storedash.routers.collections import router as collections_router
from storedash.routers.health import router as health_router
from storedash.routers.orders import router as orders_router
from storedash.routers.products import router as products_router
from storedash.routers.stores import router as stores_router

__all__ = [
    "health_router",
    "stores_router",
    "orders_router",
    "products_router",
    "collections_router",
]
