"""
Pydantic schemas package.
"""
from storedash.schemas.order import (
    NotificationResponse,
    OrderCountsResponse,
    OrderDetailResponse,
    OrderListResponse,
    OrderRowResponse,
    OrderStatusUpdate,
    StatusStepResponse,
)
from storedash.schemas.collection import (
    CollectionCreate,
    CollectionListResponse,
    CollectionUpdate,
)
from storedash.schemas.product import ProductCreate, ProductListResponse, ProductUpdate
from storedash.schemas.store import StoreListResponse, StoreSettingsUpdate, StoreStatusUpdate

__all__ = [
    # Orders
    "OrderRowResponse",
    "OrderListResponse",
    "OrderCountsResponse",
    "StatusStepResponse",
    "OrderDetailResponse",
    "OrderStatusUpdate",
    "NotificationResponse",
    # Stores
    "StoreListResponse",
    "StoreSettingsUpdate",
    "StoreStatusUpdate",
    # Products
    "ProductCreate",
    "ProductUpdate",
    "ProductListResponse",
    # Collections
    "CollectionCreate",
    "CollectionUpdate",
    "CollectionListResponse",
]
