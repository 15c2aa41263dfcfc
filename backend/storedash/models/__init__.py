"""
Models package.

``DocumentRecord`` is the only SQLAlchemy model; the domain models are
pydantic models parsed from documents.
"""
from storedash.models.document import DocumentRecord
from storedash.models.order import (
    ORDER_WORKFLOW,
    TERMINAL_STATUSES,
    Address,
    Order,
    OrderItem,
    OrderStatus,
    PaymentMethod,
    PaymentStatus,
    parse_order,
    status_label,
)
from storedash.models.collection import Collection
from storedash.models.product import Product
from storedash.models.store import DeliveryTier, Store

__all__ = [
    "DocumentRecord",
    "Address",
    "Order",
    "OrderItem",
    "OrderStatus",
    "PaymentStatus",
    "PaymentMethod",
    "ORDER_WORKFLOW",
    "TERMINAL_STATUSES",
    "parse_order",
    "status_label",
    "Store",
    "DeliveryTier",
    "Product",
    "Collection",
]
