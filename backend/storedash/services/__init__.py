"""
Services package for business logic layer.
"""
from storedash.services.collection_catalog import CollectionCatalog
from storedash.services.order_detail import OrderDetailPresenter, build_timeline
from storedash.services.order_gateway import OrderFilter, OrderGateway, OrderPage
from storedash.services.order_list import (
    OrderListPresenter,
    OrderListState,
    OrderRow,
    project_row,
)
from storedash.services.product_catalog import ProductCatalog
from storedash.services.store_directory import StoreDirectory

__all__ = [
    "OrderGateway",
    "OrderFilter",
    "OrderPage",
    "OrderListPresenter",
    "OrderListState",
    "OrderRow",
    "project_row",
    "OrderDetailPresenter",
    "build_timeline",
    "StoreDirectory",
    "ProductCatalog",
    "CollectionCatalog",
]
