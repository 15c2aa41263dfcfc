"""
Shared FastAPI dependencies.
"""
from typing import Annotated, Optional

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from storedash.core.security import owner_id_from_token
from storedash.core.timestamps import MonotonicClock
from storedash.models.store import Store
from storedash.repositories.base import DocumentStore
from storedash.services.collection_catalog import CollectionCatalog
from storedash.services.order_gateway import OrderGateway
from storedash.services.product_catalog import ProductCatalog
from storedash.services.store_directory import StoreDirectory

bearer_scheme = HTTPBearer(auto_error=False)


def get_document_store(request: Request) -> DocumentStore:
    """Document store chosen at startup (SQL or in-memory demo store)."""
    return request.app.state.document_store


def get_write_clock(request: Request) -> MonotonicClock:
    """Process-wide clock for ``updatedAt`` stamps."""
    return request.app.state.write_clock


def get_notifications() -> list[str]:
    """Per-request sink for transient user-facing messages."""
    return []


async def get_current_owner(
    credentials: Annotated[Optional[HTTPAuthorizationCredentials], Depends(bearer_scheme)],
) -> str:
    """Store owner id from the bearer token."""
    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    owner_id = owner_id_from_token(credentials.credentials)
    if not owner_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return owner_id


def get_store_directory(
    store: Annotated[DocumentStore, Depends(get_document_store)],
    clock: Annotated[MonotonicClock, Depends(get_write_clock)],
) -> StoreDirectory:
    return StoreDirectory(store, clock=clock)


def get_product_catalog(
    store: Annotated[DocumentStore, Depends(get_document_store)],
    clock: Annotated[MonotonicClock, Depends(get_write_clock)],
) -> ProductCatalog:
    return ProductCatalog(store, clock=clock)


def get_collection_catalog(
    store: Annotated[DocumentStore, Depends(get_document_store)],
    clock: Annotated[MonotonicClock, Depends(get_write_clock)],
) -> CollectionCatalog:
    return CollectionCatalog(store, clock=clock)


def get_order_gateway(
    store: Annotated[DocumentStore, Depends(get_document_store)],
    notifications: Annotated[list[str], Depends(get_notifications)],
    clock: Annotated[MonotonicClock, Depends(get_write_clock)],
) -> OrderGateway:
    return OrderGateway(store, notifier=notifications.append, clock=clock)


async def require_owned_store(
    store_id: str,
    owner_id: Annotated[str, Depends(get_current_owner)],
    directory: Annotated[StoreDirectory, Depends(get_store_directory)],
) -> Store:
    """Store guard: the store must exist and belong to the caller."""
    return await directory.get_owned(store_id, owner_id)


CurrentOwner = Annotated[str, Depends(get_current_owner)]
OwnedStore = Annotated[Store, Depends(require_owned_store)]
Gateway = Annotated[OrderGateway, Depends(get_order_gateway)]
Products = Annotated[ProductCatalog, Depends(get_product_catalog)]
Collections = Annotated[CollectionCatalog, Depends(get_collection_catalog)]
Directory = Annotated[StoreDirectory, Depends(get_store_directory)]
Notifications = Annotated[list[str], Depends(get_notifications)]
