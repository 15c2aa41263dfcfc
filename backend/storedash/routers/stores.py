"""
Store selection and store settings API routes.
"""
from fastapi import APIRouter

from storedash.core.logging import get_logger
from storedash.models.store import Store
from storedash.routers.deps import CurrentOwner, Directory, OwnedStore
from storedash.schemas.store import StoreListResponse, StoreSettingsUpdate, StoreStatusUpdate

logger = get_logger(__name__)

router = APIRouter(prefix="/stores", tags=["stores"])


@router.get("", response_model=StoreListResponse)
async def list_stores(
    owner_id: CurrentOwner,
    directory: Directory,
) -> StoreListResponse:
    """List the stores the caller owns."""
    stores = await directory.list_for_owner(owner_id)
    logger.info("Listed stores", owner_id=owner_id, count=len(stores))
    return StoreListResponse(items=stores, total=len(stores))


@router.get("/{store_id}", response_model=Store)
async def get_store(store: OwnedStore) -> Store:
    """Get one of the caller's stores."""
    return store


@router.patch("/{store_id}", response_model=Store)
async def update_store_settings(
    store: OwnedStore,
    directory: Directory,
    body: StoreSettingsUpdate,
) -> Store:
    """Update contact details, address, delivery pricing and branding."""
    return await directory.update(store, body.changes())


@router.patch("/{store_id}/status", response_model=Store)
async def update_store_status(
    store: OwnedStore,
    directory: Directory,
    body: StoreStatusUpdate,
) -> Store:
    """Open or close the store for orders, or (de)activate it."""
    updated = await directory.update(store, body.changes())
    logger.info(
        "Store status changed",
        store_id=store.id,
        is_open=updated.is_open,
        is_active=updated.is_active,
    )
    return updated
