"""
Product collection API routes, scoped to one of the caller's stores.
"""
from fastapi import APIRouter, Response, status

from storedash.models.collection import Collection
from storedash.routers.deps import Collections, OwnedStore
from storedash.schemas.collection import (
    CollectionCreate,
    CollectionListResponse,
    CollectionUpdate,
)

router = APIRouter(prefix="/stores/{store_id}/collections", tags=["collections"])


@router.get("", response_model=CollectionListResponse)
async def list_collections(store: OwnedStore, catalog: Collections) -> CollectionListResponse:
    """List the store's collections, newest first."""
    collections = await catalog.list_for_store(store.id)
    return CollectionListResponse(items=collections, total=len(collections))


@router.post("", response_model=Collection, status_code=status.HTTP_201_CREATED)
async def create_collection(
    store: OwnedStore,
    catalog: Collections,
    body: CollectionCreate,
) -> Collection:
    return await catalog.create(store.id, body)


@router.get("/{collection_id}", response_model=Collection)
async def get_collection(store: OwnedStore, catalog: Collections, collection_id: str) -> Collection:
    return await catalog.get(store.id, collection_id)


@router.patch("/{collection_id}", response_model=Collection)
async def update_collection(
    store: OwnedStore,
    catalog: Collections,
    collection_id: str,
    body: CollectionUpdate,
) -> Collection:
    return await catalog.update(store.id, collection_id, body)


@router.delete("/{collection_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_collection(store: OwnedStore, catalog: Collections, collection_id: str) -> Response:
    """Delete a collection and detach it from the store's products."""
    await catalog.delete(store.id, collection_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
