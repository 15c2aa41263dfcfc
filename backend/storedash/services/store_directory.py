"""
Store lookups for store selection and the store guard, plus the
owner-facing settings writes.
"""
from typing import Any, Optional

from pydantic import ValidationError as PydanticValidationError

from storedash.core.config import settings
from storedash.core.exceptions import StoreNotFoundError
from storedash.core.logging import get_logger
from storedash.core.timestamps import MonotonicClock
from storedash.models.store import Store
from storedash.repositories.base import Document, DocumentStore

logger = get_logger(__name__)

MAX_STORES_PER_OWNER = 100


class StoreDirectory:
    """Stores visible to a store owner."""

    def __init__(
        self,
        store: DocumentStore,
        *,
        collection: Optional[str] = None,
        clock: Optional[MonotonicClock] = None,
    ) -> None:
        self.store = store
        self.collection = collection or settings.stores_collection
        self.clock = clock or MonotonicClock()

    @staticmethod
    def _to_store(doc: Document) -> Optional[Store]:
        try:
            return Store.from_document(doc.id, doc.data)
        except PydanticValidationError as e:
            logger.warning("Skipping malformed store", store_id=doc.id, error=str(e))
            return None

    async def list_for_owner(self, owner_id: str) -> list[Store]:
        """Stores whose ``storeOwnerId`` is ``owner_id``, by name."""
        if not owner_id:
            return []
        docs = await self.store.query_equal(
            self.collection,
            [("storeOwnerId", owner_id)],
            order_by="name",
            direction="asc",
            limit=MAX_STORES_PER_OWNER,
        )
        return [store for store in map(self._to_store, docs) if store is not None]

    async def get(self, store_id: str) -> Store:
        if not store_id:
            raise StoreNotFoundError()
        doc = await self.store.get_by_id(self.collection, store_id)
        store = self._to_store(doc) if doc is not None else None
        if store is None:
            raise StoreNotFoundError()
        return store

    async def get_owned(self, store_id: str, owner_id: str) -> Store:
        """Fetch a store the owner may manage; foreign stores are not found."""
        store = await self.get(store_id)
        if store.store_owner_id != owner_id:
            logger.warning("Store access denied", store_id=store_id, owner_id=owner_id)
            raise StoreNotFoundError()
        return store

    async def update(self, store: Store, changes: dict[str, Any]) -> Store:
        """
        Merge ``changes`` (stored field names) into an owned store and stamp
        ``updatedAt``. The result is re-read from the backend.
        """
        if not changes:
            return store
        fields = {**changes, "updatedAt": self.clock.now()}
        await self.store.update_fields(self.collection, store.id, fields)
        logger.info("Store updated", store_id=store.id, fields=sorted(changes))
        return await self.get(store.id)
