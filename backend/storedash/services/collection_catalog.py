"""
Product collections of a store.
"""
import uuid
from typing import Optional

from pydantic import ValidationError as PydanticValidationError

from storedash.core.config import settings
from storedash.core.exceptions import CollectionNotFoundError
from storedash.core.logging import get_logger
from storedash.core.timestamps import MonotonicClock
from storedash.models.collection import Collection
from storedash.repositories.base import Document, DocumentStore
from storedash.schemas.collection import CollectionCreate, CollectionUpdate

logger = get_logger(__name__)


class CollectionCatalog:
    """
    Store-scoped collection management.

    Deleting a collection also removes it from the ``collectionIds`` of
    the store's products.
    """

    def __init__(
        self,
        store: DocumentStore,
        *,
        collection: Optional[str] = None,
        products_collection: Optional[str] = None,
        clock: Optional[MonotonicClock] = None,
    ) -> None:
        self.store = store
        self.collection = collection or settings.collections_collection
        self.products_collection = products_collection or settings.products_collection
        self.clock = clock or MonotonicClock()

    @staticmethod
    def _to_collection(doc: Document) -> Optional[Collection]:
        try:
            return Collection.from_document(doc.id, doc.data)
        except PydanticValidationError as e:
            logger.warning("Skipping malformed collection", collection_id=doc.id, error=str(e))
            return None

    async def list_for_store(self, store_id: str) -> list[Collection]:
        """A store's collections, newest first."""
        docs = await self.store.query_equal(
            self.collection,
            [("storeId", store_id)],
            order_by="createdAt",
            direction="desc",
            limit=settings.catalog_list_limit,
        )
        return [c for c in map(self._to_collection, docs) if c is not None]

    async def get(self, store_id: str, collection_id: str) -> Collection:
        if not store_id or not collection_id:
            raise CollectionNotFoundError()
        doc = await self.store.get_by_id(self.collection, collection_id)
        found = self._to_collection(doc) if doc is not None else None
        if found is None or found.store_id != store_id:
            raise CollectionNotFoundError()
        return found

    async def create(self, store_id: str, data: CollectionCreate) -> Collection:
        collection_id = uuid.uuid4().hex
        record = {
            **data.model_dump(by_alias=True),
            "storeId": store_id,
            "createdAt": self.clock.now(),
        }
        await self.store.put(self.collection, collection_id, record)

        logger.info("Collection created", store_id=store_id, collection_id=collection_id)
        return Collection.from_document(collection_id, record)

    async def update(
        self,
        store_id: str,
        collection_id: str,
        data: CollectionUpdate,
    ) -> Collection:
        current = await self.get(store_id, collection_id)
        changes = data.changes()
        if not changes:
            return current
        await self.store.update_fields(self.collection, collection_id, changes)
        logger.info("Collection updated", store_id=store_id, collection_id=collection_id)
        return await self.get(store_id, collection_id)

    async def delete(self, store_id: str, collection_id: str) -> None:
        await self.get(store_id, collection_id)

        members = await self.store.query_equal(
            self.products_collection,
            [("storeId", store_id)],
            order_by="createdAt",
            direction="desc",
            limit=settings.catalog_list_limit,
        )
        detached = 0
        for doc in members:
            ids = doc.data.get("collectionIds") or []
            if collection_id in ids:
                await self.store.update_fields(
                    self.products_collection,
                    doc.id,
                    {
                        "collectionIds": [i for i in ids if i != collection_id],
                        "updatedAt": self.clock.now(),
                    },
                )
                detached += 1

        await self.store.delete(self.collection, collection_id)
        logger.info(
            "Collection deleted",
            store_id=store_id,
            collection_id=collection_id,
            detached_products=detached,
        )
