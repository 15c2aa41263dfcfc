"""
Product catalog of a store.

Every operation is scoped to a store: a product of another store is
reported as not found, exactly like a missing one.
"""
import uuid
from decimal import Decimal
from typing import Iterable, Optional

from pydantic import ValidationError as PydanticValidationError

from storedash.core.config import settings
from storedash.core.exceptions import (
    CollectionNotFoundError,
    InvalidChangeError,
    ProductNotFoundError,
)
from storedash.core.logging import get_logger
from storedash.core.timestamps import MonotonicClock
from storedash.models.product import Product
from storedash.repositories.base import Document, DocumentStore
from storedash.schemas.product import ProductCreate, ProductUpdate

logger = get_logger(__name__)


def matches_product_search(product: Product, text: str) -> bool:
    """Case-insensitive substring match on name and description."""
    needle = text.strip().lower()
    if not needle:
        return True
    return needle in product.name.lower() or needle in product.description.lower()


class ProductCatalog:
    """Create, read, update and delete a store's products."""

    def __init__(
        self,
        store: DocumentStore,
        *,
        collection: Optional[str] = None,
        collections_collection: Optional[str] = None,
        clock: Optional[MonotonicClock] = None,
    ) -> None:
        self.store = store
        self.collection = collection or settings.products_collection
        self.collections_collection = collections_collection or settings.collections_collection
        self.clock = clock or MonotonicClock()

    @staticmethod
    def _to_product(doc: Document) -> Optional[Product]:
        try:
            return Product.from_document(doc.id, doc.data)
        except PydanticValidationError as e:
            logger.warning("Skipping malformed product", product_id=doc.id, error=str(e))
            return None

    async def list_for_store(
        self,
        store_id: str,
        *,
        collection_id: Optional[str] = None,
        category: Optional[str] = None,
        search: Optional[str] = None,
    ) -> list[Product]:
        """A store's products, newest first, optionally filtered."""
        docs = await self.store.query_equal(
            self.collection,
            [("storeId", store_id)],
            order_by="createdAt",
            direction="desc",
            limit=settings.catalog_list_limit,
        )
        products = [p for p in map(self._to_product, docs) if p is not None]
        if collection_id:
            products = [p for p in products if collection_id in p.collection_ids]
        if category:
            products = [p for p in products if p.category == category]
        if search:
            products = [p for p in products if matches_product_search(p, search)]
        return products

    async def get(self, store_id: str, product_id: str) -> Product:
        if not store_id or not product_id:
            raise ProductNotFoundError()
        doc = await self.store.get_by_id(self.collection, product_id)
        product = self._to_product(doc) if doc is not None else None
        if product is None or product.store_id != store_id:
            raise ProductNotFoundError()
        return product

    async def _check_collections(self, store_id: str, collection_ids: Iterable[str]) -> None:
        for collection_id in collection_ids:
            doc = await self.store.get_by_id(self.collections_collection, collection_id)
            if doc is None or doc.data.get("storeId") != store_id:
                logger.warning(
                    "Unknown collection on product",
                    store_id=store_id,
                    collection_id=collection_id,
                )
                raise CollectionNotFoundError()

    async def create(self, store_id: str, data: ProductCreate) -> Product:
        await self._check_collections(store_id, data.collection_ids)

        product_id = uuid.uuid4().hex
        now = self.clock.now()
        record = {
            **data.model_dump(by_alias=True),
            "storeId": store_id,
            "createdAt": now,
            "updatedAt": now,
        }
        await self.store.put(self.collection, product_id, record)

        logger.info("Product created", store_id=store_id, product_id=product_id)
        return Product.from_document(product_id, record)

    async def update(self, store_id: str, product_id: str, data: ProductUpdate) -> Product:
        """Apply a partial update; the merged product must stay valid."""
        current = await self.get(store_id, product_id)
        changes = data.changes()
        if not changes:
            return current

        price = Decimal(str(changes.get("price", current.price)))
        discount = changes.get("discountPrice", current.discount_price)
        if discount is not None and Decimal(str(discount)) >= price:
            raise InvalidChangeError("discountPrice must be lower than price")
        if "collectionIds" in changes:
            await self._check_collections(store_id, changes["collectionIds"])

        changes["updatedAt"] = self.clock.now()
        await self.store.update_fields(self.collection, product_id, changes)

        logger.info(
            "Product updated",
            store_id=store_id,
            product_id=product_id,
            fields=sorted(changes),
        )
        return await self.get(store_id, product_id)

    async def delete(self, store_id: str, product_id: str) -> None:
        await self.get(store_id, product_id)
        await self.store.delete(self.collection, product_id)
        logger.info("Product deleted", store_id=store_id, product_id=product_id)
