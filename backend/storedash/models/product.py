"""
Product model - an item a store sells.
"""
from datetime import datetime
from typing import Any, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field

from storedash.core.timestamps import coerce_datetime
from storedash.models.order import Money


class Product(BaseModel):
    """A product listed by one store."""

    id: str
    store_id: str = Field(alias="storeId")
    name: str = ""
    description: str = ""
    price: Money
    discount_price: Optional[Money] = Field(None, alias="discountPrice")
    images: list[str] = Field(default_factory=list)
    category: Optional[str] = None
    quantity: int = 0
    is_available: bool = Field(True, alias="isAvailable")
    weight: float = 0.0
    is_featured: bool = Field(False, alias="isFeatured")
    collection_ids: list[str] = Field(default_factory=list, alias="collectionIds")
    created_at: datetime = Field(alias="createdAt")
    updated_at: datetime = Field(alias="updatedAt")

    model_config = ConfigDict(populate_by_name=True)

    @classmethod
    def from_document(cls, doc_id: str, data: Mapping[str, Any]) -> "Product":
        raw = {key: value for key, value in data.items() if value is not None}
        raw["id"] = doc_id
        created_at = coerce_datetime(data.get("createdAt"), field="createdAt")
        raw["createdAt"] = created_at
        raw["updatedAt"] = (
            coerce_datetime(data["updatedAt"], field="updatedAt")
            if data.get("updatedAt") is not None
            else created_at
        )
        return cls.model_validate(raw)

    def __repr__(self) -> str:
        return f"<Product {self.name or self.id}>"
