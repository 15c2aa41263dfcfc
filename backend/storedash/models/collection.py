"""
Collection model - a named group of a store's products.
"""
from datetime import datetime
from typing import Any, Mapping

from pydantic import BaseModel, ConfigDict, Field

from storedash.core.timestamps import coerce_datetime


class Collection(BaseModel):
    id: str
    store_id: str = Field(alias="storeId")
    name: str = ""
    image_url: str = Field("", alias="imageUrl")
    created_at: datetime = Field(alias="createdAt")

    model_config = ConfigDict(populate_by_name=True)

    @classmethod
    def from_document(cls, doc_id: str, data: Mapping[str, Any]) -> "Collection":
        raw = {key: value for key, value in data.items() if value is not None}
        raw["id"] = doc_id
        raw["createdAt"] = coerce_datetime(data.get("createdAt"), field="createdAt")
        return cls.model_validate(raw)
