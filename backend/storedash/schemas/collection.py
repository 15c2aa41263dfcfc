"""
Collection Pydantic schemas.
"""
from pydantic import BaseModel, ConfigDict, Field

from storedash.models.collection import Collection


class CollectionCreate(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    image_url: str = Field("", alias="imageUrl")

    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True)


class CollectionUpdate(BaseModel):
    """Rename a collection or change its image; owner and creation time are fixed."""

    name: str = Field(None, min_length=1, max_length=100)
    image_url: str = Field(None, alias="imageUrl")

    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True)

    def changes(self) -> dict:
        return self.model_dump(by_alias=True, exclude_unset=True)


class CollectionListResponse(BaseModel):
    items: list[Collection]
    total: int
