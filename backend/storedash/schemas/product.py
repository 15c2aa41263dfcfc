"""
Product Pydantic schemas for request/response validation.

Update schemas give every field a ``None`` default without making it
nullable: omitted fields are left alone, explicit nulls are rejected
except where a field can be cleared.
"""
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from storedash.models.product import Product


class ProductCreate(BaseModel):
    """Fields an owner provides for a new product."""

    name: str = Field(min_length=3, max_length=200)
    description: str = Field(min_length=10)
    price: Decimal = Field(gt=0)
    discount_price: Optional[Decimal] = Field(None, ge=0, alias="discountPrice")
    category: str = Field(min_length=1)
    quantity: int = Field(1, ge=0)
    is_available: bool = Field(True, alias="isAvailable")
    weight: float = Field(0.1, gt=0)
    images: list[str] = Field(default_factory=list)
    is_featured: bool = Field(False, alias="isFeatured")
    collection_ids: list[str] = Field(default_factory=list, alias="collectionIds")

    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True)

    @model_validator(mode="after")
    def discount_below_price(self) -> "ProductCreate":
        if self.discount_price is not None and self.discount_price >= self.price:
            raise ValueError("discountPrice must be lower than price")
        return self


class ProductUpdate(BaseModel):
    """Partial product update."""

    name: str = Field(None, min_length=3, max_length=200)
    description: str = Field(None, min_length=10)
    price: Decimal = Field(None, gt=0)
    discount_price: Optional[Decimal] = Field(None, ge=0, alias="discountPrice")
    category: str = Field(None, min_length=1)
    quantity: int = Field(None, ge=0)
    is_available: bool = Field(None, alias="isAvailable")
    weight: float = Field(None, gt=0)
    images: list[str] = None
    is_featured: bool = Field(None, alias="isFeatured")
    collection_ids: list[str] = Field(None, alias="collectionIds")

    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True)

    def changes(self) -> dict:
        """Fields the caller sent, keyed by their stored names."""
        return self.model_dump(by_alias=True, exclude_unset=True)


class ProductListResponse(BaseModel):
    items: list[Product]
    total: int
