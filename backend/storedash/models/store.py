"""
Store model - a merchant owning orders, products and collections.
"""
from datetime import datetime
from typing import Any, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field

from storedash.core.timestamps import coerce_datetime
from storedash.models.order import Address, Money


class DeliveryTier(BaseModel):
    """Delivery fee charged up to ``maxWeight`` kilograms."""

    fee: Money
    max_weight: float = Field(alias="maxWeight")

    model_config = ConfigDict(populate_by_name=True)


class Store(BaseModel):
    """A store as selected by its owner in the dashboard."""

    id: str
    name: str = ""
    description: str = ""
    email: str = ""
    phone_number: str = Field("", alias="phoneNumber")
    address: Address = Field(default_factory=Address)
    store_owner_id: str = Field(alias="storeOwnerId")
    category_ids: list[str] = Field(default_factory=list, alias="categoryIds")
    store_types: list[str] = Field(default_factory=list, alias="storeTypes")
    tags: list[str] = Field(default_factory=list)
    is_active: bool = Field(True, alias="isActive")
    is_open: bool = Field(True, alias="isOpen")
    logo_url: Optional[str] = Field(None, alias="logoUrl")
    cover_image_url: Optional[str] = Field(None, alias="coverImageUrl")
    delivery_pricing: list[DeliveryTier] = Field(default_factory=list, alias="deliveryPricing")
    free_delivery_over: Optional[Money] = Field(None, alias="freeDeliveryOver")
    minimum_order_amount: Optional[Money] = Field(None, alias="minimumOrderAmount")
    # Platform-managed; owners cannot change these
    rating: float = 0.0
    rating_count: int = Field(0, alias="ratingCount")
    is_approved: bool = Field(False, alias="isApproved")
    is_featured: bool = Field(False, alias="isFeatured")
    created_at: datetime = Field(alias="createdAt")
    updated_at: Optional[datetime] = Field(None, alias="updatedAt")

    model_config = ConfigDict(populate_by_name=True)

    @classmethod
    def from_document(cls, doc_id: str, data: Mapping[str, Any]) -> "Store":
        raw = {key: value for key, value in data.items() if value is not None}
        raw["id"] = doc_id
        raw["createdAt"] = coerce_datetime(data.get("createdAt"), field="createdAt")
        if data.get("updatedAt") is not None:
            raw["updatedAt"] = coerce_datetime(data["updatedAt"], field="updatedAt")
        return cls.model_validate(raw)

    def __repr__(self) -> str:
        return f"<Store {self.name or self.id}>"
