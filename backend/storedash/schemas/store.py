"""
Store Pydantic schemas.
"""
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from storedash.models.order import Address
from storedash.models.store import DeliveryTier, Store


class StoreListResponse(BaseModel):
    """Stores the caller may select."""

    items: list[Store]
    total: int


class StoreSettingsUpdate(BaseModel):
    """
    Owner-editable store settings.

    Omitted fields are left unchanged. Logo, cover image and the two
    delivery thresholds can be cleared with an explicit null.
    """

    name: str = Field(None, min_length=1, max_length=100)
    description: str = None
    email: str = Field(None, pattern=r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
    phone_number: str = Field(None, alias="phoneNumber")
    address: Address = None
    category_ids: list[str] = Field(None, alias="categoryIds")
    store_types: list[str] = Field(None, alias="storeTypes")
    tags: list[str] = None
    logo_url: Optional[str] = Field(None, alias="logoUrl")
    cover_image_url: Optional[str] = Field(None, alias="coverImageUrl")
    delivery_pricing: list[DeliveryTier] = Field(None, alias="deliveryPricing")
    free_delivery_over: Optional[Decimal] = Field(None, ge=0, alias="freeDeliveryOver")
    minimum_order_amount: Optional[Decimal] = Field(None, ge=0, alias="minimumOrderAmount")

    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True)

    def changes(self) -> dict:
        return self.model_dump(by_alias=True, exclude_unset=True)


class StoreStatusUpdate(BaseModel):
    """Open/closed for orders and active/inactive on the platform."""

    is_open: bool = Field(None, alias="isOpen")
    is_active: bool = Field(None, alias="isActive")

    model_config = ConfigDict(populate_by_name=True)

    @model_validator(mode="after")
    def at_least_one_flag(self) -> "StoreStatusUpdate":
        if not self.model_fields_set:
            raise ValueError("isOpen or isActive is required")
        return self

    def changes(self) -> dict:
        return self.model_dump(by_alias=True, exclude_unset=True)
