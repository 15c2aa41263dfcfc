"""
Order Pydantic schemas for request/response validation.
"""
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from storedash.models.order import Money, Order, OrderStatus
from storedash.services.order_detail import StepState


class OrderRowResponse(BaseModel):
    """One row of the orders table."""

    id: str
    order_number: str = Field(alias="orderNumber")
    customer_name: str = Field(alias="customerName")
    total: Money
    formatted_total: str = Field(alias="formattedTotal")
    total_items: int = Field(alias="totalItems")
    status: OrderStatus
    created_at: datetime = Field(alias="createdAt")

    model_config = ConfigDict(
        from_attributes=True,
        populate_by_name=True,
    )


class OrderListResponse(BaseModel):
    """A page of order rows.

    ``notifications`` carries transient messages, e.g. when a backend
    failure was replaced by an empty page.
    """

    items: list[OrderRowResponse]
    total: int
    next_cursor: Optional[str] = Field(None, alias="nextCursor")
    page_size: int = Field(alias="pageSize")
    notifications: list[str] = Field(default_factory=list)

    model_config = ConfigDict(populate_by_name=True)


class OrderCountsResponse(BaseModel):
    """Order counts per status plus ``all``, the five workflow statuses summed."""

    counts: dict[str, int]
    notifications: list[str] = Field(default_factory=list)


class StatusStepResponse(BaseModel):
    """One step of the status timeline."""

    status: OrderStatus
    label: str
    icon: str
    color: str
    state: StepState
    date: Optional[datetime] = None
    is_completed: bool = Field(alias="isCompleted")
    is_current: bool = Field(alias="isCurrent")
    is_active: bool = Field(alias="isActive")

    model_config = ConfigDict(
        from_attributes=True,
        populate_by_name=True,
    )


class OrderDetailResponse(BaseModel):
    """An order with everything the detail page renders."""

    order: Order
    timeline: list[StatusStepResponse]
    next_statuses: list[OrderStatus] = Field(alias="nextStatuses")
    cancelled: bool
    terminal: bool
    notifications: list[str] = Field(default_factory=list)

    model_config = ConfigDict(populate_by_name=True)


class OrderStatusUpdate(BaseModel):
    """Request body for a status change."""

    status: OrderStatus


class NotificationResponse(BaseModel):
    message: str
