"""
Order model - one checkout transaction placed against a store.

Backend records are untyped; ``parse_order`` is the only way they become
``Order`` instances.
"""
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Annotated, Any, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, PlainSerializer, computed_field
from pydantic import ValidationError as PydanticValidationError

from storedash.core.exceptions import OrderParseError
from storedash.core.logging import get_logger
from storedash.core.timestamps import coerce_datetime

logger = get_logger(__name__)

# Decimal in Python, plain number on the wire
Money = Annotated[Decimal, PlainSerializer(float, return_type=float, when_used="json")]


class OrderStatus(str, Enum):
    """Fulfillment status of an order."""

    PENDING = "pending"
    CONFIRMED = "confirmed"
    PREPARING = "preparing"
    READY = "ready"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


class PaymentStatus(str, Enum):
    """Payment status, independent of fulfillment."""

    PENDING = "pending"
    PAID = "paid"
    FAILED = "failed"
    REFUNDED = "refunded"


class PaymentMethod(str, Enum):
    STRIPE = "stripe"
    CASH = "cash"
    CARD = "card"
    MOBILE_MONEY = "mobile_money"


# Forward-moving fulfillment workflow; cancelled is a side exit.
ORDER_WORKFLOW: tuple[OrderStatus, ...] = (
    OrderStatus.PENDING,
    OrderStatus.CONFIRMED,
    OrderStatus.PREPARING,
    OrderStatus.READY,
    OrderStatus.DELIVERED,
)

TERMINAL_STATUSES = frozenset({OrderStatus.DELIVERED, OrderStatus.CANCELLED})

STATUS_LABELS: dict[OrderStatus, str] = {
    OrderStatus.PENDING: "Pending",
    OrderStatus.CONFIRMED: "Confirmed",
    OrderStatus.PREPARING: "Preparing",
    OrderStatus.READY: "Ready for Pickup",
    OrderStatus.DELIVERED: "Delivered",
    OrderStatus.CANCELLED: "Cancelled",
}


def status_label(status: OrderStatus | str) -> str:
    """Human readable label for a status value."""
    try:
        return STATUS_LABELS[OrderStatus(status)]
    except ValueError:
        return str(status)


class Address(BaseModel):
    """Delivery address snapshot."""

    street: str = ""
    city: str = ""
    postal_code: str = Field("", alias="postalCode")
    country: str = ""
    label: Optional[str] = None

    model_config = ConfigDict(populate_by_name=True)


class OrderItem(BaseModel):
    """Line item of an order."""

    product_id: str = Field("", alias="productId")
    store_id: Optional[str] = Field(None, alias="storeId")
    name: str = ""
    image_url: Optional[str] = Field(None, alias="imageUrl")
    price: Money = Field(Decimal("0"), ge=0)
    weight: Money = Field(Decimal("0"), ge=0)
    quantity: int = Field(0, ge=0)

    model_config = ConfigDict(populate_by_name=True)

    @computed_field(alias="totalPrice")  # type: ignore[prop-decorator]
    @property
    def total_price(self) -> Money:
        return self.price * self.quantity

    @computed_field(alias="totalWeight")  # type: ignore[prop-decorator]
    @property
    def total_weight(self) -> Money:
        return self.weight * self.quantity


class Order(BaseModel):
    """A typed order, scoped to exactly one store."""

    id: str = Field(min_length=1)
    store_id: str = Field(alias="storeId", min_length=1)
    user_id: str = Field("", alias="userId")

    items: list[OrderItem] = Field(default_factory=list)

    subtotal: Money = Field(Decimal("0"), ge=0)
    delivery_fee: Money = Field(Decimal("0"), ge=0, alias="deliveryFee")
    total: Money = Field(Decimal("0"), ge=0)
    total_weight: Money = Field(Decimal("0"), ge=0, alias="totalWeight")

    status: OrderStatus = OrderStatus.PENDING
    payment_status: PaymentStatus = Field(PaymentStatus.PENDING, alias="paymentStatus")
    payment_method: PaymentMethod = Field(PaymentMethod.CASH, alias="paymentMethod")

    # Customer snapshot
    name: str = ""
    phone: str = ""
    address: Address = Field(default_factory=Address)
    order_note: str = Field("", alias="orderNote")
    order_number: Optional[str] = Field(None, alias="orderNumber")

    created_at: datetime = Field(alias="createdAt")
    updated_at: datetime = Field(alias="updatedAt")

    model_config = ConfigDict(populate_by_name=True)

    @property
    def total_items(self) -> int:
        return sum(item.quantity for item in self.items)

    @property
    def display_number(self) -> str:
        """Short display number derived from the document id."""
        return f"#{self.id[:8].upper()}"

    def __repr__(self) -> str:
        return f"<Order {self.display_number} store={self.store_id}>"


_STRING_FIELDS = ("userId", "name", "phone", "orderNote")
_MONEY_FIELDS = ("subtotal", "deliveryFee", "total", "totalWeight")


def _coerce_choice(
    enum_cls: type[Enum],
    value: Any,
    default: Enum,
    *,
    doc_id: str,
    field: str,
) -> Enum:
    if value is None or value == "":
        return default
    try:
        return enum_cls(value)
    except ValueError:
        logger.warning(
            "Unknown enum value, using default",
            order_id=doc_id,
            field=field,
            value=value,
            default=default.value,
        )
        return default


def parse_order(doc_id: str, data: Any) -> Order:
    """
    Build an Order from a raw backend record.

    Missing optional fields get safe defaults, unknown status values fall
    back to their defaults and unparseable timestamps fall back to now.
    Raises OrderParseError when the record cannot be represented.
    """
    if not isinstance(data, Mapping):
        raise OrderParseError(doc_id, f"expected a mapping, got {type(data).__name__}")

    raw = dict(data)
    raw["id"] = doc_id

    store_id = raw.get("storeId")
    if not store_id:
        raise OrderParseError(doc_id, "missing storeId")
    raw["storeId"] = str(store_id)

    for field in _STRING_FIELDS:
        value = raw.get(field)
        raw[field] = "" if value is None else str(value)

    for field in _MONEY_FIELDS:
        if raw.get(field) is None:
            raw[field] = 0

    if raw.get("orderNumber") is not None:
        raw["orderNumber"] = str(raw["orderNumber"])

    items = raw.get("items")
    if items is None:
        raw["items"] = []
    elif isinstance(items, list):
        # Missing line item values fall back to the item defaults
        raw["items"] = [
            {key: value for key, value in item.items() if value is not None}
            if isinstance(item, Mapping) else item
            for item in items
        ]
    address = raw.get("address")
    if address is None:
        raw["address"] = {}
    elif isinstance(address, Mapping):
        raw["address"] = {key: value for key, value in address.items() if value is not None}

    raw["status"] = _coerce_choice(
        OrderStatus, raw.get("status"), OrderStatus.PENDING,
        doc_id=doc_id, field="status",
    )
    raw["paymentStatus"] = _coerce_choice(
        PaymentStatus, raw.get("paymentStatus"), PaymentStatus.PENDING,
        doc_id=doc_id, field="paymentStatus",
    )
    raw["paymentMethod"] = _coerce_choice(
        PaymentMethod, raw.get("paymentMethod"), PaymentMethod.CASH,
        doc_id=doc_id, field="paymentMethod",
    )

    raw["createdAt"] = coerce_datetime(raw.get("createdAt"), field="createdAt")
    raw["updatedAt"] = coerce_datetime(raw.get("updatedAt"), field="updatedAt")

    try:
        return Order.model_validate(raw)
    except PydanticValidationError as e:
        reasons = "; ".join(
            f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()
        )
        raise OrderParseError(doc_id, reasons) from e
