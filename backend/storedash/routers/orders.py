"""
Order management API routes, scoped to one of the caller's stores.
"""
from typing import Optional

from fastapi import APIRouter, HTTPException, Query, status

from storedash.core.exceptions import BackendError
from storedash.core.logging import get_logger
from storedash.models.order import OrderStatus
from storedash.models.store import Store
from storedash.routers.deps import Gateway, Notifications, OwnedStore
from storedash.schemas.order import (
    NotificationResponse,
    OrderCountsResponse,
    OrderDetailResponse,
    OrderListResponse,
    OrderRowResponse,
    OrderStatusUpdate,
    StatusStepResponse,
)
from storedash.services.order_detail import DetailPhase, OrderDetailPresenter
from storedash.services.order_gateway import OrderFilter, OrderGateway
from storedash.services.order_list import project_row

logger = get_logger(__name__)

router = APIRouter(prefix="/stores/{store_id}/orders", tags=["orders"])


@router.get("", response_model=OrderListResponse)
async def list_orders(
    store: OwnedStore,
    gateway: Gateway,
    notifications: Notifications,
    status_filter: Optional[OrderStatus] = Query(None, alias="status", description="Filter by status"),
    cursor: Optional[str] = Query(None, description="Id of the last order of the previous page"),
    page_size: Optional[int] = Query(None, alias="pageSize", ge=1, le=100),
    q: Optional[str] = Query(None, description="Search by order id, customer name or phone"),
) -> OrderListResponse:
    """
    Get a page of the store's orders, newest first.

    With ``q`` the newest orders are searched instead and no cursor is
    returned.
    """
    if q and q.strip():
        page = await gateway.search_page(store.id, q, status_filter)
    else:
        page = await gateway.fetch_page(
            store.id,
            OrderFilter(status=status_filter, page_cursor=cursor),
            limit=page_size,
        )

    return OrderListResponse(
        items=[OrderRowResponse.model_validate(project_row(order)) for order in page.orders],
        total=page.total,
        next_cursor=page.next_cursor,
        page_size=page_size or gateway.page_size,
        notifications=notifications,
    )


@router.get("/counts", response_model=OrderCountsResponse)
async def get_order_counts(
    store: OwnedStore,
    gateway: Gateway,
    notifications: Notifications,
) -> OrderCountsResponse:
    """Order counts per status for the status tabs."""
    counts = await gateway.counts_by_status(store.id)
    return OrderCountsResponse(counts=counts, notifications=notifications)


def _detail_response(presenter: OrderDetailPresenter) -> OrderDetailResponse:
    return OrderDetailResponse(
        order=presenter.order,
        timeline=[StatusStepResponse.model_validate(step) for step in presenter.timeline],
        next_statuses=presenter.next_statuses(),
        cancelled=presenter.is_cancelled,
        terminal=presenter.is_terminal,
        notifications=list(presenter.notifications),
    )


async def _load_detail(store: Store, order_id: str, gateway: OrderGateway) -> OrderDetailPresenter:
    presenter = OrderDetailPresenter(gateway)
    await presenter.load(store.id, order_id)
    if presenter.phase == DetailPhase.ERROR:
        raise presenter.last_error or BackendError(presenter.error or "Failed to load order")
    return presenter


@router.get("/{order_id}", response_model=OrderDetailResponse)
async def get_order(
    order_id: str,
    store: OwnedStore,
    gateway: Gateway,
) -> OrderDetailResponse:
    """Get one order of the store with its status timeline."""
    presenter = await _load_detail(store, order_id, gateway)
    return _detail_response(presenter)


@router.patch("/{order_id}/status", response_model=OrderDetailResponse)
async def update_order_status(
    order_id: str,
    body: OrderStatusUpdate,
    store: OwnedStore,
    gateway: Gateway,
) -> OrderDetailResponse:
    """
    Change the order status.

    Any status is accepted; ``nextStatuses`` in the detail response is
    what the dashboard offers, not a server-side rule.
    """
    presenter = await _load_detail(store, order_id, gateway)
    if not await presenter.on_status_change(body.status):
        raise presenter.last_error or BackendError("Failed to update order status")

    logger.info("Order status changed", store_id=store.id, order_id=order_id, status=body.status.value)
    return _detail_response(presenter)


@router.post("/{order_id}/cancel", response_model=OrderDetailResponse)
async def cancel_order(
    order_id: str,
    store: OwnedStore,
    gateway: Gateway,
) -> OrderDetailResponse:
    """
    Cancel an order the user already confirmed cancelling.

    The returned order is re-read from the backend after the write.
    """
    presenter = await _load_detail(store, order_id, gateway)
    if presenter.actions_disabled:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Order can no longer be cancelled",
        )

    if not await presenter.on_cancel_order(confirm=lambda: True):
        raise presenter.last_error or BackendError("Failed to cancel order")
    if presenter.phase == DetailPhase.ERROR:
        raise presenter.last_error or BackendError(presenter.error or "Failed to reload order")

    logger.info("Order cancelled", store_id=store.id, order_id=order_id)
    return _detail_response(presenter)


@router.post("/{order_id}/resend-confirmation", response_model=NotificationResponse)
async def resend_confirmation(
    order_id: str,
    store: OwnedStore,
    gateway: Gateway,
) -> NotificationResponse:
    """Ask for the customer's order confirmation to be sent again."""
    presenter = await _load_detail(store, order_id, gateway)
    if not await presenter.on_resend_confirmation():
        raise BackendError(presenter.notifications[-1])
    return NotificationResponse(message=presenter.notifications[-1])
