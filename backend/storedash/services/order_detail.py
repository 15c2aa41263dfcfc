"""
Order detail presenter.

Loads one order scoped to a store, builds its status timeline and issues
status changes. Local state only changes after the backend confirmed a
write; cancellation additionally reloads the whole order.
"""
import asyncio
import inspect
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Awaitable, Callable, Optional, Union

from storedash.core.exceptions import NotFoundError
from storedash.core.logging import get_logger
from storedash.models.order import (
    ORDER_WORKFLOW,
    TERMINAL_STATUSES,
    Order,
    OrderStatus,
    status_label,
)
from storedash.services.order_gateway import OrderGateway

logger = get_logger(__name__)

STATUS_ICONS: dict[OrderStatus, str] = {
    OrderStatus.PENDING: "schedule",
    OrderStatus.CONFIRMED: "check_circle",
    OrderStatus.PREPARING: "autorenew",
    OrderStatus.READY: "local_shipping",
    OrderStatus.DELIVERED: "done_all",
    OrderStatus.CANCELLED: "cancel",
}

STATUS_COLORS: dict[OrderStatus, str] = {
    OrderStatus.PENDING: "accent",
    OrderStatus.CONFIRMED: "primary",
    OrderStatus.PREPARING: "accent",
    OrderStatus.READY: "primary",
    OrderStatus.DELIVERED: "success",
    OrderStatus.CANCELLED: "warn",
}

MISSING_IDS_MESSAGE = "Store ID and Order ID are required"
MISSING_ROUTE_MESSAGE = "Store ID or Order ID is missing"
NOT_FOUND_MESSAGE = "Order not found or does not belong to this store"
LOAD_FAILED_MESSAGE = "Failed to load order details"
STATUS_FAILED_MESSAGE = "Failed to update order status"
CANCEL_FAILED_MESSAGE = "Failed to cancel order. Please try again."
CANCELLED_MESSAGE = "Order has been cancelled"
RESENT_MESSAGE = "Order confirmation has been resent"
RESEND_FAILED_MESSAGE = "Failed to resend confirmation. Please try again."

Confirm = Callable[[], Union[bool, Awaitable[bool]]]


class DetailPhase(str, Enum):
    LOADING = "loading"
    LOADED = "loaded"
    ERROR = "error"


class StepState(str, Enum):
    COMPLETED = "completed"
    CURRENT = "current"
    UPCOMING = "upcoming"


@dataclass(frozen=True)
class StatusStep:
    """One step of the fulfillment timeline."""

    status: OrderStatus
    label: str
    icon: str
    color: str
    state: StepState
    date: Optional[datetime] = None

    @property
    def is_completed(self) -> bool:
        return self.state == StepState.COMPLETED

    @property
    def is_current(self) -> bool:
        return self.state == StepState.CURRENT

    @property
    def is_active(self) -> bool:
        return self.state != StepState.UPCOMING


def build_timeline(status: OrderStatus, updated_at: Optional[datetime] = None) -> tuple[StatusStep, ...]:
    """
    Five workflow steps marked relative to ``status``.

    A cancelled order is not on the workflow, so every step is upcoming.
    """
    current = ORDER_WORKFLOW.index(status) if status in ORDER_WORKFLOW else -1
    steps = []
    for index, step_status in enumerate(ORDER_WORKFLOW):
        if current < 0 or index > current:
            state = StepState.UPCOMING
        elif index < current:
            state = StepState.COMPLETED
        else:
            state = StepState.CURRENT
        steps.append(
            StatusStep(
                status=step_status,
                label=status_label(step_status),
                icon=STATUS_ICONS[step_status],
                color=STATUS_COLORS[step_status],
                state=state,
                date=updated_at if state == StepState.CURRENT else None,
            )
        )
    return tuple(steps)


def next_statuses(status: OrderStatus) -> list[OrderStatus]:
    """Workflow statuses after ``status``; empty when off the workflow."""
    if status not in ORDER_WORKFLOW:
        return []
    return list(ORDER_WORKFLOW[ORDER_WORKFLOW.index(status) + 1:])


class OrderDetailPresenter:
    """View model for a single order page."""

    def __init__(self, gateway: OrderGateway) -> None:
        self.gateway = gateway

        self.phase = DetailPhase.LOADING
        self.error: Optional[str] = None
        self.order: Optional[Order] = None
        self.timeline: tuple[StatusStep, ...] = ()
        self.status_update_loading = False
        self.notifications: list[str] = []
        # Exception behind the most recent failed load or write
        self.last_error: Optional[Exception] = None

        self.store_id = ""
        self.order_id = ""

        self._generation = 0
        self._load_task: Optional[asyncio.Task] = None
        self._closed = False

    # Derived state

    @property
    def is_cancelled(self) -> bool:
        return self.order is not None and self.order.status == OrderStatus.CANCELLED

    @property
    def is_terminal(self) -> bool:
        return self.order is not None and self.order.status in TERMINAL_STATUSES

    @property
    def actions_disabled(self) -> bool:
        return self.order is None or self.is_terminal

    def next_statuses(self) -> list[OrderStatus]:
        if self.order is None:
            return []
        return next_statuses(self.order.status)

    def _notify(self, message: str) -> None:
        self.notifications.append(message)

    def _fail(self, message: str) -> None:
        self.phase = DetailPhase.ERROR
        self.error = message

    # Loading

    async def route_changed(self, store_id: str, order_id: str) -> None:
        """Reload when the route points at a different order."""
        if not store_id or not order_id:
            self._fail(MISSING_ROUTE_MESSAGE)
            return
        if store_id != self.store_id or order_id != self.order_id:
            await self.load(store_id, order_id)

    async def load(self, store_id: str, order_id: str) -> None:
        """(Re)load the order, superseding any load still in flight."""
        if self._closed:
            return
        if not store_id or not order_id:
            self._fail(MISSING_IDS_MESSAGE)
            return

        self.phase = DetailPhase.LOADING
        self.error = None
        self.last_error = None
        self.store_id = store_id
        self.order_id = order_id

        if self._load_task is not None and not self._load_task.done():
            self._load_task.cancel()
        self._generation += 1
        task = asyncio.get_running_loop().create_task(
            self._fetch(self._generation, store_id, order_id)
        )
        self._load_task = task
        await asyncio.wait({task})

    async def _fetch(self, generation: int, store_id: str, order_id: str) -> None:
        try:
            order = await self.gateway.fetch_one(store_id, order_id)
        except NotFoundError as e:
            if self._is_current(generation):
                self.last_error = e
                logger.warning("Order not found", store_id=store_id, order_id=order_id)
                self.order = None
                self._fail(NOT_FOUND_MESSAGE)
            return
        except Exception as e:
            if self._is_current(generation):
                self.last_error = e
                logger.error("Error loading order", order_id=order_id, error=str(e))
                self._fail(LOAD_FAILED_MESSAGE)
            return

        if not self._is_current(generation):
            return

        self.order = order
        self.timeline = build_timeline(order.status, order.updated_at)
        self.phase = DetailPhase.LOADED
        self.error = None

    def _is_current(self, generation: int) -> bool:
        return not self._closed and generation == self._generation

    def _still_showing(self, order_id: str, generation: int) -> bool:
        return (
            self._is_current(generation)
            and self.order is not None
            and self.order.id == order_id
        )

    # Mutations

    async def on_status_change(self, new_status: OrderStatus) -> bool:
        """
        Write a new status. The local order is only updated once the write
        succeeded, and only if the page still shows the order that was
        written. Workflow order is not enforced.
        """
        if self.order is None or self.status_update_loading:
            return False

        new_status = OrderStatus(new_status)
        order_id = self.order.id
        generation = self._generation
        self.status_update_loading = True
        try:
            updated_at = await self.gateway.update_status(order_id, new_status)
        except Exception as e:
            self.last_error = e
            logger.error(
                "Error updating order status",
                order_id=order_id,
                status=new_status.value,
                error=str(e),
            )
            self._notify(STATUS_FAILED_MESSAGE)
            return False
        finally:
            self.status_update_loading = False

        if not self._still_showing(order_id, generation):
            logger.info(
                "Order changed during status update",
                order_id=order_id,
                showing=self.order_id,
            )
            return True

        self.order = self.order.model_copy(
            update={"status": new_status, "updated_at": updated_at}
        )
        self.timeline = build_timeline(new_status, updated_at)
        self._notify(f"Order status updated to {new_status.value}")
        return True

    async def on_cancel_order(self, confirm: Confirm) -> bool:
        """
        Cancel after interactive confirmation, then reload the order from the
        backend instead of patching it locally.
        """
        if self.actions_disabled:
            return False

        order_id = self.order.id
        generation = self._generation
        answer = confirm()
        if inspect.isawaitable(answer):
            answer = await answer
        if not answer or not self._still_showing(order_id, generation):
            return False

        try:
            await self.gateway.update_status(order_id, OrderStatus.CANCELLED)
        except Exception as e:
            self.last_error = e
            logger.error("Error cancelling order", order_id=order_id, error=str(e))
            self._notify(CANCEL_FAILED_MESSAGE)
            return False

        self._notify(CANCELLED_MESSAGE)
        if self._still_showing(order_id, generation):
            await self.load(self.store_id, order_id)
        return True

    async def on_resend_confirmation(self) -> bool:
        if not self.order_id:
            return False
        try:
            await self.gateway.resend_confirmation(self.order_id)
        except Exception as e:
            logger.error("Error resending confirmation", order_id=self.order_id, error=str(e))
            self._notify(RESEND_FAILED_MESSAGE)
            return False
        self._notify(RESENT_MESSAGE)
        return True

    def close(self) -> None:
        self._closed = True
        if self._load_task is not None and not self._load_task.done():
            self._load_task.cancel()
