"""
Order list presenter.

Owns the pagination and filter state of the orders table. State is an
immutable ``OrderListState``; every transition goes through ``reduce`` so
the same event always produces the same state.

Only one fetch is live at a time. Scheduling a new fetch cancels the
previous task and bumps a generation counter; a result is applied only if
its generation is still current, so a slow earlier response can never
overwrite a newer one.
"""
import asyncio
from dataclasses import dataclass, field, replace
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum
from typing import Callable, Optional, Union

from storedash.core.config import settings
from storedash.core.logging import get_logger
from storedash.core.timestamps import coerce_datetime
from storedash.models.order import Order, OrderStatus
from storedash.services.order_gateway import OrderFilter, OrderGateway, OrderPage

logger = get_logger(__name__)

LOAD_ERROR_MESSAGE = "Failed to load orders. Please try again."
MISSING_STORE_MESSAGE = "Store ID is not available"

_CENT = Decimal("0.01")


def format_currency(amount: Decimal | float | int) -> str:
    """Format an amount as en-US dollars, e.g. ``$1,234.50``."""
    value = Decimal(str(amount)).quantize(_CENT, rounding=ROUND_HALF_UP)
    sign = "-" if value < 0 else ""
    return f"{sign}${abs(value):,.2f}"


@dataclass(frozen=True)
class OrderRow:
    """Display-ready projection of an order for the orders table."""

    id: str
    order_number: str
    customer_name: str
    total: Decimal
    formatted_total: str
    total_items: int
    status: OrderStatus
    created_at: datetime


def project_row(order: Order) -> OrderRow:
    """Project an order into a table row. Pure; never raises for bad dates."""
    return OrderRow(
        id=order.id,
        order_number=order.display_number,
        customer_name=order.name or "Guest",
        total=order.total,
        formatted_total=format_currency(order.total),
        total_items=order.total_items,
        status=order.status,
        created_at=coerce_datetime(order.created_at, field="createdAt"),
    )


class ListPhase(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    LOADED = "loaded"
    ERROR = "error"


@dataclass(frozen=True)
class OrderListState:
    """Everything the orders table renders from."""

    store_id: str = ""
    status: Optional[OrderStatus] = None
    search: str = ""
    page_index: int = 0
    page_size: int = 10
    # Cursor that starts each visited page; page 0 starts at None
    page_cursors: tuple[Optional[str], ...] = (None,)
    phase: ListPhase = ListPhase.IDLE
    rows: tuple[OrderRow, ...] = ()
    total: int = 0
    next_cursor: Optional[str] = None
    error: Optional[str] = None
    counts: dict[str, int] = field(default_factory=dict)

    @property
    def cursor(self) -> Optional[str]:
        if self.page_index < len(self.page_cursors):
            return self.page_cursors[self.page_index]
        return None

    @property
    def has_next_page(self) -> bool:
        return self.next_cursor is not None

    @property
    def searching(self) -> bool:
        return bool(self.search.strip())


# Events


@dataclass(frozen=True)
class StoreSelected:
    store_id: str


@dataclass(frozen=True)
class StatusFilterChanged:
    status: Optional[OrderStatus]


@dataclass(frozen=True)
class SearchChanged:
    text: str


@dataclass(frozen=True)
class PageChanged:
    page_index: int
    page_size: int


@dataclass(frozen=True)
class Refresh:
    pass


@dataclass(frozen=True)
class PageLoaded:
    rows: tuple[OrderRow, ...]
    total: int
    next_cursor: Optional[str]


@dataclass(frozen=True)
class PageFailed:
    message: str


@dataclass(frozen=True)
class CountsLoaded:
    counts: dict[str, int]


Event = Union[
    StoreSelected,
    StatusFilterChanged,
    SearchChanged,
    PageChanged,
    Refresh,
    PageLoaded,
    PageFailed,
    CountsLoaded,
]


def _first_page(state: OrderListState, **changes) -> OrderListState:
    return replace(
        state,
        page_index=0,
        page_cursors=(None,),
        next_cursor=None,
        phase=ListPhase.LOADING,
        error=None,
        **changes,
    )


def _missing_store(state: OrderListState) -> OrderListState:
    return replace(
        state,
        phase=ListPhase.ERROR,
        error=MISSING_STORE_MESSAGE,
        rows=(),
        total=0,
        next_cursor=None,
    )


def reduce(state: OrderListState, event: Event) -> OrderListState:
    """Compute the state that follows ``event``."""
    if isinstance(event, StoreSelected):
        if not event.store_id:
            return _missing_store(replace(state, store_id=""))
        return _first_page(state, store_id=event.store_id, rows=(), total=0, counts={})

    if isinstance(event, StatusFilterChanged):
        status = OrderStatus(event.status) if event.status else None
        return _first_page(state, status=status)

    if isinstance(event, SearchChanged):
        return _first_page(state, search=event.text)

    if isinstance(event, PageChanged):
        if event.page_size != state.page_size:
            return _first_page(state, page_size=event.page_size)

        target = event.page_index
        cursors = state.page_cursors
        if target == state.page_index + 1 and state.next_cursor is not None:
            cursors = cursors[:target] + (state.next_cursor,)
        elif target < 0 or target >= len(cursors):
            # No cursor known for that page
            return state
        return replace(
            state,
            page_index=target,
            page_cursors=cursors,
            phase=ListPhase.LOADING,
            error=None,
        )

    if isinstance(event, Refresh):
        if not state.store_id:
            return _missing_store(state)
        return replace(state, phase=ListPhase.LOADING, error=None)

    if isinstance(event, PageLoaded):
        return replace(
            state,
            phase=ListPhase.LOADED,
            rows=event.rows,
            total=event.total,
            next_cursor=event.next_cursor,
            error=None,
        )

    if isinstance(event, PageFailed):
        return replace(
            state,
            phase=ListPhase.ERROR,
            rows=(),
            total=0,
            next_cursor=None,
            error=event.message,
        )

    if isinstance(event, CountsLoaded):
        return replace(state, counts=dict(event.counts))

    raise TypeError(f"Unknown event {event!r}")


class OrderListPresenter:
    """Drives an ``OrderListState`` from user events and gateway results."""

    def __init__(
        self,
        gateway: OrderGateway,
        *,
        page_size: Optional[int] = None,
        debounce_ms: Optional[int] = None,
        on_change: Optional[Callable[[OrderListState], None]] = None,
    ) -> None:
        self.gateway = gateway
        self.state = OrderListState(page_size=page_size or settings.orders_page_size)
        self.debounce = (
            settings.orders_search_debounce_ms if debounce_ms is None else debounce_ms
        ) / 1000
        self.on_change = on_change

        self._generation = 0
        self._fetch_task: Optional[asyncio.Task] = None
        self._counts_generation = 0
        self._counts_task: Optional[asyncio.Task] = None
        self._closed = False

    def _apply(self, event: Event) -> OrderListState:
        previous = self.state
        self.state = reduce(previous, event)
        if self.on_change is not None and self.state is not previous:
            self.on_change(self.state)
        return self.state

    def dispatch(self, event: Event) -> Optional[asyncio.Task]:
        """
        Apply a user event and schedule the fetch it implies.

        Returns the scheduled fetch task, if any.
        """
        if self._closed:
            return None

        previous = self.state
        state = self._apply(event)

        if state.phase != ListPhase.LOADING or state is previous:
            return None

        if isinstance(event, StoreSelected):
            self.refresh_counts()
            return self._schedule(delay=0)
        if isinstance(event, (StatusFilterChanged, SearchChanged)):
            return self._schedule(delay=self.debounce)
        return self._schedule(delay=0)

    # Convenience wrappers

    def select_store(self, store_id: str) -> Optional[asyncio.Task]:
        return self.dispatch(StoreSelected(store_id))

    def set_status(self, status: Optional[OrderStatus]) -> Optional[asyncio.Task]:
        return self.dispatch(StatusFilterChanged(status))

    def set_search(self, text: str) -> Optional[asyncio.Task]:
        return self.dispatch(SearchChanged(text))

    def change_page(self, page_index: int, page_size: Optional[int] = None) -> Optional[asyncio.Task]:
        return self.dispatch(PageChanged(page_index, page_size or self.state.page_size))

    def refresh(self) -> Optional[asyncio.Task]:
        return self.dispatch(Refresh())

    def _cancel_fetch(self) -> None:
        if self._fetch_task is not None and not self._fetch_task.done():
            self._fetch_task.cancel()

    def _schedule(self, delay: float) -> asyncio.Task:
        self._cancel_fetch()
        self._generation += 1
        self._fetch_task = asyncio.get_running_loop().create_task(
            self._load(self._generation, delay)
        )
        return self._fetch_task

    def _is_current(self, generation: int) -> bool:
        return not self._closed and generation == self._generation

    async def _fetch(self, state: OrderListState) -> OrderPage:
        if state.searching:
            return await self.gateway.search_page(state.store_id, state.search, state.status)
        return await self.gateway.fetch_page(
            state.store_id,
            OrderFilter(status=state.status, page_cursor=state.cursor),
            limit=state.page_size,
        )

    async def _load(self, generation: int, delay: float) -> None:
        if delay > 0:
            await asyncio.sleep(delay)

        state = self.state
        try:
            page = await self._fetch(state)
        except Exception as e:
            if not self._is_current(generation):
                return
            logger.error(
                "Error loading orders",
                store_id=state.store_id,
                error=str(e),
            )
            self._apply(PageFailed(LOAD_ERROR_MESSAGE))
            return

        if not self._is_current(generation):
            logger.debug("Discarding superseded orders page", generation=generation)
            return

        self._apply(
            PageLoaded(
                rows=tuple(project_row(order) for order in page.orders),
                total=page.total,
                next_cursor=page.next_cursor,
            )
        )

    def refresh_counts(self) -> Optional[asyncio.Task]:
        """Reload tab counts, independently of the page fetch."""
        if self._closed or not self.state.store_id:
            return None
        if self._counts_task is not None and not self._counts_task.done():
            self._counts_task.cancel()
        self._counts_generation += 1
        self._counts_task = asyncio.get_running_loop().create_task(
            self._load_counts(self._counts_generation, self.state.store_id)
        )
        return self._counts_task

    async def _load_counts(self, generation: int, store_id: str) -> None:
        counts = await self.gateway.counts_by_status(store_id)
        if self._closed or generation != self._counts_generation:
            return
        self._apply(CountsLoaded(counts))

    async def settle(self) -> OrderListState:
        """Wait until no fetch is pending and return the resulting state."""
        while True:
            pending = {
                task
                for task in (self._fetch_task, self._counts_task)
                if task is not None and not task.done()
            }
            if not pending:
                return self.state
            await asyncio.wait(pending)

    def close(self) -> None:
        """Tear down: cancel outstanding work; no state changes afterwards."""
        self._closed = True
        self._cancel_fetch()
        if self._counts_task is not None and not self._counts_task.done():
            self._counts_task.cancel()
