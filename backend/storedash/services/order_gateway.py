"""
Order query gateway.

Translates dashboard filter state (store, status, search text, page cursor)
into document store queries and turns the returned records into typed
orders.

A page and its total are two separate round trips. If orders change in
between, ``total`` may disagree with the page contents; callers accept
that rather than paying for a transaction.
"""
import asyncio
from dataclasses import dataclass
from datetime import datetime
from typing import Awaitable, Callable, Iterable, Optional, TypeVar

from storedash.core.config import settings
from storedash.core.exceptions import (
    BackendError,
    DocumentMissingError,
    OrderNotFoundError,
    OrderParseError,
    ValidationError,
)
from storedash.core.logging import get_logger
from storedash.core.timestamps import MonotonicClock
from storedash.models.order import ORDER_WORKFLOW, Order, OrderStatus, parse_order
from storedash.repositories.base import Document, DocumentStore, Predicate

logger = get_logger(__name__)

T = TypeVar("T")

Notifier = Callable[[str], None]

LIST_ERROR_MESSAGE = "Failed to load orders"
COUNT_ERROR_MESSAGE = "Failed to load order counts"

@dataclass(frozen=True)
class OrderFilter:
    """Filter for a page of orders."""

    status: Optional[OrderStatus] = None
    page_cursor: Optional[str] = None


@dataclass(frozen=True)
class OrderPage:
    """One page of orders plus the total matching the same predicates."""

    orders: list[Order]
    total: int
    next_cursor: Optional[str] = None


def matches_search(order: Order, text: str) -> bool:
    """Case-insensitive substring match on id, customer and order number."""
    needle = text.strip().lower()
    if not needle:
        return True
    candidates = (
        order.id,
        order.name,
        order.phone,
        order.order_number or "",
        order.display_number,
    )
    return any(needle in candidate.lower() for candidate in candidates if candidate)


class OrderGateway:
    """
    Order reads and status writes against a document store.

    List and count operations never raise for backend failures: they log,
    report through ``notifier`` and return empty results. Single-order
    reads and status writes propagate BackendError.
    """

    def __init__(
        self,
        store: DocumentStore,
        *,
        collection: Optional[str] = None,
        page_size: Optional[int] = None,
        search_limit: Optional[int] = None,
        timeout: Optional[float] = settings.backend_timeout_seconds,
        notifier: Optional[Notifier] = None,
        clock: Optional[MonotonicClock] = None,
    ) -> None:
        self.store = store
        self.collection = collection or settings.orders_collection
        self.page_size = page_size or settings.orders_page_size
        self.search_limit = search_limit or settings.orders_search_limit
        self.timeout = timeout
        self.notifier = notifier
        self.clock = clock or MonotonicClock()

    async def _call(self, awaitable: Awaitable[T]) -> T:
        if not self.timeout:
            return await awaitable
        try:
            return await asyncio.wait_for(awaitable, timeout=self.timeout)
        except asyncio.TimeoutError as e:
            raise BackendError(f"Backend call timed out after {self.timeout}s") from e

    def _suppress(self, message: str, error: Exception, **context) -> None:
        logger.error(message, error=str(error), **context)
        if self.notifier is not None:
            self.notifier(message)

    @staticmethod
    def _predicates(store_id: str, status: Optional[OrderStatus]) -> list[Predicate]:
        predicates: list[Predicate] = [("storeId", store_id)]
        if status:
            predicates.append(("status", OrderStatus(status).value))
        return predicates

    @staticmethod
    def _parse_all(docs: Iterable[Document]) -> list[Order]:
        orders = []
        for doc in docs:
            try:
                orders.append(parse_order(doc.id, doc.data))
            except OrderParseError as e:
                logger.warning("Skipping malformed order", order_id=doc.id, reason=e.reason)
        return orders

    async def fetch_page(
        self,
        store_id: str,
        order_filter: Optional[OrderFilter] = None,
        *,
        limit: Optional[int] = None,
    ) -> OrderPage:
        """Fetch one page of a store's orders, newest first, plus the total."""
        if not store_id:
            raise ValidationError("storeId is required")

        order_filter = order_filter or OrderFilter()
        predicates = self._predicates(store_id, order_filter.status)
        size = limit or self.page_size

        try:
            docs = await self._call(
                self.store.query_equal(
                    self.collection,
                    predicates,
                    order_by="createdAt",
                    direction="desc",
                    limit=size,
                    cursor=order_filter.page_cursor,
                )
            )
            total = await self._call(self.store.count_where(self.collection, predicates))
        except BackendError as e:
            self._suppress(LIST_ERROR_MESSAGE, e, store_id=store_id)
            return OrderPage(orders=[], total=0)

        next_cursor = docs[-1].id if len(docs) == size else None
        orders = self._parse_all(docs)

        logger.debug(
            "Fetched orders page",
            store_id=store_id,
            status=order_filter.status,
            count=len(orders),
            total=total,
        )
        return OrderPage(orders=orders, total=total, next_cursor=next_cursor)

    async def search_page(
        self,
        store_id: str,
        text: str,
        status: Optional[OrderStatus] = None,
    ) -> OrderPage:
        """
        Search the most recent orders of a store.

        Only the newest ``search_limit`` orders are scanned; matching is done
        here, not by the backend.
        """
        if not text or not text.strip():
            return await self.fetch_page(store_id, OrderFilter(status=status))
        if not store_id:
            raise ValidationError("storeId is required")

        try:
            docs = await self._call(
                self.store.query_equal(
                    self.collection,
                    self._predicates(store_id, status),
                    order_by="createdAt",
                    direction="desc",
                    limit=self.search_limit,
                )
            )
        except BackendError as e:
            self._suppress(LIST_ERROR_MESSAGE, e, store_id=store_id, query=text)
            return OrderPage(orders=[], total=0)

        orders = [order for order in self._parse_all(docs) if matches_search(order, text)]
        logger.info(
            "Searched orders",
            store_id=store_id,
            query=text,
            scanned=len(docs),
            matched=len(orders),
        )
        return OrderPage(orders=orders, total=len(orders))

    async def fetch_one(self, store_id: str, order_id: str) -> Order:
        """
        Fetch an order that belongs to ``store_id``.

        Absent, malformed and foreign orders all raise the same
        OrderNotFoundError.
        """
        if not store_id or not order_id:
            raise OrderNotFoundError()

        doc = await self._call(self.store.get_by_id(self.collection, order_id))
        if doc is None:
            raise OrderNotFoundError()

        try:
            order = parse_order(doc.id, doc.data)
        except OrderParseError as e:
            logger.warning("Malformed order", order_id=order_id, reason=e.reason)
            raise OrderNotFoundError() from e

        if order.store_id != store_id:
            logger.warning(
                "Order does not belong to store",
                order_id=order_id,
                store_id=store_id,
            )
            raise OrderNotFoundError()

        return order

    async def update_status(self, order_id: str, new_status: OrderStatus | str) -> datetime:
        """
        Write ``status`` and a fresh ``updatedAt``.

        Any status value is accepted; workflow rules are not checked here.
        Returns the ``updatedAt`` that was written.
        """
        if not order_id:
            raise OrderNotFoundError()

        status = OrderStatus(new_status)
        updated_at = self.clock.now()
        try:
            await self._call(
                self.store.update_fields(
                    self.collection,
                    order_id,
                    {"status": status.value, "updatedAt": updated_at},
                )
            )
        except DocumentMissingError as e:
            raise OrderNotFoundError() from e

        logger.info("Order status updated", order_id=order_id, status=status.value)
        return updated_at

    async def _count_status(self, store_id: str, status: OrderStatus) -> Optional[int]:
        try:
            return await self._call(
                self.store.count_where(self.collection, self._predicates(store_id, status))
            )
        except BackendError as e:
            logger.error(
                "Failed to count orders",
                store_id=store_id,
                status=status.value,
                error=str(e),
            )
            return None

    async def counts_by_status(self, store_id: str) -> dict[str, int]:
        """
        Order count per status plus ``all``.

        ``all`` is the sum of the five workflow statuses. Cancelled orders
        are counted under ``cancelled`` but stay outside the aggregate.
        """
        if not store_id:
            raise ValidationError("storeId is required")

        statuses = list(OrderStatus)
        results = await asyncio.gather(
            *(self._count_status(store_id, status) for status in statuses)
        )

        if any(result is None for result in results):
            logger.warning("Some order counts fell back to zero", store_id=store_id)
            if self.notifier is not None:
                self.notifier(COUNT_ERROR_MESSAGE)

        counts = {status.value: result or 0 for status, result in zip(statuses, results)}
        counts["all"] = sum(counts[status.value] for status in ORDER_WORKFLOW)
        return counts

    async def resend_confirmation(self, order_id: str) -> None:
        """Request that the customer confirmation be sent again."""
        if not order_id:
            raise OrderNotFoundError()
        # Delivery (email/SMS) is handled outside this service
        logger.info("Order confirmation resend requested", order_id=order_id)
