"""
Tests for the order query gateway.
"""
import asyncio
from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock

import pytest

from storedash.core.config import settings
from storedash.core.exceptions import BackendError, OrderNotFoundError, ValidationError
from storedash.core.timestamps import MonotonicClock
from storedash.models.order import ORDER_WORKFLOW, OrderStatus
from storedash.services.order_gateway import (
    COUNT_ERROR_MESSAGE,
    LIST_ERROR_MESSAGE,
    OrderFilter,
    OrderGateway,
    matches_search,
)

from conftest import OTHER_STORE_ID, STORE_ID, make_order_data


class TestFetchPage:
    """Tests for OrderGateway.fetch_page."""

    async def test_returns_only_store_orders_newest_first(self, gateway: OrderGateway):
        page = await gateway.fetch_page(STORE_ID)

        assert len(page.orders) == 10
        assert page.total == 25
        assert all(order.store_id == STORE_ID for order in page.orders)
        created = [order.created_at for order in page.orders]
        assert created == sorted(created, reverse=True)
        assert page.orders[0].id == "order-a-024"

    async def test_cursor_walks_every_order_once(self, gateway: OrderGateway):
        seen: list[str] = []
        cursor = None
        while True:
            page = await gateway.fetch_page(STORE_ID, OrderFilter(page_cursor=cursor))
            seen.extend(order.id for order in page.orders)
            if page.next_cursor is None:
                break
            cursor = page.next_cursor

        assert len(seen) == 25
        assert len(set(seen)) == 25
        assert seen == [f"order-a-{index:03d}" for index in reversed(range(25))]

    async def test_status_filter(self, gateway: OrderGateway):
        page = await gateway.fetch_page(STORE_ID, OrderFilter(status=OrderStatus.READY))

        assert page.total == 4
        assert {order.status for order in page.orders} == {OrderStatus.READY}

    async def test_short_page_has_no_cursor(self, gateway: OrderGateway):
        page = await gateway.fetch_page(OTHER_STORE_ID)

        assert len(page.orders) == 3
        assert page.next_cursor is None

    async def test_limit_overrides_page_size(self, gateway: OrderGateway):
        page = await gateway.fetch_page(STORE_ID, limit=5)

        assert len(page.orders) == 5
        assert page.next_cursor == page.orders[-1].id

    async def test_missing_store_id(self, gateway: OrderGateway):
        with pytest.raises(ValidationError):
            await gateway.fetch_page("")

    async def test_malformed_records_are_skipped(self, gateway: OrderGateway, seeded_store):
        await seeded_store.put(
            settings.orders_collection,
            "order-a-999",
            make_order_data(99, total="not money"),
        )

        page = await gateway.fetch_page(STORE_ID)

        assert "order-a-999" not in [order.id for order in page.orders]
        assert page.total == 26

    async def test_backend_failure_returns_empty_page(self, seeded_store, notifications):
        seeded_store.query_equal = AsyncMock(side_effect=BackendError("connection reset"))
        gateway = OrderGateway(seeded_store, notifier=notifications.append)

        page = await gateway.fetch_page(STORE_ID)

        assert page.orders == []
        assert page.total == 0
        assert page.next_cursor is None
        assert notifications == [LIST_ERROR_MESSAGE]

    async def test_timeout_is_a_backend_failure(self, seeded_store, notifications):
        async def slow_query(*args, **kwargs):
            await asyncio.sleep(1)
            return []

        seeded_store.query_equal = slow_query
        gateway = OrderGateway(seeded_store, timeout=0.01, notifier=notifications.append)

        page = await gateway.fetch_page(STORE_ID)

        assert page.orders == []
        assert notifications == [LIST_ERROR_MESSAGE]


class TestSearchPage:
    """Tests for OrderGateway.search_page."""

    async def test_matches_customer_name_case_insensitive(self, gateway: OrderGateway):
        page = await gateway.search_page(STORE_ID, "customer 12")

        assert [order.id for order in page.orders] == ["order-a-012"]
        assert page.total == 1
        assert page.next_cursor is None

    async def test_matches_id_and_phone(self, gateway: OrderGateway):
        by_id = await gateway.search_page(STORE_ID, "A-007")
        by_phone = await gateway.search_page(STORE_ID, "+15550000007")

        assert [order.id for order in by_id.orders] == ["order-a-007"]
        assert [order.id for order in by_phone.orders] == ["order-a-007"]

    async def test_combines_with_status(self, gateway: OrderGateway):
        page = await gateway.search_page(STORE_ID, "customer", OrderStatus.CANCELLED)

        assert page.total == 4
        assert all(order.status == OrderStatus.CANCELLED for order in page.orders)

    async def test_only_scans_newest_orders(self, seeded_store):
        gateway = OrderGateway(seeded_store, search_limit=5)

        page = await gateway.search_page(STORE_ID, "customer")

        assert len(page.orders) == 5
        assert page.orders[-1].id == "order-a-020"

    async def test_blank_text_is_a_plain_page(self, gateway: OrderGateway):
        page = await gateway.search_page(STORE_ID, "   ")

        assert page.total == 25
        assert page.next_cursor is not None

    def test_matches_display_number(self, order_factory):
        from storedash.models.order import parse_order

        order = parse_order("abcdef123", order_factory())
        assert matches_search(order, "#ABCDEF12")
        assert not matches_search(order, "zzz")


class TestFetchOne:
    """Tests for OrderGateway.fetch_one."""

    async def test_returns_store_order(self, gateway: OrderGateway):
        order = await gateway.fetch_one(STORE_ID, "order-a-003")

        assert order.id == "order-a-003"
        assert order.status == OrderStatus.READY

    async def test_foreign_order_is_not_found(self, gateway: OrderGateway):
        with pytest.raises(OrderNotFoundError):
            await gateway.fetch_one(STORE_ID, "order-b-000")

    async def test_absent_order_is_not_found(self, gateway: OrderGateway):
        with pytest.raises(OrderNotFoundError):
            await gateway.fetch_one(STORE_ID, "does-not-exist")

    async def test_malformed_order_is_not_found(self, gateway: OrderGateway, seeded_store):
        await seeded_store.put(settings.orders_collection, "broken", {"total": 3})

        with pytest.raises(OrderNotFoundError):
            await gateway.fetch_one(STORE_ID, "broken")

    async def test_backend_failure_propagates(self, seeded_store):
        seeded_store.get_by_id = AsyncMock(side_effect=BackendError("down"))
        gateway = OrderGateway(seeded_store)

        with pytest.raises(BackendError):
            await gateway.fetch_one(STORE_ID, "order-a-000")


class TestUpdateStatus:
    """Tests for OrderGateway.update_status."""

    async def test_status_and_updated_at_change(self, gateway: OrderGateway):
        before = await gateway.fetch_one(STORE_ID, "order-a-000")

        written_at = await gateway.update_status("order-a-000", OrderStatus.CONFIRMED)
        after = await gateway.fetch_one(STORE_ID, "order-a-000")

        assert after.status == OrderStatus.CONFIRMED
        assert after.updated_at == written_at
        assert after.updated_at > before.updated_at

    async def test_back_to_back_writes_are_strictly_ordered(self, gateway: OrderGateway):
        first = await gateway.update_status("order-a-001", "preparing")
        second = await gateway.update_status("order-a-001", "ready")

        assert second > first

    async def test_gateways_sharing_a_clock_write_ordered_timestamps(
        self, seeded_store, monkeypatch
    ):
        frozen = datetime(2024, 3, 1, 12, tzinfo=timezone.utc)
        monkeypatch.setattr("storedash.core.timestamps.utcnow", lambda: frozen)
        clock = MonotonicClock()

        first = await OrderGateway(seeded_store, clock=clock).update_status("order-a-000", "ready")
        second = await OrderGateway(seeded_store, clock=clock).update_status("order-a-001", "ready")

        assert first == frozen
        assert second == frozen + timedelta(microseconds=1)

    async def test_any_status_is_accepted(self, gateway: OrderGateway):
        # Delivered back to pending is not a workflow step, but is written
        await gateway.update_status("order-a-004", OrderStatus.PENDING)

        order = await gateway.fetch_one(STORE_ID, "order-a-004")
        assert order.status == OrderStatus.PENDING

    async def test_missing_order(self, gateway: OrderGateway):
        with pytest.raises(OrderNotFoundError):
            await gateway.update_status("nope", OrderStatus.CONFIRMED)

    async def test_invalid_status(self, gateway: OrderGateway):
        with pytest.raises(ValueError):
            await gateway.update_status("order-a-000", "shipped")


class TestCountsByStatus:
    """Tests for OrderGateway.counts_by_status."""

    async def test_workflow_counts_sum_to_all(self, gateway: OrderGateway):
        counts = await gateway.counts_by_status(STORE_ID)

        assert counts["cancelled"] == 4
        assert sum(counts[status.value] for status in ORDER_WORKFLOW) == counts["all"] == 21
        assert counts["pending"] == 5

    async def test_cancelled_orders_stay_outside_all(self, gateway: OrderGateway, seeded_store):
        before = await gateway.counts_by_status(STORE_ID)
        await seeded_store.put(
            settings.orders_collection,
            "order-a-cancelled",
            make_order_data(99, status="cancelled"),
        )

        after = await gateway.counts_by_status(STORE_ID)

        assert after["cancelled"] == before["cancelled"] + 1
        assert after["all"] == before["all"]

    async def test_counts_of_store_without_cancelled_orders(self, gateway: OrderGateway):
        counts = await gateway.counts_by_status(OTHER_STORE_ID)

        assert counts["cancelled"] == 0
        assert counts["pending"] == counts["all"] == 3

    async def test_failed_count_falls_back_to_zero(self, seeded_store, notifications):
        real_count = seeded_store.count_where

        async def flaky_count(collection, predicates):
            if ("status", "ready") in predicates:
                raise BackendError("timeout")
            return await real_count(collection, predicates)

        seeded_store.count_where = flaky_count
        gateway = OrderGateway(seeded_store, notifier=notifications.append)

        counts = await gateway.counts_by_status(STORE_ID)

        assert counts["ready"] == 0
        assert counts["pending"] == 5
        assert counts["all"] == 17
        assert notifications == [COUNT_ERROR_MESSAGE]
