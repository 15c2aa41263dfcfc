"""
In-memory document store used in demo mode and tests.
"""
import copy
from collections import defaultdict
from datetime import datetime, timezone
from typing import Any, Optional, Sequence

from storedash.core.exceptions import DocumentMissingError
from storedash.core.timestamps import parse_timestamp
from storedash.repositories.base import Direction, Document, DocumentStore, Predicate

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def _sort_value(value: Any) -> tuple[int, Any]:
    # Timestamps in any representation compare chronologically; everything
    # else compares as text after them.
    if value is None:
        return (0, _EPOCH)
    try:
        return (1, parse_timestamp(value))
    except (ValueError, TypeError, OverflowError, OSError):
        return (2, str(value))


class MemoryDocumentStore(DocumentStore):
    """Dict-backed store with the same query semantics as the SQL store."""

    def __init__(self) -> None:
        self._collections: dict[str, dict[str, dict[str, Any]]] = defaultdict(dict)

    def _matching(
        self,
        collection: str,
        predicates: Sequence[Predicate],
    ) -> list[tuple[str, dict[str, Any]]]:
        return [
            (doc_id, data)
            for doc_id, data in self._collections[collection].items()
            if all(data.get(field) == value for field, value in predicates)
        ]

    async def query_equal(
        self,
        collection: str,
        predicates: Sequence[Predicate],
        order_by: str,
        direction: Direction,
        limit: int,
        cursor: Optional[str] = None,
    ) -> list[Document]:
        rows = self._matching(collection, predicates)
        rows.sort(
            key=lambda row: (_sort_value(row[1].get(order_by)), row[0]),
            reverse=direction == "desc",
        )

        if cursor is not None:
            ids = [doc_id for doc_id, _ in rows]
            if cursor not in ids:
                return []
            rows = rows[ids.index(cursor) + 1:]

        return [
            Document(id=doc_id, data=copy.deepcopy(data))
            for doc_id, data in rows[:limit]
        ]

    async def count_where(
        self,
        collection: str,
        predicates: Sequence[Predicate],
    ) -> int:
        return len(self._matching(collection, predicates))

    async def get_by_id(self, collection: str, doc_id: str) -> Optional[Document]:
        data = self._collections[collection].get(doc_id)
        if data is None:
            return None
        return Document(id=doc_id, data=copy.deepcopy(data))

    async def update_fields(
        self,
        collection: str,
        doc_id: str,
        fields: dict[str, Any],
    ) -> None:
        data = self._collections[collection].get(doc_id)
        if data is None:
            raise DocumentMissingError(collection, doc_id)
        data.update(copy.deepcopy(fields))

    async def put(self, collection: str, doc_id: str, data: dict[str, Any]) -> None:
        self._collections[collection][doc_id] = copy.deepcopy(data)

    async def delete(self, collection: str, doc_id: str) -> None:
        if self._collections[collection].pop(doc_id, None) is None:
            raise DocumentMissingError(collection, doc_id)

    async def close(self) -> None:
        self._collections.clear()
