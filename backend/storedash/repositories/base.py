"""
Document store abstraction.

Services only need a handful of backend-native operations from the
document database: equality queries with ordering and start-after
pagination, counting, fetching by id, partial updates, writes and deletes.
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Any, Literal, Optional, Sequence

Direction = Literal["asc", "desc"]
Predicate = tuple[str, Any]


@dataclass(frozen=True)
class Document:
    """A raw record as returned by the backend."""

    id: str
    data: dict[str, Any] = field(default_factory=dict)


def to_jsonable(value: Any) -> Any:
    """Convert a document value into plain JSON types."""
    if isinstance(value, Enum):
        return to_jsonable(value.value)
    if isinstance(value, datetime):
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc).isoformat()
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, Decimal):
        return float(value)
    if isinstance(value, dict):
        return {str(k): to_jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_jsonable(v) for v in value]
    return value


class DocumentStore(ABC):
    """
    Backend-native document operations.

    Implementations raise BackendError for backend failures and
    DocumentMissingError when an update or delete targets an absent
    document.
    """

    @abstractmethod
    async def query_equal(
        self,
        collection: str,
        predicates: Sequence[Predicate],
        order_by: str,
        direction: Direction,
        limit: int,
        cursor: Optional[str] = None,
    ) -> list[Document]:
        """
        Return documents matching every equality predicate, ordered by
        ``order_by`` (ties broken by id in the same direction), starting
        after the document whose id is ``cursor``.
        """

    @abstractmethod
    async def count_where(
        self,
        collection: str,
        predicates: Sequence[Predicate],
    ) -> int:
        """Count documents matching every equality predicate."""

    @abstractmethod
    async def get_by_id(self, collection: str, doc_id: str) -> Optional[Document]:
        """Fetch one document, or None when absent."""

    @abstractmethod
    async def update_fields(
        self,
        collection: str,
        doc_id: str,
        fields: dict[str, Any],
    ) -> None:
        """Merge ``fields`` into an existing document."""

    @abstractmethod
    async def put(self, collection: str, doc_id: str, data: dict[str, Any]) -> None:
        """Create or replace a document."""

    @abstractmethod
    async def delete(self, collection: str, doc_id: str) -> None:
        """Remove an existing document."""

    async def close(self) -> None:
        """Release backend resources."""
        return None
