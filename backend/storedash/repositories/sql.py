"""
SQLAlchemy-backed document store.

Documents live as JSON in the ``documents`` table. Values are normalized
to JSON types on write. Timestamp fields in any accepted representation
(ISO strings with offsets, ``{seconds, nanoseconds}`` maps, epoch numbers,
datetimes) are rewritten as UTC ISO-8601 strings, so ordering on a
timestamp field is ordering on its text form.
"""
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any, Optional, Sequence

from sqlalchemy import and_, func, or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from storedash.core.database import session_scope
from storedash.core.exceptions import BackendError, DocumentMissingError
from storedash.core.logging import get_logger
from storedash.core.timestamps import parse_timestamp
from storedash.models.document import DocumentRecord
from storedash.repositories.base import (
    Direction,
    Document,
    DocumentStore,
    Predicate,
    to_jsonable,
)

logger = get_logger(__name__)

TIMESTAMP_FIELDS = frozenset({"createdAt", "updatedAt"})


def _field_text(field: str):
    return func.coalesce(DocumentRecord.data[field].as_string(), "")


def _text_value(value: Any) -> str:
    value = to_jsonable(value)
    return "" if value is None else str(value)


def _normalize(fields: dict[str, Any]) -> dict[str, Any]:
    data = to_jsonable(fields)
    for name in TIMESTAMP_FIELDS.intersection(fields):
        try:
            data[name] = to_jsonable(parse_timestamp(fields[name]))
        except (ValueError, TypeError, OverflowError, OSError):
            # Kept as written; parse_order coerces it on read
            logger.warning("Unparseable timestamp stored as-is", field=name)
    return data


class SqlDocumentStore(DocumentStore):
    """Document store on top of an async SQLAlchemy session factory."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    @asynccontextmanager
    async def _session(self) -> AsyncGenerator[AsyncSession, None]:
        try:
            async with session_scope(self._session_factory) as session:
                yield session
        except SQLAlchemyError as e:
            logger.error("Document store query failed", error=str(e))
            raise BackendError(str(e)) from e

    @staticmethod
    def _where(collection: str, predicates: Sequence[Predicate]) -> list:
        clauses = [DocumentRecord.collection == collection]
        for field, value in predicates:
            clauses.append(_field_text(field) == _text_value(value))
        return clauses

    async def query_equal(
        self,
        collection: str,
        predicates: Sequence[Predicate],
        order_by: str,
        direction: Direction,
        limit: int,
        cursor: Optional[str] = None,
    ) -> list[Document]:
        sort_col = _field_text(order_by)
        stmt = select(DocumentRecord).where(*self._where(collection, predicates))

        async with self._session() as session:
            if cursor is not None:
                anchor = await session.get(DocumentRecord, (collection, cursor))
                if anchor is None:
                    return []
                anchor_value = _text_value(anchor.data.get(order_by))
                if direction == "desc":
                    stmt = stmt.where(
                        or_(
                            sort_col < anchor_value,
                            and_(sort_col == anchor_value, DocumentRecord.id < cursor),
                        )
                    )
                else:
                    stmt = stmt.where(
                        or_(
                            sort_col > anchor_value,
                            and_(sort_col == anchor_value, DocumentRecord.id > cursor),
                        )
                    )

            if direction == "desc":
                stmt = stmt.order_by(sort_col.desc(), DocumentRecord.id.desc())
            else:
                stmt = stmt.order_by(sort_col.asc(), DocumentRecord.id.asc())

            result = await session.execute(stmt.limit(limit))
            return [
                Document(id=record.id, data=dict(record.data or {}))
                for record in result.scalars().all()
            ]

    async def count_where(
        self,
        collection: str,
        predicates: Sequence[Predicate],
    ) -> int:
        stmt = (
            select(func.count())
            .select_from(DocumentRecord)
            .where(*self._where(collection, predicates))
        )
        async with self._session() as session:
            result = await session.execute(stmt)
            return result.scalar() or 0

    async def get_by_id(self, collection: str, doc_id: str) -> Optional[Document]:
        async with self._session() as session:
            record = await session.get(DocumentRecord, (collection, doc_id))
            if record is None:
                return None
            return Document(id=record.id, data=dict(record.data or {}))

    async def update_fields(
        self,
        collection: str,
        doc_id: str,
        fields: dict[str, Any],
    ) -> None:
        async with self._session() as session:
            record = await session.get(DocumentRecord, (collection, doc_id))
            if record is None:
                raise DocumentMissingError(collection, doc_id)
            # Reassign so the JSON column is flagged dirty
            record.data = {**(record.data or {}), **_normalize(fields)}
            await session.flush()

    async def put(self, collection: str, doc_id: str, data: dict[str, Any]) -> None:
        async with self._session() as session:
            await session.merge(
                DocumentRecord(collection=collection, id=doc_id, data=_normalize(data))
            )

    async def delete(self, collection: str, doc_id: str) -> None:
        async with self._session() as session:
            record = await session.get(DocumentRecord, (collection, doc_id))
            if record is None:
                raise DocumentMissingError(collection, doc_id)
            await session.delete(record)
