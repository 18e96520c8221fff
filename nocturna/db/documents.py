"""
JSONB document store.

Each collection from ``nocturna.db.schema`` is addressed by name. Records come
back as plain dicts: the stored document merged with the row metadata
``id``, ``version``, ``created_at`` and ``updated_at``.

Writes are version-checked: ``replace`` only succeeds when the caller's
expected version matches the stored one, and bumps it by one.
"""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any
from uuid import uuid4

import psycopg
from psycopg import sql
from psycopg.types.json import Jsonb

from nocturna.db.helpers import DatabaseError, fetch_all, fetch_one
from nocturna.db.pool import db_pool
from nocturna.db.schema import COLLECTION_NAMES
from nocturna.errors import ConflictError, NotFoundError, VersionConflictError
from nocturna.infrastructure.observability.logging import get_logger

logger = get_logger(__name__)

METADATA_KEYS = frozenset({"id", "version", "created_at", "updated_at"})
_RETURNING = sql.SQL("RETURNING id, doc, version, created_at, updated_at")


class DuplicateDocumentError(ConflictError):
    """A unique document key is already taken."""

    def __init__(self, collection: str):
        super().__init__(f"Duplicate record in {collection}")
        self.collection = collection


def _table(collection: str) -> sql.Identifier:
    if collection not in COLLECTION_NAMES:
        raise ValueError(f"Unknown collection: {collection}")
    return sql.Identifier(collection)


def _strip_metadata(doc: dict[str, Any]) -> dict[str, Any]:
    return {key: value for key, value in doc.items() if key not in METADATA_KEYS}


def _row_to_record(row: dict | None) -> dict[str, Any] | None:
    if not row:
        return None
    return {
        **row["doc"],
        "id": row["id"],
        "version": row["version"],
        "created_at": row["created_at"],
        "updated_at": row["updated_at"],
    }


def escape_like(text: str) -> str:
    """Make ``%``, ``_`` and ``\\`` match literally inside an ILIKE pattern."""
    return text.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def _is_unique_violation(error: DatabaseError) -> bool:
    return isinstance(error.__cause__, psycopg.errors.UniqueViolation)


class DocumentStore:
    """Async CRUD over the JSONB collections."""

    async def insert(
        self,
        collection: str,
        doc: dict[str, Any],
        *,
        connection: psycopg.AsyncConnection | None = None,
    ) -> dict[str, Any]:
        doc_id = uuid4().hex
        query = sql.SQL("INSERT INTO {table} (id, doc) VALUES (%s, %s) {returning}").format(
            table=_table(collection), returning=_RETURNING
        )

        try:
            row = await fetch_one(query, (doc_id, Jsonb(_strip_metadata(doc))), connection=connection)
        except DatabaseError as e:
            if _is_unique_violation(e):
                raise DuplicateDocumentError(collection) from e
            raise

        logger.debug("Document inserted", collection=collection, doc_id=doc_id)
        return _row_to_record(row)

    async def get(
        self,
        collection: str,
        doc_id: str,
        *,
        connection: psycopg.AsyncConnection | None = None,
    ) -> dict[str, Any] | None:
        query = sql.SQL(
            "SELECT id, doc, version, created_at, updated_at FROM {table} WHERE id = %s"
        ).format(table=_table(collection))
        row = await fetch_one(query, (doc_id,), connection=connection)
        return _row_to_record(row)

    async def find(
        self,
        collection: str,
        filters: dict[str, Any] | None = None,
        *,
        search: tuple[str, str] | None = None,
        order_by: str | None = None,
        descending: bool = False,
        limit: int | None = None,
        connection: psycopg.AsyncConnection | None = None,
    ) -> list[dict[str, Any]]:
        """
        Find documents matching every key/value in ``filters``.

        Args:
            filters: Top-level document keys to match exactly (JSONB containment)
            search: Optional ``(key, text)`` case-insensitive substring match
            order_by: Document key to sort by; falls back to creation time
            descending: Reverse the sort
            limit: Maximum number of documents
        """
        clauses = [sql.SQL("doc @> %s")]
        params: list[Any] = [Jsonb(filters or {})]

        if search:
            key, text = search
            clauses.append(sql.SQL("doc->>{key} ILIKE %s ESCAPE '\\'").format(key=sql.Literal(key)))
            params.append(f"%{escape_like(text)}%")

        if order_by:
            order = sql.SQL("doc->>{key}").format(key=sql.Literal(order_by))
        else:
            order = sql.SQL("created_at")
        direction = sql.SQL("DESC" if descending else "ASC")

        query = sql.SQL(
            "SELECT id, doc, version, created_at, updated_at FROM {table} "
            "WHERE {where} ORDER BY {order} {direction}, id"
        ).format(
            table=_table(collection),
            where=sql.SQL(" AND ").join(clauses),
            order=order,
            direction=direction,
        )
        if limit is not None:
            query = query + sql.SQL(" LIMIT %s")
            params.append(limit)

        rows = await fetch_all(query, tuple(params), connection=connection)
        return [_row_to_record(row) for row in rows]

    async def find_one(
        self,
        collection: str,
        filters: dict[str, Any],
        *,
        connection: psycopg.AsyncConnection | None = None,
    ) -> dict[str, Any] | None:
        records = await self.find(collection, filters, limit=1, connection=connection)
        return records[0] if records else None

    async def replace(
        self,
        collection: str,
        doc_id: str,
        doc: dict[str, Any],
        *,
        expected_version: int,
        connection: psycopg.AsyncConnection | None = None,
    ) -> dict[str, Any]:
        """
        Overwrite a document if its stored version equals ``expected_version``.

        Raises:
            NotFoundError: No document with that id
            VersionConflictError: The document changed since it was read
            DuplicateDocumentError: The new content collides on a unique key
        """
        query = sql.SQL(
            "UPDATE {table} SET doc = %s, version = version + 1, updated_at = NOW() "
            "WHERE id = %s AND version = %s {returning}"
        ).format(table=_table(collection), returning=_RETURNING)

        try:
            row = await fetch_one(
                query,
                (Jsonb(_strip_metadata(doc)), doc_id, expected_version),
                connection=connection,
            )
        except DatabaseError as e:
            if _is_unique_violation(e):
                raise DuplicateDocumentError(collection) from e
            raise

        if row:
            return _row_to_record(row)

        current = await self.get(collection, doc_id, connection=connection)
        if current is None:
            raise NotFoundError(f"Record not found in {collection}")

        logger.warning(
            "Stale write rejected",
            collection=collection,
            doc_id=doc_id,
            expected_version=expected_version,
            actual_version=current["version"],
        )
        raise VersionConflictError(collection, doc_id, expected_version, current["version"])

    @asynccontextmanager
    async def transaction(self) -> AsyncGenerator[psycopg.AsyncConnection, None]:
        """Group several writes; pass the yielded connection to each call."""
        async with db_pool.transaction() as conn:
            yield conn


document_store = DocumentStore()
