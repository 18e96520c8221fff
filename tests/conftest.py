import os

# Settings are read at import time; the token signer needs a 32+ char secret
os.environ.setdefault("JWT_SECRET", "test-jwt-secret-that-is-long-enough-for-hs256")

import copy
import itertools
from contextlib import asynccontextmanager
from datetime import UTC, datetime
from typing import Any
from uuid import uuid4

import pytest

from nocturna.auth.session import session_dependency
from nocturna.db.documents import DuplicateDocumentError
from nocturna.db.schema import COLLECTIONS
from nocturna.errors import NotFoundError, VersionConflictError
from nocturna.models.domain.user_domain import SessionPayload

METADATA_KEYS = {"id", "version", "created_at", "updated_at"}


class FakeDocumentStore:
    """In-memory stand-in for ``DocumentStore`` with the same contract."""

    def __init__(self):
        self.collections: dict[str, dict[str, dict[str, Any]]] = {c.name: {} for c in COLLECTIONS}
        self.unique_keys = {c.name: c.unique_keys for c in COLLECTIONS}
        self._sequence = itertools.count()
        self.writes = 0

    def _record(self, row: dict[str, Any]) -> dict[str, Any]:
        return {
            **copy.deepcopy(row["doc"]),
            "id": row["id"],
            "version": row["version"],
            "created_at": row["created_at"],
            "updated_at": row["updated_at"],
        }

    def _check_unique(self, collection: str, doc: dict[str, Any], exclude_id: str | None = None):
        for key in self.unique_keys[collection]:
            value = doc.get(key)
            if value is None:
                continue
            for other_id, row in self.collections[collection].items():
                if other_id != exclude_id and row["doc"].get(key) == value:
                    raise DuplicateDocumentError(collection)

    async def insert(self, collection, doc, *, connection=None):
        body = {k: v for k, v in copy.deepcopy(doc).items() if k not in METADATA_KEYS}
        self._check_unique(collection, body)
        now = datetime.now(UTC)
        row = {
            "id": uuid4().hex,
            "doc": body,
            "version": 1,
            "created_at": now,
            "updated_at": now,
            "seq": next(self._sequence),
        }
        self.collections[collection][row["id"]] = row
        self.writes += 1
        return self._record(row)

    async def get(self, collection, doc_id, *, connection=None):
        row = self.collections[collection].get(doc_id)
        return self._record(row) if row else None

    async def find(
        self,
        collection,
        filters=None,
        *,
        search=None,
        order_by=None,
        descending=False,
        limit=None,
        connection=None,
    ):
        rows = [
            row
            for row in self.collections[collection].values()
            if all(row["doc"].get(key) == value for key, value in (filters or {}).items())
        ]
        if search:
            key, text = search
            rows = [row for row in rows if text.lower() in str(row["doc"].get(key) or "").lower()]

        if order_by:
            rows.sort(key=lambda row: (str(row["doc"].get(order_by) or ""), row["id"]), reverse=descending)
        else:
            rows.sort(key=lambda row: row["seq"], reverse=descending)

        if limit is not None:
            rows = rows[:limit]
        return [self._record(row) for row in rows]

    async def find_one(self, collection, filters, *, connection=None):
        records = await self.find(collection, filters, limit=1)
        return records[0] if records else None

    async def replace(self, collection, doc_id, doc, *, expected_version, connection=None):
        row = self.collections[collection].get(doc_id)
        if row is None:
            raise NotFoundError(f"Record not found in {collection}")
        if row["version"] != expected_version:
            raise VersionConflictError(collection, doc_id, expected_version, row["version"])

        body = {k: v for k, v in copy.deepcopy(doc).items() if k not in METADATA_KEYS}
        self._check_unique(collection, body, exclude_id=doc_id)
        row["doc"] = body
        row["version"] += 1
        row["updated_at"] = datetime.now(UTC)
        self.writes += 1
        return self._record(row)

    @asynccontextmanager
    async def transaction(self):
        snapshot = copy.deepcopy(self.collections)
        try:
            yield None
        except BaseException:
            self.collections = snapshot
            raise


@pytest.fixture
def fake_store(monkeypatch):
    store = FakeDocumentStore()
    monkeypatch.setattr("nocturna.db.documents.document_store", store)
    return store


@pytest.fixture
def session_override():
    def _override():
        return SessionPayload(
            user_id="user-123",
            email="secretary@nocturna.org",
            name="Secretary",
            expires_at=datetime.now(UTC),
        )

    return _override


@pytest.fixture
def authed_app(session_override):
    from nocturna.main import app

    app.dependency_overrides[session_dependency] = session_override
    yield app
    app.dependency_overrides.clear()
