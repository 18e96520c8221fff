"""
Typed access to the document collections.

Each repository binds one collection from ``nocturna.db.schema`` to its
domain model. The store is looked up through ``documents.document_store`` on
every call so it can be swapped out as a whole.
"""

from typing import Any, ClassVar, Generic, TypeVar

import psycopg

from nocturna.db import documents
from nocturna.db.schema import Collection
from nocturna.models.domain.base import DocumentModel

ModelT = TypeVar("ModelT", bound=DocumentModel)


class DocumentRepository(Generic[ModelT]):
    collection: ClassVar[Collection]
    model: ClassVar[type[DocumentModel]]

    @classmethod
    def _to_model(cls, record: dict[str, Any] | None) -> ModelT | None:
        return cls.model.from_record(record)

    @classmethod
    async def create(cls, item: ModelT, *, connection: psycopg.AsyncConnection | None = None) -> ModelT:
        record = await documents.document_store.insert(
            cls.collection.name, item.to_document(), connection=connection
        )
        return cls._to_model(record)

    @classmethod
    async def get(cls, doc_id: str, *, connection: psycopg.AsyncConnection | None = None) -> ModelT | None:
        record = await documents.document_store.get(cls.collection.name, doc_id, connection=connection)
        return cls._to_model(record)

    @classmethod
    async def find(cls, filters: dict[str, Any] | None = None, **options: Any) -> list[ModelT]:
        records = await documents.document_store.find(cls.collection.name, filters, **options)
        return [cls._to_model(record) for record in records]

    @classmethod
    async def find_one(cls, filters: dict[str, Any]) -> ModelT | None:
        record = await documents.document_store.find_one(cls.collection.name, filters)
        return cls._to_model(record)

    @classmethod
    async def save(cls, item: ModelT, *, connection: psycopg.AsyncConnection | None = None) -> ModelT:
        """Write ``item`` back; fails if the stored copy moved past ``item.version``."""
        record = await documents.document_store.replace(
            cls.collection.name,
            item.id,
            item.to_document(),
            expected_version=item.version,
            connection=connection,
        )
        return cls._to_model(record)
