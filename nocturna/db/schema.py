"""
Collection registry for the JSONB document store.

Every collection is a table of ``(id, doc, version, created_at, updated_at)``.
The registry is static and is applied once at startup by ``ensure_schema``.
"""

from dataclasses import dataclass

from psycopg import sql

from nocturna.db.pool import db_pool
from nocturna.infrastructure.observability.logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class Collection:
    name: str
    # Document keys that must be unique across the collection
    unique_keys: tuple[str, ...] = ()
    # Document keys looked up often enough to deserve an expression index
    indexed_keys: tuple[str, ...] = ()


SECTIONS = Collection("sections", indexed_keys=("active",))
MEMBERS = Collection("members", indexed_keys=("section_id", "status"))
VIGILS = Collection("vigils", indexed_keys=("section_id", "state", "start_at"))
MINUTES = Collection("minutes", unique_keys=("vigil_id",), indexed_keys=("section_id",))
USERS = Collection("users", unique_keys=("email",))
PAYMENTS = Collection("payments", indexed_keys=("member_id", "vigil_id"))

COLLECTIONS: tuple[Collection, ...] = (SECTIONS, MEMBERS, VIGILS, MINUTES, USERS, PAYMENTS)
COLLECTION_NAMES = frozenset(c.name for c in COLLECTIONS)


def _statements(collection: Collection) -> list[sql.Composed]:
    table = sql.Identifier(collection.name)
    statements = [
        sql.SQL(
            """
            CREATE TABLE IF NOT EXISTS {table} (
                id TEXT PRIMARY KEY,
                doc JSONB NOT NULL,
                version INTEGER NOT NULL DEFAULT 1,
                created_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
                updated_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
            )
            """
        ).format(table=table)
    ]

    for key in collection.unique_keys:
        index = sql.Identifier(f"{collection.name}_{key}_uniq")
        statements.append(
            sql.SQL("CREATE UNIQUE INDEX IF NOT EXISTS {index} ON {table} ((doc->>{key}))").format(
                index=index, table=table, key=sql.Literal(key)
            )
        )

    for key in collection.indexed_keys:
        index = sql.Identifier(f"{collection.name}_{key}_idx")
        statements.append(
            sql.SQL("CREATE INDEX IF NOT EXISTS {index} ON {table} ((doc->>{key}))").format(
                index=index, table=table, key=sql.Literal(key)
            )
        )

    return statements


async def ensure_schema() -> None:
    """Create collection tables and indexes if they do not exist yet."""
    async with db_pool.transaction() as conn:
        for collection in COLLECTIONS:
            for statement in _statements(collection):
                await conn.execute(statement)

    logger.info("Document collections ready", collections=sorted(COLLECTION_NAMES))
