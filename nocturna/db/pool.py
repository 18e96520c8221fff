"""
PostgreSQL connection pool for the document store.

One pool per process, opened in the FastAPI lifespan and closed on shutdown.
Connections run in autocommit; grouped writes go through ``transaction()``.
"""

import asyncio
import time
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any

import psycopg
from psycopg import sql
from psycopg.rows import dict_row
from psycopg_pool import AsyncConnectionPool

from nocturna.config import settings
from nocturna.infrastructure.observability.logging import get_logger

logger = get_logger(__name__)

CLOSE_TIMEOUT_SECONDS = 30.0


class DatabasePoolManager:
    def __init__(self):
        self.pool: AsyncConnectionPool | None = None
        self._closed = False

    @property
    def is_open(self) -> bool:
        return self.pool is not None and not self._closed

    async def initialize(self) -> None:
        """Open the pool and prove one connection works before serving traffic."""
        if self.pool is not None:
            logger.warning("Database pool already initialized")
            return
        if self._closed:
            raise RuntimeError("Cannot reinitialize closed pool")

        pool_config = settings.get_db_pool_config()
        pool = AsyncConnectionPool(
            conninfo=settings.DATABASE_URL,
            open=False,
            check=AsyncConnectionPool.check_connection,
            configure=self._configure_connection,
            **pool_config,
        )

        try:
            await pool.open(wait=True)
            async with pool.connection() as conn:
                row = await (await conn.execute("SELECT 1 AS ok")).fetchone()
            if not row or row["ok"] != 1:
                raise RuntimeError("unexpected probe result")
        except Exception as e:
            logger.error("Failed to initialize database pool", error=str(e))
            await pool.close()
            raise RuntimeError(f"Database pool initialization failed: {e}") from e

        self.pool = pool
        logger.info(
            "Database pool ready",
            min_size=pool_config["min_size"],
            max_size=pool_config["max_size"],
            timeout=pool_config["timeout"],
        )

    @staticmethod
    async def _configure_connection(conn: psycopg.AsyncConnection) -> None:
        conn.row_factory = dict_row
        await conn.set_autocommit(True)

        app_name = f"nocturna-{settings.environment}"
        await conn.execute(sql.SQL("SET application_name = {}").format(sql.Literal(app_name)))
        await conn.execute("SET timezone = 'UTC'")
        await conn.execute("SET statement_timeout = '30s'")

    async def close(self) -> None:
        if not self.is_open:
            return

        logger.info("Closing database pool")
        self._closed = True
        try:
            await asyncio.wait_for(self.pool.close(), timeout=CLOSE_TIMEOUT_SECONDS)
        except TimeoutError:
            logger.warning("Database pool close timed out", timeout=CLOSE_TIMEOUT_SECONDS)

    @asynccontextmanager
    async def connection(self) -> AsyncGenerator[psycopg.AsyncConnection, None]:
        """
        Borrow a connection.

        Usage:
            async with db_pool.connection() as conn:
                await conn.execute(...)
        """
        if not self.is_open:
            raise RuntimeError("Database pool is not open")

        async with self.pool.connection() as conn:
            yield conn

    @asynccontextmanager
    async def transaction(self) -> AsyncGenerator[psycopg.AsyncConnection, None]:
        """Borrow a connection inside BEGIN/COMMIT; an exception rolls back."""
        async with self.connection() as conn:
            async with conn.transaction():
                yield conn

    async def health_check(self) -> dict[str, Any]:
        if not self.is_open:
            error = "Pool is closed" if self._closed else "Pool not initialized"
            return {"healthy": False, "error": error, "service": "database_pool"}

        started = time.perf_counter()
        try:
            async with self.connection() as conn:
                await conn.execute("SELECT 1")
        except (psycopg.Error, OSError) as e:
            logger.error("Database health check failed", error=str(e))
            return {
                "healthy": False,
                "service": "database_pool",
                "error": str(e),
                "error_type": type(e).__name__,
            }

        stats = self.pool.get_stats()
        return {
            "healthy": True,
            "service": "database_pool",
            "connection_time_ms": round((time.perf_counter() - started) * 1000, 2),
            "pool_stats": {
                "pool_size": stats.get("pool_size", 0),
                "pool_available": stats.get("pool_available", 0),
                "requests_waiting": stats.get("requests_waiting", 0),
            },
        }


db_pool = DatabasePoolManager()


async def db_health_check() -> dict[str, Any]:
    return await db_pool.health_check()
