"""Shared asyncpg pool for the Postgres stores.

Every store takes the same PostgresPool, so task claims, agent status
writes, and audit appends all go through one set of connections sized by
the storage settings.
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import asyncpg

from lessor.config.models.storage import StorageConfig
from lessor.db.errors import ConnectionError
from lessor.observability.logging import get_logger

logger = get_logger(__name__)


class PostgresPool:
    """Lazily connected asyncpg pool.

    Usage:
        pool = PostgresPool.from_config(get_settings().storage)
        async with pool.acquire() as conn:
            await conn.fetchval("SELECT 1")
        await pool.close()
    """

    def __init__(
        self,
        dsn: str,
        min_size: int = 2,
        max_size: int = 10,
        max_inactive_connection_lifetime: float = 300.0,
        command_timeout: float = 30.0,
        application_name: str = "lessor",
    ) -> None:
        self._dsn = dsn
        self._pool_options = {
            "min_size": min_size,
            "max_size": max_size,
            "max_inactive_connection_lifetime": max_inactive_connection_lifetime,
            "command_timeout": command_timeout,
            # Shows up in pg_stat_activity next to each claim query
            "server_settings": {"application_name": application_name},
        }
        self._pool: asyncpg.Pool | None = None

    @classmethod
    def from_config(
        cls,
        storage: StorageConfig,
        application_name: str = "lessor",
    ) -> "PostgresPool":
        """Build a pool from the storage section of the settings."""
        return cls(
            dsn=storage.database_url,
            min_size=storage.min_pool_size,
            max_size=storage.max_pool_size,
            max_inactive_connection_lifetime=storage.max_inactive_connection_lifetime,
            command_timeout=storage.command_timeout,
            application_name=application_name,
        )

    @property
    def dsn(self) -> str:
        return self._dsn

    @property
    def is_connected(self) -> bool:
        return self._pool is not None

    async def connect(self) -> None:
        """Open the pool; a no-op when already open.

        Raises:
            ConnectionError: If the database cannot be reached
        """
        if self._pool is not None:
            return
        try:
            self._pool = await asyncpg.create_pool(dsn=self._dsn, **self._pool_options)
        except (asyncpg.PostgresError, OSError) as e:
            logger.error("postgres_pool_connection_failed", error=str(e))
            raise ConnectionError(f"Failed to connect to PostgreSQL: {e}", cause=e) from e

        logger.info(
            "postgres_pool_connected",
            min_size=self._pool_options["min_size"],
            max_size=self._pool_options["max_size"],
        )

    async def close(self) -> None:
        if self._pool is None:
            return
        await self._pool.close()
        self._pool = None
        logger.info("postgres_pool_closed")

    @asynccontextmanager
    async def acquire(self) -> AsyncIterator[asyncpg.Connection]:
        """Borrow a connection, connecting first if needed.

        Driver and socket errors raised inside the block surface as
        ConnectionError, which the dispatcher and health monitor treat as
        a store outage.
        """
        await self.connect()
        try:
            async with self._pool.acquire() as connection:
                yield connection
        except (asyncpg.PostgresError, OSError) as e:
            logger.error("postgres_connection_error", error=str(e))
            raise ConnectionError(f"PostgreSQL error: {e}", cause=e) from e

    async def health_check(self) -> bool:
        """True when the pool is open and answers a trivial query."""
        if self._pool is None:
            return False
        try:
            async with self._pool.acquire() as conn:
                await conn.fetchval("SELECT 1")
        except (asyncpg.PostgresError, OSError) as e:
            logger.warning("postgres_health_check_failed", error=str(e))
            return False
        return True
