"""Alembic environment for the orchestration schema.

The target database is the one the stores use: storage.database_url
from the lessor settings, so LESSOR_STORAGE__CONNECTION_URL, DATABASE_URL
and the TOML files steer migrations and the running service alike.
`alembic -x url=...` overrides it for a one-off run.
"""

import asyncio
from logging.config import fileConfig

from alembic import context
from sqlalchemy import pool
from sqlalchemy.engine import Connection
from sqlalchemy.ext.asyncio import create_async_engine

from lessor.config import get_settings

config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name)


def migration_url() -> str:
    override = context.get_x_argument(as_dictionary=True).get("url")
    if override:
        return override
    return get_settings().storage.migration_url


def run_migrations_offline() -> None:
    """Render the revisions as SQL (`alembic upgrade head --sql`)."""
    # Revisions use op.* calls only, so there is no metadata to compare against
    context.configure(url=migration_url(), target_metadata=None, literal_binds=True)
    with context.begin_transaction():
        context.run_migrations()


async def run_migrations_online() -> None:
    engine = create_async_engine(migration_url(), poolclass=pool.NullPool)

    def apply(connection: Connection) -> None:
        context.configure(connection=connection, target_metadata=None)
        with context.begin_transaction():
            context.run_migrations()

    try:
        async with engine.connect() as connection:
            await connection.run_sync(apply)
    finally:
        await engine.dispose()


if context.is_offline_mode():
    run_migrations_offline()
else:
    asyncio.run(run_migrations_online())
