"""
Alembic Environment Configuration

This file configures Alembic to work with our async SQLModel/SQLAlchemy setup.
It handles:
- Database connection from settings
- Model imports for autogenerate
- Sync engine for SQLite, async engine (asyncpg) for PostgreSQL
"""

import asyncio
from logging.config import fileConfig

from sqlalchemy import create_engine, pool
from sqlalchemy.engine import Connection
from sqlalchemy.ext.asyncio import create_async_engine

from alembic import context
from sqlmodel import SQLModel

from urlsh.core.setting import settings
from urlsh.db import models  # noqa: F401  (registers tables on SQLModel.metadata)

config = context.config

database_url = settings.DATABASE_URL
is_sqlite = database_url.startswith("sqlite")

# Alembic drives SQLite through the sync driver
if database_url.startswith("sqlite+aiosqlite://"):
    database_url = database_url.replace("sqlite+aiosqlite://", "sqlite://", 1)

config.set_main_option("sqlalchemy.url", database_url)

# Interpret the config file for Python logging.
if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = SQLModel.metadata


def run_migrations_offline() -> None:
    """Run migrations in 'offline' mode.

    This configures the context with just a URL and emits the SQL
    to the script output instead of executing it.
    """
    context.configure(
        url=database_url,
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )

    with context.begin_transaction():
        context.run_migrations()


def do_run_migrations(connection: Connection) -> None:
    """Run migrations with a connection."""
    context.configure(
        connection=connection,
        target_metadata=target_metadata,
        render_as_batch=is_sqlite,
    )

    with context.begin_transaction():
        context.run_migrations()


async def run_async_migrations() -> None:
    connectable = create_async_engine(database_url, poolclass=pool.NullPool)

    async with connectable.connect() as connection:
        await connection.run_sync(do_run_migrations)

    await connectable.dispose()


def run_migrations_online() -> None:
    """Run migrations in 'online' mode."""
    if is_sqlite:
        connectable = create_engine(database_url, poolclass=pool.NullPool)

        with connectable.connect() as connection:
            do_run_migrations(connection)

        connectable.dispose()
    else:
        asyncio.run(run_async_migrations())


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
