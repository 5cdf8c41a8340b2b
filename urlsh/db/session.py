"""
Database Session Management with Connection Pooling

This module handles async database connections using SQLAlchemy's async engine.
Uses a database abstraction layer to support different database backends.

Key Features:
- Database abstraction: SQLite or PostgreSQL picked from DATABASE_URL
- Connection pooling: Configured per database type
- Async session management: Proper async context management
- Error handling: Automatic rollback on exceptions

Engine and session factory are built once by the application factory and
kept on app.state; nothing here is a module-level singleton.
"""

from typing import AsyncGenerator

from fastapi import Request
from sqlalchemy.engine import make_url
from sqlalchemy.exc import ArgumentError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker
from sqlmodel import SQLModel
from sqlmodel.ext.asyncio.session import AsyncSession as SQLModelAsyncSession

from urlsh.core.exceptions import ConfigurationError
from urlsh.core.setting import Settings
from urlsh.db.interface import DatabaseAdapter
from urlsh.db.postgres_adapter import PostgreSQLAdapter
from urlsh.db.sqlite_adapter import SQLiteAdapter


def get_database_adapter(config: Settings) -> DatabaseAdapter:
    """
    Pick the adapter matching the backend named in DATABASE_URL.

    Raises:
        ConfigurationError: If the URL is malformed or names an unsupported backend
    """
    try:
        backend = make_url(config.DATABASE_URL).get_backend_name()
    except ArgumentError as e:
        raise ConfigurationError(f"invalid DATABASE_URL: {e}") from e

    if backend == "sqlite":
        return SQLiteAdapter()
    if backend == "postgresql":
        return PostgreSQLAdapter(
            max_open_conns=config.DB_MAX_OPEN_CONNS,
            max_idle_conns=config.DB_MAX_IDLE_CONNS,
            max_idle_time=config.DB_MAX_IDLE_TIME,
        )
    raise ConfigurationError(f"unsupported database backend: {backend}")


def create_engine_from_settings(config: Settings) -> AsyncEngine:
    adapter = get_database_adapter(config)
    return adapter.create_engine(config.DATABASE_URL)


def create_session_maker(engine: AsyncEngine) -> async_sessionmaker:
    """
    Create async session factory.

    expire_on_commit=False keeps attributes readable after commit.
    """
    return async_sessionmaker(
        engine,
        class_=SQLModelAsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


async def create_tables(engine: AsyncEngine) -> None:
    """Create any missing tables (local development and tests)."""
    async with engine.begin() as connection:
        await connection.run_sync(SQLModel.metadata.create_all)


def get_session_maker(request: Request) -> async_sessionmaker:
    """Dependency returning the session factory wired into the app."""
    return request.app.state.session_maker


async def get_session(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """
    Dependency function for FastAPI to get database session.

    This function:
    - Creates a new async session from the app's factory
    - Yields it to the endpoint
    - Automatically commits on success
    - Rolls back on exception

    Usage in FastAPI:
        @router.get("/endpoint")
        async def endpoint(session: AsyncSession = Depends(get_session)):
            pass
    """
    async with get_session_maker(request)() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
