"""
Database Abstraction Interface

This module defines the database abstraction layer that allows switching between
different database backends (SQLite, PostgreSQL) without changing the
rest of the codebase.
"""

from abc import ABC, abstractmethod
from typing import Any, Optional

from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine
from sqlalchemy.pool import Pool


class DatabaseAdapter(ABC):
    """
    Abstract base class for database adapters.

    Subclasses describe their backend through the get_* hooks; engine
    creation itself is shared.
    """

    def create_engine(self, database_url: str, **kwargs) -> AsyncEngine:
        """
        Create and configure the async database engine.

        Args:
            database_url: Connection string for the database
            **kwargs: Additional engine options (merged with adapter defaults)

        Returns:
            Configured AsyncEngine instance
        """
        engine_kwargs = self.get_engine_kwargs()
        engine_kwargs.update(kwargs)

        pool_class = self.get_pool_class()
        if pool_class is not None:
            engine_kwargs["poolclass"] = pool_class

        return create_async_engine(
            database_url,
            connect_args=self.get_connect_args(),
            **engine_kwargs
        )

    @abstractmethod
    def get_pool_class(self) -> Optional[type[Pool]]:
        """
        Get the connection pool class for this database type.

        Returns:
            Pool class (e.g., NullPool for SQLite) or None to use default
        """

    @abstractmethod
    def get_connect_args(self) -> dict[str, Any]:
        """Connection arguments passed to the DBAPI driver."""

    @abstractmethod
    def get_engine_kwargs(self) -> dict[str, Any]:
        """Additional engine configuration specific to this database type."""

    @abstractmethod
    def get_dialect_name(self) -> str:
        """SQLAlchemy dialect name (e.g., 'sqlite', 'postgresql')."""
