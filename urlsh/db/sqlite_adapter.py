"""
SQLite Database Adapter

This module implements the DatabaseAdapter interface for SQLite.
All SQLite-specific configuration and behavior is encapsulated here.

SQLite is a file-based database that's perfect for:
- Local development
- Testing
- Single-instance deployments

Key characteristics:
- File-based (single .db file)
- No server required
- Single writer at a time (file locking)
"""

from typing import Any

from sqlalchemy.pool import NullPool

from urlsh.db.interface import DatabaseAdapter


class SQLiteAdapter(DatabaseAdapter):
    """
    SQLite database adapter implementation.

    SQLite uses file-based storage and has different characteristics than
    server-based databases like PostgreSQL.
    """

    def get_pool_class(self) -> type[NullPool]:
        """
        Get the connection pool class for SQLite.

        SQLite uses NullPool because the file-based database doesn't benefit
        from connection pooling and handles one writer at a time.

        Returns:
            NullPool class
        """
        return NullPool

    def get_connect_args(self) -> dict[str, Any]:
        return {
            "check_same_thread": False
        }

    def get_engine_kwargs(self) -> dict[str, Any]:
        return {
            "echo": False  # Set to True only for SQL debugging in development
        }

    def get_dialect_name(self) -> str:
        return "sqlite"
