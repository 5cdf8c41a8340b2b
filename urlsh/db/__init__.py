"""
Database module with abstraction layer.

This module provides:
- DatabaseAdapter interface: Abstract base class for database implementations
- SQLiteAdapter / PostgreSQLAdapter: Backend-specific configuration
- Session management: Engine, session factory and the FastAPI session dependency

To add a new database backend:
1. Create a new adapter class inheriting from DatabaseAdapter
2. Implement all abstract methods
3. Return it from get_database_adapter() in session.py
"""

from urlsh.db.interface import DatabaseAdapter
from urlsh.db.session import (
    create_engine_from_settings,
    create_session_maker,
    create_tables,
    get_database_adapter,
    get_session,
    get_session_maker,
)

__all__ = [
    "DatabaseAdapter",
    "create_engine_from_settings",
    "create_session_maker",
    "create_tables",
    "get_database_adapter",
    "get_session",
    "get_session_maker",
]
