"""
PostgreSQL Database Adapter

Production backend, driven through asyncpg. Pool sizing comes from the
DB_MAX_OPEN_CONNS / DB_MAX_IDLE_CONNS / DB_MAX_IDLE_TIME settings:
- pool_size: connections kept open when idle
- max_overflow: extra connections allowed up to the open-connection ceiling
- pool_recycle: connections older than the idle time are replaced
"""

from typing import Any, Optional

from sqlalchemy.pool import Pool

from urlsh.db.interface import DatabaseAdapter


class PostgreSQLAdapter(DatabaseAdapter):
    """PostgreSQL database adapter implementation."""

    def __init__(self, max_open_conns: int = 30, max_idle_conns: int = 30, max_idle_time: int = 900):
        self.max_open_conns = max_open_conns
        self.max_idle_conns = min(max_idle_conns, max_open_conns)
        self.max_idle_time = max_idle_time

    def get_pool_class(self) -> Optional[type[Pool]]:
        # Default AsyncAdaptedQueuePool
        return None

    def get_connect_args(self) -> dict[str, Any]:
        return {}

    def get_engine_kwargs(self) -> dict[str, Any]:
        return {
            "echo": False,
            "pool_size": self.max_idle_conns,
            "max_overflow": self.max_open_conns - self.max_idle_conns,
            "pool_recycle": self.max_idle_time,
            "pool_pre_ping": True,
        }

    def get_dialect_name(self) -> str:
        return "postgresql"
