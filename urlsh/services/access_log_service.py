"""
Access Log Service

This service records redirects and answers the analytics queries built on
them: last access, most frequent user agents and distinct client IPs.

Design Decisions:
- One row per redirect; aggregation happens at query time
- Queries join through short_urls so callers only deal in short codes
"""

from datetime import datetime
from typing import List, Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from urlsh.core.validators import MAX_IP_ADDRESS_LENGTH
from urlsh.db.models import AccessLog, ShortURL, utcnow

TOP_USER_AGENTS_LIMIT = 5


class AccessLogService:
    """Service for logging and querying URL accesses."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def log_access(
        self,
        short_url_id: int,
        ip_address: str,
        user_agent: Optional[str] = None,
        accessed_at: Optional[datetime] = None,
    ) -> AccessLog:
        """
        Record one access to a short URL.

        Args:
            short_url_id: Primary key of the ShortURL that was accessed
            ip_address: IP address of the visitor
            user_agent: User agent string (optional)
            accessed_at: Access time, defaults to now

        Note:
        - Commit is handled by the caller
        """
        access_log = AccessLog(
            short_url_id=short_url_id,
            ip_address=ip_address[:MAX_IP_ADDRESS_LENGTH],
            user_agent=user_agent[:500] if user_agent else None,
            accessed_at=accessed_at or utcnow(),
        )

        self.session.add(access_log)
        await self.session.flush()
        return access_log

    async def last_accessed(self, short_code: str) -> Optional[AccessLog]:
        """Most recent access log for a short code, None if never accessed."""
        statement = (
            select(AccessLog)
            .join(ShortURL, ShortURL.id == AccessLog.short_url_id)
            .where(ShortURL.short_code == short_code)
            .order_by(AccessLog.accessed_at.desc(), AccessLog.id.desc())
            .limit(1)
        )
        result = await self.session.execute(statement)
        return result.scalars().first()

    async def unique_ip_addresses(self, short_code: str) -> List[str]:
        statement = (
            select(AccessLog.ip_address)
            .join(ShortURL, ShortURL.id == AccessLog.short_url_id)
            .where(ShortURL.short_code == short_code)
            .distinct()
            .order_by(AccessLog.ip_address)
        )
        result = await self.session.execute(statement)
        return list(result.scalars().all())

    async def top_user_agents(self, short_code: str, limit: int = TOP_USER_AGENTS_LIMIT) -> List[str]:
        """
        User agents of a short code ordered by how often they appear.

        Accesses without a user agent are not counted.
        """
        hits = func.count(AccessLog.id)
        statement = (
            select(AccessLog.user_agent)
            .join(ShortURL, ShortURL.id == AccessLog.short_url_id)
            .where(ShortURL.short_code == short_code, AccessLog.user_agent.is_not(None))
            .group_by(AccessLog.user_agent)
            .order_by(hits.desc(), AccessLog.user_agent)
            .limit(limit)
        )
        result = await self.session.execute(statement)
        return list(result.scalars().all())
