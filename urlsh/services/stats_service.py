"""
Statistics Service

This service handles retrieving statistics for short URLs.

Aggregates data from:
- URL service: the mapping and its bookkeeping fields
- Access log service: last access, top user agents, unique IPs
"""

from typing import List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from urlsh.core.exceptions import ShortCodeNotFoundError
from urlsh.db.models import AccessLog, as_utc
from urlsh.services.access_log_service import AccessLogService
from urlsh.services.url_service import URLShorteningService


class StatsService:
    """
    Service for retrieving URL statistics.

    Missing short codes raise ShortCodeNotFoundError so the analytics
    endpoints can tell "no such link" from "no accesses yet".
    """

    def __init__(self, session: AsyncSession):
        """
        Initialize the stats service with a database session.

        Args:
            session: Async database session for database operations
        """
        self.session = session
        self.url_service = URLShorteningService(session)
        self.access_log_service = AccessLogService(session)

    async def get_stats(self, short_code: str) -> Optional[dict]:
        """
        Get statistics for a short URL.

        Returns:
            Dictionary with the mapping's fields, None if short code not found
        """
        short_url = await self.url_service.get_by_short_code(short_code)

        if not short_url:
            return None

        return {
            "iid": short_url.iid,
            "original_url": short_url.original_url,
            "short_code": short_url.short_code,
            "short_url": short_url.short_url,
            "method": short_url.method,
            "redirect_count": short_url.redirect_count,
            "created_at": as_utc(short_url.created_at),
            "last_accessed": as_utc(short_url.last_accessed),
            "last_modified": as_utc(short_url.last_modified),
            "expiration": as_utc(short_url.expiration),
            "utm_source": short_url.utm_source,
            "utm_medium": short_url.utm_medium,
            "utm_campaign": short_url.utm_campaign,
            "utm_term": short_url.utm_term,
            "utm_content": short_url.utm_content,
        }

    async def _require(self, short_code: str) -> None:
        if await self.url_service.get_by_short_code(short_code) is None:
            raise ShortCodeNotFoundError(short_code)

    async def last_accessed(self, short_code: str) -> Optional[AccessLog]:
        await self._require(short_code)
        return await self.access_log_service.last_accessed(short_code)

    async def top_user_agents(self, short_code: str) -> List[str]:
        await self._require(short_code)
        return await self.access_log_service.top_user_agents(short_code)

    async def unique_ip_addresses(self, short_code: str) -> List[str]:
        await self._require(short_code)
        return await self.access_log_service.unique_ip_addresses(short_code)
