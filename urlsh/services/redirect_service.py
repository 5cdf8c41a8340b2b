"""
Redirect Service

This service handles URL redirection logic:
- Resolving a short code to a live (non-expired) mapping
- Recording a visit: redirect count, last access and an access log row
"""

import logging
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from urlsh.core.exceptions import LinkExpiredError, ShortCodeNotFoundError
from urlsh.db.models import ShortURL, utcnow
from urlsh.services.access_log_service import AccessLogService
from urlsh.services.redirect_count_service import RedirectCountService
from urlsh.services.url_service import URLShorteningService

logger = logging.getLogger(__name__)


class RedirectService:
    """Service for handling URL redirections."""

    def __init__(self, session: AsyncSession):
        """
        Initialize the redirect service with a database session.

        Args:
            session: Async database session for database operations
        """
        self.session = session
        self.url_service = URLShorteningService(session)
        self.redirect_count_service = RedirectCountService(session)
        self.access_log_service = AccessLogService(session)

    async def resolve(self, short_code: str) -> ShortURL:
        """
        Get the mapping a redirect for ``short_code`` should follow.

        Raises:
            ShortCodeNotFoundError: If the code is unknown
            LinkExpiredError: If the link's expiration has passed
        """
        short_url = await self.url_service.get_by_short_code(short_code)
        if short_url is None:
            raise ShortCodeNotFoundError(short_code)
        if short_url.is_expired():
            raise LinkExpiredError(short_code)
        return short_url

    async def record_visit(
        self,
        short_url_id: int,
        ip_address: str,
        user_agent: Optional[str] = None,
    ) -> None:
        """
        Count one redirect and log who made it.

        Commit is handled by the caller.
        """
        now = utcnow()
        await self.redirect_count_service.increment_redirect_count(short_url_id, now=now)
        await self.access_log_service.log_access(
            short_url_id=short_url_id,
            ip_address=ip_address,
            user_agent=user_agent,
            accessed_at=now,
        )
        logger.debug(f"Recorded visit to short URL {short_url_id} from {ip_address}")

    async def visit(
        self,
        short_code: str,
        ip_address: str,
        user_agent: Optional[str] = None,
    ) -> ShortURL:
        """
        Resolve a short code, record the visit and return the updated mapping.

        Raises:
            ShortCodeNotFoundError: If the code is unknown
            LinkExpiredError: If the link's expiration has passed
        """
        short_url = await self.resolve(short_code)
        await self.record_visit(short_url.id, ip_address, user_agent)
        await self.session.commit()
        await self.session.refresh(short_url)
        return short_url
