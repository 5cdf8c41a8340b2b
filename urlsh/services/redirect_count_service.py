"""
Redirect Count Service

This service handles redirect-count bookkeeping for short URLs.

Design Decisions:
- Uses database-level atomic increment instead of read-modify-write
- last_accessed and last_modified move together with the counter
- Commit is left to the caller (request session or background task)
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession

from urlsh.db.models import ShortURL, utcnow


class RedirectCountService:
    """
    Service for managing redirect counts.

    Called from the redirect background task and from the explicit
    increment endpoint.
    """

    def __init__(self, session: AsyncSession):
        """
        Initialize the redirect count service with a database session.

        Args:
            session: Async database session for database operations
        """
        self.session = session

    async def increment_redirect_count(self, short_url_id: int, now: Optional[datetime] = None) -> None:
        """
        Increment the redirect count for a short URL atomically.

        Uses a single UPDATE so concurrent redirects never lose increments.
        Does nothing if the row doesn't exist.

        Args:
            short_url_id: Primary key of the ShortURL
            now: Timestamp recorded as last access
        """
        now = now or utcnow()
        statement = (
            update(ShortURL)
            .where(ShortURL.id == short_url_id)
            .values(
                redirect_count=ShortURL.redirect_count + 1,
                last_accessed=now,
                last_modified=now,
            )
        )

        await self.session.execute(statement)
