"""
Background Task Helpers

Provides helper functions for background tasks that create their own database sessions.
Background tasks cannot use the endpoint's session as it's closed after the endpoint returns.
"""

import logging
from typing import Optional

from sqlalchemy.ext.asyncio import async_sessionmaker

from urlsh.services.redirect_service import RedirectService

logger = logging.getLogger(__name__)


async def record_visit_background(
    session_maker: async_sessionmaker,
    short_url_id: int,
    ip_address: str,
    user_agent: Optional[str] = None
) -> None:
    """
    Background task to count a redirect and log the visitor.

    Creates its own database session as endpoint session is closed.
    Failures are logged; the redirect has already been served.

    Args:
        session_maker: Session factory wired into the app
        short_url_id: Primary key of the ShortURL that was accessed
        ip_address: IP address of the visitor
        user_agent: User agent string (optional)
    """
    try:
        async with session_maker() as session:
            redirect_service = RedirectService(session)
            await redirect_service.record_visit(
                short_url_id=short_url_id,
                ip_address=ip_address,
                user_agent=user_agent
            )
            await session.commit()
    except Exception as e:
        logger.error(
            f"Failed to record visit for short URL {short_url_id}: {str(e)}",
            exc_info=True
        )
