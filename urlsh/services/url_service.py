"""
URL Shortening Service

This service handles the core business logic for URL shortening:
- Validating the original URL
- Asking the code generator for a short code
- Persisting the mapping and resolving conflicts on short codes
- Looking mappings up by short code, short URL or original URL

Design Decisions:
- The generator stays pure; every collision policy lives here
- An existing row with the same code and the same URL is returned as-is,
  which makes HASH links idempotent; an expired one is renewed first
- Custom aliases that shadow the app's own paths are rejected
- RANDOM and SECURE codes are regenerated when they collide
- CUSTOM and HASH collisions with a different URL are reported to the caller
- The unique index on short_code settles races between concurrent inserts
"""

import logging
from datetime import datetime, timedelta
from typing import Dict, Optional

from sqlalchemy import or_, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from urlsh.core.exceptions import (
    DatabaseError,
    DuplicateShortCodeError,
    InvalidInputError,
    InvalidURLError,
)
from urlsh.core.validators import RESERVED_SHORT_CODES, is_valid_url
from urlsh.db.models import ShortURL, utcnow
from urlsh.gen.shortener import CodeGenerator, Method

logger = logging.getLogger(__name__)

MAX_GENERATION_ATTEMPTS = 3

# Methods whose output changes between calls, so a collision can be retried
REGENERABLE_METHODS = frozenset({Method.RANDOM, Method.SECURE})


class URLShorteningService:
    """
    Core business logic for URL shortening.

    Handles URL validation, code generation and database operations.
    Separated from API layer for testability and maintainability.
    """

    def __init__(
        self,
        session: AsyncSession,
        generator: Optional[CodeGenerator] = None,
        max_url_length: int = 2048,
        link_ttl_hours: int = 0,
    ):
        """
        Initialize the URL shortening service.

        Args:
            session: Database session
            generator: Code generator (required for create_short_url)
            max_url_length: Longest original URL accepted
            link_ttl_hours: Lifetime of new links in hours, 0 for no expiry
        """
        self.session = session
        self.generator = generator
        self.max_url_length = max_url_length
        self.link_ttl_hours = link_ttl_hours

    async def get_by_short_code(self, short_code: str) -> Optional[ShortURL]:
        """
        Retrieve the mapping for a given short code.

        Returns:
            ShortURL object if found, None otherwise
        """
        statement = select(ShortURL).where(ShortURL.short_code == short_code)
        result = await self.session.execute(statement)
        return result.scalar_one_or_none()

    async def find_with_url(self, url: str) -> Optional[ShortURL]:
        """
        Find a mapping by its short URL, its short code or its original URL.

        Short URL and short code matches win over original URL matches.

        Returns:
            ShortURL object if found, None otherwise
        """
        statement = (
            select(ShortURL)
            .where(or_(ShortURL.short_url == url, ShortURL.short_code == url))
            .limit(1)
        )
        result = await self.session.execute(statement)
        found = result.scalars().first()
        if found:
            return found

        statement = (
            select(ShortURL)
            .where(ShortURL.original_url == url)
            .order_by(ShortURL.id)
            .limit(1)
        )
        result = await self.session.execute(statement)
        return result.scalars().first()

    async def create_short_url(
        self,
        original_url: str,
        method: Method = Method.RANDOM,
        custom_alias: Optional[str] = None,
        **utm_params: Optional[str],
    ) -> ShortURL:
        """
        Create a new short URL, or return the existing one for an identical code and URL.

        Args:
            original_url: The long URL to shorten
            method: Generation method
            custom_alias: Alias for the CUSTOM method
            **utm_params: utm_source, utm_medium, utm_campaign, utm_term, utm_content

        Returns:
            Persisted ShortURL

        Raises:
            InvalidURLError: If URL format is invalid
            InvalidInputError: If the method or alias is rejected
            GenerationError: If the generator cannot obtain randomness
            DuplicateShortCodeError: If the code belongs to another URL
            DatabaseError: If database operation fails
        """
        if not is_valid_url(original_url, self.max_url_length):
            raise InvalidURLError(
                original_url,
                reason="Invalid URL format. URL must use http:// or https:// and have a valid domain"
            )

        if self.generator is None:
            raise DatabaseError("Service must be initialized with a code generator")

        method = Method.parse(method)

        if method is Method.CUSTOM and custom_alias in RESERVED_SHORT_CODES:
            raise InvalidInputError(f"custom alias '{custom_alias}' is reserved")

        for attempt in range(1, MAX_GENERATION_ATTEMPTS + 1):
            result = self.generator.generate(method, original_url, custom_alias)

            existing = await self._safe_get_by_short_code(result.short_code)
            if existing is None:
                break
            if existing.original_url == original_url:
                if existing.is_expired():
                    return await self._renew(existing, utm_params)
                logger.info(f"Short code '{existing.short_code}' already maps to {original_url[:50]}")
                return existing
            if method not in REGENERABLE_METHODS:
                raise DuplicateShortCodeError(result.short_code)

            logger.warning(
                f"Short code collision on '{result.short_code}' "
                f"(method={method.value}, attempt={attempt})"
            )
        else:
            raise DuplicateShortCodeError(result.short_code)

        now = utcnow()
        expiration = self._expiration(now)

        short_url = ShortURL(
            original_url=original_url,
            short_code=result.short_code,
            short_url=result.short_url,
            method=method.value,
            expiration=expiration,
            redirect_count=0,
            created_at=now,
            last_accessed=now,
            last_modified=now,
            **{key: value for key, value in utm_params.items() if value is not None},
        )

        try:
            self.session.add(short_url)
            await self.session.flush()
            await self.session.commit()
            await self.session.refresh(short_url)
        except IntegrityError as e:
            await self.session.rollback()
            raise DuplicateShortCodeError(result.short_code) from e
        except SQLAlchemyError as e:
            await self.session.rollback()
            raise DatabaseError(f"Failed to create short URL: {str(e)}", original_error=e) from e

        logger.info(f"Created short code '{short_url.short_code}' ({method.value}) for {original_url[:50]}")
        return short_url

    def _expiration(self, now: datetime) -> Optional[datetime]:
        return now + timedelta(hours=self.link_ttl_hours) if self.link_ttl_hours else None

    async def _renew(self, short_url: ShortURL, utm_params: Dict[str, Optional[str]]) -> ShortURL:
        """
        Give an expired mapping a fresh lifetime.

        The row keeps its code, counters and access logs; expiration,
        last_modified and the supplied UTM fields are replaced.
        """
        now = utcnow()
        short_url.expiration = self._expiration(now)
        short_url.last_modified = now
        for key, value in utm_params.items():
            if value is not None:
                setattr(short_url, key, value)

        try:
            self.session.add(short_url)
            await self.session.commit()
            await self.session.refresh(short_url)
        except SQLAlchemyError as e:
            await self.session.rollback()
            raise DatabaseError(f"Failed to renew short URL: {str(e)}", original_error=e) from e

        logger.info(f"Renewed expired short code '{short_url.short_code}'")
        return short_url

    async def _safe_get_by_short_code(self, short_code: str) -> Optional[ShortURL]:
        try:
            return await self.get_by_short_code(short_code)
        except SQLAlchemyError as e:
            raise DatabaseError(f"Failed to look up short code: {str(e)}", original_error=e) from e
