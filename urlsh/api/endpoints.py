"""
FastAPI Endpoints for URL Shortener Service

This module defines all REST API endpoints with minimal logic.
Endpoints only handle:
- Request validation (Pydantic models)
- Error handling and HTTP responses
- Delegating to service layer

Routes:
- POST /v1/shorten                        create a short URL
- GET  /v1/shorten/find?url=              find by short URL, short code or original URL
- GET  /v1/shorten/{short_code}           statistics
- PUT  /v1/shorten/{short_code}           count a visit and return statistics
- GET  /v1/shorten/{short_code}/last      last access
- GET  /v1/shorten/{short_code}/top-agents
- GET  /v1/shorten/{short_code}/ips
- GET  /{short_code}                      redirect

/v1/shorten/find is registered before /v1/shorten/{short_code} so it is
matched first.
"""

import logging

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Query, Request, status
from fastapi.responses import RedirectResponse
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from urlsh.api.dependencies import get_code_generator, get_settings
from urlsh.api.schemas import (
    AccessLogResponse,
    ShortenRequest,
    ShortenResponse,
    StatsResponse,
    TopUserAgentsResponse,
    UniqueIPsResponse,
)
from urlsh.core.exceptions import (
    DatabaseError,
    DuplicateShortCodeError,
    GenerationError,
    InvalidInputError,
    InvalidURLError,
    LinkExpiredError,
    ShortCodeNotFoundError,
)
from urlsh.core.setting import Settings
from urlsh.core.validators import get_client_ip, sanitize_short_code
from urlsh.db.session import get_session, get_session_maker
from urlsh.gen.shortener import CodeGenerator
from urlsh.services.background_tasks import record_visit_background
from urlsh.services.redirect_service import RedirectService
from urlsh.services.stats_service import StatsService
from urlsh.services.url_service import URLShorteningService

logger = logging.getLogger(__name__)

router = APIRouter()


def require_short_code(short_code: str) -> str:
    """
    Validate a short code taken from the path.

    Raises:
        HTTPException 400: If short code format is invalid
    """
    sanitized_code = sanitize_short_code(short_code)
    if not sanitized_code:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid short code format: '{short_code}'. "
                   f"Short codes may only contain letters, digits, '-' and '_'."
        )
    return sanitized_code


def not_found(short_code: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail=f"Short code '{short_code}' not found"
    )


@router.post(
    "/v1/shorten",
    response_model=ShortenResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a short URL",
    description="Takes a long URL and a generation method and returns a short URL"
)
async def create_short_url(
    body: ShortenRequest,
    session: AsyncSession = Depends(get_session),
    generator: CodeGenerator = Depends(get_code_generator),
    settings: Settings = Depends(get_settings),
) -> ShortenResponse:
    """
    Create a new short URL from a long URL.

    Returns:
        ShortenResponse with short_code, short_url, original_url, method and expiration
    """
    url_service = URLShorteningService(
        session,
        generator=generator,
        max_url_length=settings.MAX_URL_LENGTH,
        link_ttl_hours=settings.LINK_TTL_HOURS,
    )

    try:
        short_url_obj = await url_service.create_short_url(
            body.url,
            method=body.method,
            custom_alias=body.custom_alias,
            **body.utm_params(),
        )
    except (InvalidURLError, InvalidInputError) as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        )
    except DuplicateShortCodeError as e:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=str(e)
        )
    except GenerationError as e:
        logger.error(f"Short code generation failed: {str(e)}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to generate short code"
        )
    except DatabaseError as e:
        logger.error(str(e), exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=str(e)
        )

    return ShortenResponse(
        short_code=short_url_obj.short_code,
        short_url=short_url_obj.short_url,
        original_url=short_url_obj.original_url,
        method=short_url_obj.method,
        expiration=short_url_obj.expiration,
    )


@router.get(
    "/v1/shorten/find",
    response_model=StatsResponse,
    summary="Find a short URL",
    description="Looks a mapping up by its short URL, short code or original URL"
)
async def find_with_url(
    url: str = Query(..., min_length=1, description="Short URL, short code or original URL"),
    session: AsyncSession = Depends(get_session),
) -> StatsResponse:
    url_service = URLShorteningService(session)
    short_url = await url_service.find_with_url(url)
    if short_url is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"No short URL found for '{url}'"
        )

    stats = await StatsService(session).get_stats(short_url.short_code)
    return StatsResponse(**stats)


@router.get(
    "/v1/shorten/{short_code}",
    response_model=StatsResponse,
    summary="Get URL statistics",
    description="Returns the mapping for a short code including its redirect count"
)
async def get_url_stats(
    short_code: str,
    session: AsyncSession = Depends(get_session),
) -> StatsResponse:
    """
    Get statistics for a short URL.

    Raises:
        HTTPException 400: If short code format is invalid
        HTTPException 404: If short code not found
    """
    short_code = require_short_code(short_code)

    stats = await StatsService(session).get_stats(short_code)
    if not stats:
        raise not_found(short_code)

    return StatsResponse(**stats)


@router.put(
    "/v1/shorten/{short_code}",
    response_model=StatsResponse,
    summary="Count a visit",
    description="Increments the redirect count, records the access and returns the statistics"
)
async def update_redirect_count(
    short_code: str,
    request: Request,
    session: AsyncSession = Depends(get_session),
) -> StatsResponse:
    short_code = require_short_code(short_code)

    redirect_service = RedirectService(session)
    try:
        await redirect_service.visit(
            short_code,
            ip_address=get_client_ip(request),
            user_agent=request.headers.get("User-Agent"),
        )
    except ShortCodeNotFoundError:
        raise not_found(short_code)
    except LinkExpiredError as e:
        raise HTTPException(status_code=status.HTTP_410_GONE, detail=str(e))

    stats = await StatsService(session).get_stats(short_code)
    return StatsResponse(**stats)


@router.get(
    "/v1/shorten/{short_code}/last",
    response_model=AccessLogResponse,
    summary="Last access",
)
async def last_accessed(
    short_code: str,
    session: AsyncSession = Depends(get_session),
) -> AccessLogResponse:
    short_code = require_short_code(short_code)

    try:
        access_log = await StatsService(session).last_accessed(short_code)
    except ShortCodeNotFoundError:
        raise not_found(short_code)

    if access_log is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Short code '{short_code}' has not been accessed yet"
        )
    return AccessLogResponse.model_validate(access_log)


@router.get(
    "/v1/shorten/{short_code}/top-agents",
    response_model=TopUserAgentsResponse,
    summary="Most frequent user agents",
)
async def top_user_agents(
    short_code: str,
    session: AsyncSession = Depends(get_session),
) -> TopUserAgentsResponse:
    short_code = require_short_code(short_code)

    try:
        user_agents = await StatsService(session).top_user_agents(short_code)
    except ShortCodeNotFoundError:
        raise not_found(short_code)

    return TopUserAgentsResponse(short_code=short_code, user_agents=user_agents)


@router.get(
    "/v1/shorten/{short_code}/ips",
    response_model=UniqueIPsResponse,
    summary="Distinct visitor IP addresses",
)
async def unique_ips(
    short_code: str,
    session: AsyncSession = Depends(get_session),
) -> UniqueIPsResponse:
    short_code = require_short_code(short_code)

    try:
        ip_addresses = await StatsService(session).unique_ip_addresses(short_code)
    except ShortCodeNotFoundError:
        raise not_found(short_code)

    return UniqueIPsResponse(short_code=short_code, ip_addresses=ip_addresses)


@router.get(
    "/{short_code}",
    status_code=status.HTTP_302_FOUND,
    summary="Redirect to original URL",
    description="Takes a short code and redirects to the original long URL"
)
async def redirect_to_url(
    short_code: str,
    request: Request,
    background_tasks: BackgroundTasks,
    session: AsyncSession = Depends(get_session),
    session_maker: async_sessionmaker = Depends(get_session_maker),
) -> RedirectResponse:
    """
    Redirect to the original URL for a given short code.

    The visit is recorded in a background task with its own session.

    Raises:
        HTTPException 400: If short code format is invalid
        HTTPException 404: If short code not found
        HTTPException 410: If the link has expired
    """
    short_code = require_short_code(short_code)

    redirect_service = RedirectService(session)
    try:
        short_url = await redirect_service.resolve(short_code)
    except ShortCodeNotFoundError:
        raise not_found(short_code)
    except LinkExpiredError as e:
        raise HTTPException(status_code=status.HTTP_410_GONE, detail=str(e))

    background_tasks.add_task(
        record_visit_background,
        session_maker,
        short_url_id=short_url.id,
        ip_address=get_client_ip(request),
        user_agent=request.headers.get("User-Agent"),
    )

    return RedirectResponse(
        url=short_url.original_url,
        status_code=status.HTTP_302_FOUND
    )
