"""
Logging Middleware for Request/Response Logging

This middleware logs all HTTP requests and responses for observability.
It captures:
- Request method and path
- Response status code
- Request processing time
- Client IP address

Design Decisions:
- Uses Starlette's BaseHTTPMiddleware for compatibility
- Logs to standard Python logging (configured by configure_logging)
"""

import logging
import time

from fastapi import FastAPI, Request
from starlette.middleware.base import BaseHTTPMiddleware

from urlsh.core.validators import get_client_ip

logger = logging.getLogger("urlsh.access")


class LoggingMiddleware(BaseHTTPMiddleware):
    """
    Middleware for logging HTTP requests and responses.

    It wraps the request/response cycle to add logging without
    modifying endpoint code.
    """

    async def dispatch(self, request: Request, call_next):
        """
        Process request and log details.

        Args:
            request: The incoming HTTP request
            call_next: The next middleware/endpoint in the chain

        Returns:
            Response object
        """
        client_ip = get_client_ip(request)
        start_time = time.perf_counter()

        response = await call_next(request)

        process_time = time.perf_counter() - start_time

        # Format: METHOD PATH STATUS_CODE PROCESS_TIME_MS CLIENT_IP
        logger.info(
            f"{request.method} {request.url.path} "
            f"{response.status_code} {process_time*1000:.2f}ms "
            f"IP:{client_ip}"
        )

        response.headers["X-Process-Time"] = str(process_time)

        return response


def add_logging_middleware(app: FastAPI) -> None:
    """
    Add logging middleware to FastAPI app.

    Args:
        app: FastAPI application instance
    """
    app.add_middleware(LoggingMiddleware)
