"""
FastAPI Application Entry Point

This module builds the FastAPI application and configures:
- API routes
- Middleware (logging, CORS)
- Application metadata
- The objects shared by all requests: settings, database session factory,
  code generator

Design Decisions:
- create_app() wires every collaborator explicitly and stores it on app.state;
  endpoints receive them through dependencies
- Tests build their own app with a session factory of their choosing
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker

from urlsh import __version__
from urlsh.api import endpoints
from urlsh.core.logging_config import configure_logging
from urlsh.core.setting import Settings, check_settings, settings as default_settings
from urlsh.db.session import create_engine_from_settings, create_session_maker, create_tables
from urlsh.gen.shortener import CodeGenerator
from urlsh.middleware.logging import add_logging_middleware

logger = logging.getLogger(__name__)


def create_app(
    settings: Optional[Settings] = None,
    session_maker: Optional[async_sessionmaker] = None,
    generator: Optional[CodeGenerator] = None,
) -> FastAPI:
    """
    Build the application.

    Args:
        settings: Configuration, defaults to the environment-loaded settings
        session_maker: Session factory; built from DATABASE_URL when omitted
        generator: Code generator; bound to BASE_URL when omitted

    Raises:
        ConfigurationError: If the settings fail validation
    """
    settings = settings or default_settings
    check_settings(settings)

    engine: Optional[AsyncEngine] = None
    if session_maker is None:
        engine = create_engine_from_settings(settings)
        session_maker = create_session_maker(engine)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if engine is not None and settings.CREATE_TABLES:
            await create_tables(engine)
            logger.info("Database tables created/checked")
        logger.info(f"URL shortener serving {settings.BASE_URL}")
        yield
        if engine is not None:
            await engine.dispose()
        logger.info("URL shortener stopped")

    app = FastAPI(
        title="URL Shortener Service",
        description="Shortens URLs with custom, random, hash or secure codes and tracks redirects",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    app.state.settings = settings
    app.state.session_maker = session_maker
    app.state.generator = generator or CodeGenerator(settings.BASE_URL)

    add_logging_middleware(app)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ALLOW_ORIGINS,
        allow_methods=["GET", "POST", "OPTIONS", "PUT"],
        allow_headers=["Content-Type", "Authorization"],
    )

    # Health endpoints defined before router to match before catch-all route
    @app.get("/", tags=["Health"])
    async def root():
        """Root endpoint for health checks."""
        return {
            "message": "URL Shortener Service",
            "version": __version__,
            "docs": "/docs"
        }

    @app.get("/health", tags=["Health"])
    async def health_check():
        return {"status": "healthy"}

    app.include_router(endpoints.router, tags=["URL Shortener"])

    return app


def run() -> None:
    """Console entry point: serve the app with uvicorn."""
    uvicorn.run(
        "urlsh.main:app",
        host=default_settings.HOST,
        port=default_settings.PORT,
        log_level=default_settings.LOG_LEVEL.lower(),
    )


configure_logging(default_settings.LOG_LEVEL)

app = create_app()


if __name__ == "__main__":
    run()
