# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""FastAPI Application Factory.

This module provides the main application factory for the EduVerse API.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator, Awaitable, Callable

from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware

from src import __version__
from src.api.routes import health
from src.api.v1 import router as v1_router
from src.core.config import Settings, get_settings
from src.domains.content.service import ContentService
from src.domains.sync.factory import build_sync_runtime
from src.utils.logging import (
    attach_sync_status,
    clear_context,
    detach_sync_status,
    get_logger,
    setup_logging,
)

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager.

    Builds the sync runtime and the content service on startup and tears
    them down on shutdown. Both live on app.state for the dependencies.

    Args:
        app: The FastAPI application instance.

    Yields:
        None during application runtime.
    """
    settings: Settings = app.state.settings
    setup_logging(settings)
    logger.info(
        "Starting EduVerse API",
        environment=settings.environment,
        store_backend=settings.sync.store_backend,
        cache_backend=settings.cache.backend,
    )

    # =========================================================================
    # Startup
    # =========================================================================
    runtime = await build_sync_runtime(settings)
    content_service = ContentService(runtime.engine)
    content_service.start()

    app.state.sync_runtime = runtime
    attach_sync_status(runtime.engine.status, settings.sync.document_path)
    app.state.content_service = content_service

    yield

    # =========================================================================
    # Shutdown
    # =========================================================================
    detach_sync_status()
    content_service.stop()
    try:
        await runtime.close()
    except Exception as e:
        logger.warning("Error closing sync runtime", error=str(e))

    app.state.sync_runtime = None
    app.state.content_service = None
    logger.info("Shutting down EduVerse API")


def create_app(settings: Settings | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        settings: Settings to run with; defaults to get_settings().

    Returns:
        Configured FastAPI application instance.
    """
    settings = settings or get_settings()

    app = FastAPI(
        title="EduVerse API",
        description="Offline-first content portal backend",
        version=__version__,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        openapi_url="/openapi.json" if settings.debug else None,
        lifespan=lifespan,
        redirect_slashes=False,
    )

    # =========================================================================
    # State
    # =========================================================================
    app.state.settings = settings
    app.state.sync_runtime = None
    app.state.content_service = None

    # =========================================================================
    # Middleware
    # =========================================================================
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors.origins_list,
        allow_credentials=settings.cors.allow_credentials,
        allow_methods=settings.cors.allow_methods,
        allow_headers=settings.cors.allow_headers,
    )

    @app.middleware("http")
    async def reset_log_context(
        request: Request,
        call_next: Callable[[Request], Awaitable[Response]],
    ) -> Response:
        # Context bound by an endpoint must not leak into the next request
        try:
            return await call_next(request)
        finally:
            clear_context()

    # =========================================================================
    # Routes
    # =========================================================================
    app.include_router(health.router, tags=["Health"])
    app.include_router(v1_router)

    return app
