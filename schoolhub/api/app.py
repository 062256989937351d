# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""FastAPI Application Factory.

This module provides the main application factory for the SchoolHub API.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware

from schoolhub import __version__
from schoolhub.api.dependencies import close_db, init_db
from schoolhub.api.middleware.rate_limit import limiter, rate_limit_exceeded_handler
from schoolhub.api.middleware.session import SessionAuthMiddleware
from schoolhub.api.middleware.tenant import TenantMiddleware
from schoolhub.api.routes import health
from schoolhub.api.v1 import router as v1_router
from schoolhub.core.config import get_settings
from schoolhub.infrastructure.cache import RedisError, close_redis, init_redis
from schoolhub.infrastructure.database import DatabaseError
from schoolhub.infrastructure.database.connection import get_central_session
from schoolhub.utils.logging import setup_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager.

    Initializes and cleans up:
    - Database connections (central and tenant pools)
    - Redis (sessions)

    Args:
        app: The FastAPI application instance.

    Yields:
        None during application runtime.
    """
    settings = get_settings()
    setup_logging(settings)
    logger.info(
        "Starting SchoolHub API",
        extra={"environment": settings.environment, "debug": settings.debug},
    )

    # =========================================================================
    # Startup
    # =========================================================================

    try:
        await init_db()
        logger.info("Database connections initialized")
    except DatabaseError as e:
        logger.warning("Failed to initialize database connections: %s", str(e))

    try:
        await init_redis(settings)
        logger.info("Redis connection initialized")
    except RedisError as e:
        logger.warning("Failed to initialize Redis: %s", str(e))

    yield

    # =========================================================================
    # Shutdown
    # =========================================================================

    try:
        await close_redis()
        logger.info("Redis connection closed")
    except RedisError as e:
        logger.warning("Error closing Redis: %s", str(e))

    await close_db()
    logger.info("Database connections closed")

    logger.info("Shutting down SchoolHub API")


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Turn unexpected errors into a generic 500."""
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})


def create_app() -> FastAPI:
    """Create and configure the FastAPI application.

    Returns:
        Configured FastAPI application instance.
    """
    settings = get_settings()

    app = FastAPI(
        title="SchoolHub API",
        description="Multi-tenant school management backend",
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
    app.state.limiter = limiter

    # =========================================================================
    # Exception handlers
    # =========================================================================
    app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)

    # =========================================================================
    # Middleware (order matters - last added is first executed)
    # =========================================================================

    # Default limits apply once tenant and session user are known
    app.add_middleware(SlowAPIMiddleware)

    # Session auth runs after tenant resolution
    app.add_middleware(SessionAuthMiddleware)

    app.add_middleware(
        TenantMiddleware,
        get_central_db=get_central_session,
    )

    # CORS must execute first; credentials are needed for the session cookie
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors.origins_list,
        allow_credentials=settings.cors.allow_credentials,
        allow_methods=settings.cors.allow_methods,
        allow_headers=settings.cors.allow_headers,
    )

    # =========================================================================
    # Routes
    # =========================================================================
    app.include_router(health.router, tags=["Health"])
    app.include_router(v1_router)

    return app
