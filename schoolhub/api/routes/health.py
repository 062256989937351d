# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Health check endpoints.

This module provides health and readiness endpoints for the API.
"""

import logging
import time
from datetime import datetime, timezone
from typing import Any

from fastapi import APIRouter
from pydantic import BaseModel, Field

from schoolhub import __version__
from schoolhub.core.config import get_settings
from schoolhub.infrastructure.cache import RedisError, get_redis
from schoolhub.infrastructure.database import check_central_database_connection

logger = logging.getLogger(__name__)

router = APIRouter()

# Track server start time for uptime calculation
_server_start_time = time.time()


class ComponentHealth(BaseModel):
    """Individual component health status."""
    status: str = Field(description="Component status")
    latency_ms: float | None = Field(None, description="Response latency in ms")
    message: str | None = Field(None, description="Additional status message")


class HealthResponse(BaseModel):
    """Health check response model."""
    status: str = Field(description="Overall health status")
    timestamp: datetime = Field(description="Current server timestamp")
    version: str = Field(description="API version")
    environment: str = Field(description="Deployment environment")
    uptime_seconds: int = Field(description="Server uptime in seconds")


class ReadinessResponse(BaseModel):
    """Readiness check response model."""
    ready: bool = Field(description="Whether the service is ready")
    checks: dict[str, Any] = Field(description="Individual check results")


async def check_database() -> ComponentHealth:
    """Check the central database connection."""
    start = time.time()
    healthy = await check_central_database_connection()
    latency = (time.time() - start) * 1000

    if healthy:
        return ComponentHealth(status="healthy", latency_ms=round(latency, 2))
    logger.error("Database health check failed")
    return ComponentHealth(status="unhealthy", message="Central database unreachable")


async def check_redis() -> ComponentHealth:
    """Check the Redis connection used for sessions."""
    try:
        client = get_redis()
    except RedisError as e:
        return ComponentHealth(status="unhealthy", message=str(e))

    start = time.time()
    healthy = await client.ping()
    latency = (time.time() - start) * 1000

    if healthy:
        return ComponentHealth(status="healthy", latency_ms=round(latency, 2))
    logger.error("Redis health check failed")
    return ComponentHealth(status="unhealthy", message="Redis unreachable")


@router.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """Liveness: the process is up and serving requests."""
    settings = get_settings()

    return HealthResponse(
        status="healthy",
        timestamp=datetime.now(timezone.utc),
        version=__version__,
        environment=settings.environment,
        uptime_seconds=int(time.time() - _server_start_time),
    )


@router.get("/health/ready", response_model=ReadinessResponse)
async def readiness_check() -> ReadinessResponse:
    """Check if the API is ready to accept traffic.

    Returns:
        ReadinessResponse with individual check results.
    """
    checks: dict[str, Any] = {}
    all_ready = True

    db_health = await check_database()
    checks["database"] = {"status": db_health.status, "latency_ms": db_health.latency_ms}
    if db_health.status != "healthy":
        all_ready = False

    redis_health = await check_redis()
    checks["redis"] = {"status": redis_health.status, "latency_ms": redis_health.latency_ms}
    if redis_health.status != "healthy":
        all_ready = False

    return ReadinessResponse(ready=all_ready, checks=checks)
