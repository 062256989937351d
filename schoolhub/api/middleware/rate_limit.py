# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Rate limiting using slowapi.

Counters are kept in Redis so that limits hold across workers. Every
endpoint gets the default per-client limit through SlowAPIMiddleware;
login and OTP endpoints are additionally limited per client IP.

Example:
    @router.post("/login")
    @limiter.limit(RATE_LIMIT_AUTH, key_func=get_ip_only)
    async def login(request: Request, ...):
        ...
"""

import logging

from fastapi import Request, Response
from fastapi.responses import JSONResponse
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address

from schoolhub.core.config import get_settings

logger = logging.getLogger(__name__)


def get_client_identifier(request: Request) -> str:
    """Get a unique identifier for the client.

    Uses the session user if authenticated, otherwise the IP address,
    prefixed with the tenant host.
    """
    user = getattr(request.state, "user", None)
    tenant = getattr(request.state, "tenant", None)

    parts = []

    if tenant:
        parts.append(f"tenant:{tenant.id}")

    if user:
        parts.append(f"user:{user.id}")
    else:
        parts.append(f"ip:{get_remote_address(request)}")

    return ":".join(parts)


def get_ip_only(request: Request) -> str:
    """Get client IP address only.

    Used for login endpoints where user is not yet authenticated.
    """
    return get_remote_address(request)


settings = get_settings()
limiter = Limiter(
    key_func=get_client_identifier,
    default_limits=[f"{settings.rate_limit.requests_per_minute}/minute"],
    storage_uri=settings.rate_limit.storage_uri or settings.redis.url,
)

RATE_LIMIT_AUTH = f"{settings.rate_limit.auth_per_minute}/minute"


async def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded) -> Response:
    """Return 429 with a Retry-After hint."""
    logger.warning(
        "Rate limit exceeded: %s for %s",
        exc.detail,
        get_client_identifier(request),
    )

    return JSONResponse(
        status_code=429,
        content={"detail": "Too many requests. Please try again later."},
        headers={"Retry-After": "60"},
    )
