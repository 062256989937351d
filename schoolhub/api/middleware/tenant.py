# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Tenant resolution middleware.

Every school is served under its own host name. This middleware strips
the port from the Host header, looks up the active school profile for
that host in the central database and stores a TenantContext in
request.state.tenant. The host doubles as the tenant id.

Example:
    GET https://riverside.example/api/v1/school
    -> request.state.tenant.id == "riverside.example"
"""

import logging
from contextlib import AbstractAsyncContextManager
from typing import Callable

from fastapi import Request, Response
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from schoolhub.domains.school import SchoolService, normalize_host
from schoolhub.infrastructure.database import DatabaseError
from schoolhub.infrastructure.database.models.central import SchoolProfile

logger = logging.getLogger(__name__)

# Paths that don't require tenant context
PUBLIC_PATHS = frozenset({
    "/",
    "/health",
    "/health/ready",
    "/docs",
    "/redoc",
    "/openapi.json",
})


class TenantContext:
    """Tenant context resolved from the request host.

    Attributes:
        id: Tenant id (the normalized host).
        host: Host the school is served under.
        db_name: Name of the tenant database.
        name: School display name.
        school: The loaded school profile.
    """

    def __init__(self, school: SchoolProfile) -> None:
        self.id = school.host
        self.host = school.host
        self.db_name = school.db_name
        self.name = school.name
        self.school = school

    @property
    def has_database(self) -> bool:
        return bool(self.db_name)


class TenantMiddleware(BaseHTTPMiddleware):
    """Resolves request.state.tenant from the Host header.

    Unknown hosts leave request.state.tenant as None; endpoints that
    need a tenant reject the request themselves.

    Attributes:
        _get_central_db: Callable returning a central database session context.
    """

    def __init__(
        self,
        app: ASGIApp,
        get_central_db: Callable[[], AbstractAsyncContextManager[AsyncSession]],
    ) -> None:
        super().__init__(app)
        self._get_central_db = get_central_db

    async def dispatch(
        self,
        request: Request,
        call_next: Callable[[Request], Response],
    ) -> Response:
        request.state.tenant = None

        if request.url.path in PUBLIC_PATHS:
            return await call_next(request)

        host = normalize_host(request.headers.get("host"))
        if host:
            try:
                tenant = await self._resolve_tenant(host)
            except DatabaseError as e:
                logger.error("Tenant resolution error for %s: %s", host, str(e))
                return JSONResponse(
                    status_code=500,
                    content={"detail": "Internal server error"},
                )

            if tenant:
                request.state.tenant = tenant
                logger.debug("Tenant resolved: %s", tenant.id)
            else:
                logger.warning("Tenant not found: %s", host)

        return await call_next(request)

    async def _resolve_tenant(self, host: str) -> TenantContext | None:
        async with self._get_central_db() as db:
            school = await SchoolService(db).get_by_host(host)

        return TenantContext(school) if school else None


def get_tenant_from_request(request: Request) -> TenantContext | None:
    """Get tenant context from request state."""
    return getattr(request.state, "tenant", None)
