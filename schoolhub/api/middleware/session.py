# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Session cookie authentication middleware.

This middleware reads the ``sessionId`` cookie, resolves it to a login
session for the current tenant and populates request.state.user.

Requests without a usable session continue with request.state.user set
to None; endpoints enforce authentication through dependencies.
A session store outage is answered with a 500 so that clients keep
their cookie.

Example:
    GET /api/v1/auth/me
    Cookie: sessionId=0b6f3a52-...
"""

import logging
from typing import Any, Callable

from fastapi import Request, Response
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from schoolhub.api.cookies import get_session_cookie
from schoolhub.core.config import get_settings
from schoolhub.domains.auth import SessionInvalidError, authenticate_session
from schoolhub.domains.session import SessionStore
from schoolhub.domains.user import session_user_view
from schoolhub.infrastructure.cache import RedisError, get_redis
from schoolhub.utils.logging import bind_context, clear_context

logger = logging.getLogger(__name__)

# Shorter cookie values are rejected without a store lookup
MIN_SESSION_ID_LENGTH = 10

# Logout clears the cookie even when the store is unreachable
SESSION_OPTIONAL_PATHS = frozenset({"/api/v1/auth/logout"})


class CurrentUser:
    """User of the login session attached to the request.

    Attributes:
        id: User id.
        role: User role.
        tenant_id: Tenant the session was issued for.
        session_id: Id of the login session.
        view: Role-scoped view of the user stored in the session.
    """

    def __init__(self, session_id: str, session: dict[str, Any]) -> None:
        self.id = str(session["user_id"])
        self.role = session.get("role")
        self.tenant_id = session.get("tenant_id")
        self.session_id = session_id
        self.view = session_user_view(session)

    def has_role(self, role: str) -> bool:
        return self.role == role

    def has_any_role(self, *roles: str) -> bool:
        return self.role in roles

    @property
    def is_system_admin(self) -> bool:
        return self.role == "system_admin"


def default_session_store() -> SessionStore:
    """Session store on the global Redis client."""
    return SessionStore(get_redis(), default_ttl=get_settings().session.login_ttl_seconds)


class SessionAuthMiddleware(BaseHTTPMiddleware):
    """Middleware for cookie session authentication.

    Must run after TenantMiddleware: sessions are only accepted on the
    tenant they were issued for.

    Attributes:
        _get_store: Callable returning the session store.
    """

    def __init__(
        self,
        app: ASGIApp,
        get_store: Callable[[], SessionStore] | None = None,
    ) -> None:
        super().__init__(app)
        self._get_store = get_store or default_session_store

    async def dispatch(
        self,
        request: Request,
        call_next: Callable[[Request], Response],
    ) -> Response:
        request.state.user = None

        session_id = get_session_cookie(request)
        tenant = getattr(request.state, "tenant", None)

        if (
            session_id
            and tenant
            and len(session_id) >= MIN_SESSION_ID_LENGTH
            and request.url.path not in SESSION_OPTIONAL_PATHS
        ):
            try:
                session = await authenticate_session(
                    self._get_store(), session_id, tenant.id, tenant.school
                )
                request.state.user = CurrentUser(session_id, session)
                logger.debug("User authenticated: %s", request.state.user.id)

            except SessionInvalidError as e:
                logger.debug("Session rejected: %s", str(e))

            except RedisError as e:
                logger.error("Session lookup failed: %s", str(e))
                return JSONResponse(
                    status_code=500,
                    content={"detail": "Internal server error"},
                )

        user = request.state.user
        bind_context(
            tenant_id=tenant.id if tenant else None,
            user_id=user.id if user else None,
        )
        try:
            return await call_next(request)
        finally:
            clear_context()


def get_current_user(request: Request) -> CurrentUser | None:
    """Get current user from request state."""
    return getattr(request.state, "user", None)
