# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""FastAPI dependency injection definitions.

This module provides dependency functions for FastAPI endpoints.
Dependencies are used to:
- Get database sessions (central and tenant)
- Get the current session user
- Get tenant context
- Get service instances

Example:
    @router.get("/me")
    async def me(
        current_user: CurrentUser = Depends(require_auth),
        tenant: TenantContext = Depends(require_tenant),
    ):
        ...
"""

import logging
from typing import Annotated, AsyncGenerator

from fastapi import Depends, HTTPException, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from schoolhub.api.middleware.session import CurrentUser, get_current_user
from schoolhub.api.middleware.tenant import TenantContext, get_tenant_from_request
from schoolhub.core.config import get_settings
from schoolhub.domains.auth import AuthService, LogOTPChannel, OTPService, PasswordHasher
from schoolhub.domains.session import SessionStore
from schoolhub.domains.user import UserService
from schoolhub.infrastructure.cache import RedisError, get_redis
from schoolhub.infrastructure.database.connection import (
    close_central_database,
    init_central_database,
)
from schoolhub.infrastructure.database.tenant_manager import TenantDatabaseManager

logger = logging.getLogger(__name__)

# Tenant database manager singleton
_tenant_db_manager: TenantDatabaseManager | None = None


async def init_db() -> None:
    """Initialize the central database and the tenant database manager."""
    global _tenant_db_manager
    settings = get_settings()

    await init_central_database(settings)
    _tenant_db_manager = TenantDatabaseManager(settings)


async def close_db() -> None:
    """Close the central database and all cached tenant engines."""
    global _tenant_db_manager

    await close_central_database()

    if _tenant_db_manager:
        await _tenant_db_manager.close_all()
        _tenant_db_manager = None


# =========================================================================
# Tenant Dependencies
# =========================================================================


def require_tenant(request: Request) -> TenantContext:
    """Require tenant context.

    Raises:
        HTTPException: 400 if the host does not belong to a known school.
    """
    tenant = get_tenant_from_request(request)
    if not tenant:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Unknown school. Check the address you are using.",
        )
    return tenant


async def get_tenant_db(
    tenant: TenantContext = Depends(require_tenant),
) -> AsyncGenerator[AsyncSession, None]:
    """Get tenant database session.

    Yields:
        AsyncSession for the school's database.

    Raises:
        HTTPException: If the school has no database or the manager is
            not initialized.
    """
    if not tenant.has_database:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="School database is not provisioned",
        )

    if not _tenant_db_manager:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Tenant database manager not initialized",
        )

    async with _tenant_db_manager.get_session(tenant.db_name) as session:
        yield session


# =========================================================================
# Authentication Dependencies
# =========================================================================


def get_optional_user(request: Request) -> CurrentUser | None:
    """Get current user if authenticated, None otherwise."""
    return get_current_user(request)


def require_auth(request: Request) -> CurrentUser:
    """Require an authenticated session user.

    Raises:
        HTTPException: 401 if not authenticated.
    """
    user = get_current_user(request)
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
        )
    return user


class RequireRole:
    """Dependency for requiring specific roles.

    Example:
        @router.get("/admin")
        async def admin_only(
            user: CurrentUser = Depends(RequireRole("administrator", "system_admin")),
        ):
            ...
    """

    def __init__(self, *roles: str) -> None:
        self.roles = roles

    def __call__(self, request: Request) -> CurrentUser:
        """Check roles and return user.

        Raises:
            HTTPException: 401 if not authenticated, 403 on a role mismatch.
        """
        user = require_auth(request)

        if not user.has_any_role(*self.roles):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Requires role: {', '.join(self.roles)}",
            )

        return user


def require_roles(*roles: str) -> RequireRole:
    """Build a dependency accepting any of the given roles."""
    return RequireRole(*roles)


# =========================================================================
# Service Dependencies
# =========================================================================


def get_session_store() -> SessionStore:
    """Get the session store on the global Redis client.

    Raises:
        HTTPException: 503 if Redis is not initialized.
    """
    try:
        redis = get_redis()
    except RedisError as e:
        logger.error("Session store unavailable: %s", str(e))
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Session store unavailable",
        ) from e

    return SessionStore(redis, default_ttl=get_settings().session.login_ttl_seconds)


def get_otp_service(store: SessionStore = Depends(get_session_store)) -> OTPService:
    settings = get_settings()
    return OTPService(
        store,
        ttl_seconds=settings.session.otp_ttl_seconds,
        channel=LogOTPChannel(),
        expose_otp=settings.expose_otp,
    )


def get_user_service(db: AsyncSession = Depends(get_tenant_db)) -> UserService:
    return UserService(db)


def get_password_hasher() -> PasswordHasher:
    return PasswordHasher()


def get_auth_service(
    user_service: UserService = Depends(get_user_service),
    store: SessionStore = Depends(get_session_store),
    otp_service: OTPService = Depends(get_otp_service),
    password_hasher: PasswordHasher = Depends(get_password_hasher),
) -> AuthService:
    """Get AuthService instance."""
    return AuthService(
        user_service,
        store,
        otp_service,
        get_settings().session,
        password_hasher=password_hasher,
    )


# =========================================================================
# Type Aliases for Cleaner Endpoint Signatures
# =========================================================================

AuthenticatedUser = Annotated[CurrentUser, Depends(require_auth)]
Tenant = Annotated[TenantContext, Depends(require_tenant)]
Store = Annotated[SessionStore, Depends(get_session_store)]
Users = Annotated[UserService, Depends(get_user_service)]
