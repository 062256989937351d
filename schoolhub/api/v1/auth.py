# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Authentication API endpoints.

This module provides endpoints for user authentication:
- POST /login - Password login (sets the session cookie, or starts an OTP challenge)
- POST /otp/verify - Verify a system administrator's OTP and set the cookie
- POST /otp/resend - Issue a fresh OTP
- POST /logout - Destroy the session and clear the cookie
- GET /me - Current session user

Example:
    POST /api/v1/auth/login
    Host: riverside.example
    Body:
        {"username": "jdoe", "password": "secret", "role": "teacher"}
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Request, Response, status
from fastapi.responses import JSONResponse

from schoolhub.api.cookies import clear_session_cookie, get_session_cookie, set_session_cookie
from schoolhub.api.dependencies import get_auth_service, get_optional_user, require_tenant
from schoolhub.api.middleware.rate_limit import RATE_LIMIT_AUTH, get_ip_only, limiter
from schoolhub.api.middleware.session import CurrentUser
from schoolhub.api.middleware.tenant import TenantContext
from schoolhub.domains.auth import (
    AccountInactiveError,
    AccountLockedError,
    AuthService,
    InvalidCredentialsError,
    LoginNotAllowedError,
    OTPRequestError,
)
from schoolhub.domains.user import UserNotFoundError
from schoolhub.models.auth import (
    CurrentUserResponse,
    LoginRequest,
    LoginResponse,
    MessageResponse,
    OTPIssueResponse,
    OTPResendRequest,
    OTPVerifyRequest,
    OTPVerifyResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter()


def _get_client_ip(request: Request) -> str | None:
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else None


def _user_agent(request: Request) -> str | None:
    user_agent = request.headers.get("User-Agent")
    return user_agent[:500] if user_agent else None


@router.post(
    "/login",
    response_model=LoginResponse,
    summary="Log in with username and password",
)
@limiter.limit(RATE_LIMIT_AUTH, key_func=get_ip_only)
async def login(
    request: Request,
    response: Response,
    data: LoginRequest,
    tenant: TenantContext = Depends(require_tenant),
    auth_service: AuthService = Depends(get_auth_service),
) -> LoginResponse:
    """Log in.

    Students, teachers and administrators get the session cookie right
    away. System administrators get an OTP session id and must call
    /otp/verify.

    Raises:
        HTTPException: 401 on bad credentials, 403 if the account is
            inactive or login is disabled for the role, 423 if locked.
    """
    try:
        outcome = await auth_service.login(
            tenant_id=tenant.id,
            username=data.username,
            password=data.password,
            role=data.role.value,
            school=tenant.school,
            ip_address=_get_client_ip(request),
            user_agent=_user_agent(request),
        )
    except InvalidCredentialsError as e:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=str(e)) from e
    except (AccountInactiveError, LoginNotAllowedError) as e:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(e)) from e
    except AccountLockedError as e:
        raise HTTPException(status_code=status.HTTP_423_LOCKED, detail=str(e)) from e

    if outcome.requires_otp:
        issued = outcome.otp
        if issued is None or not issued.success:
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="Internal server error",
            )
        return LoginResponse(
            message=issued.message,
            requires_otp=True,
            user_id=issued.user_id,
            session_id=issued.session_id,
            otp=issued.otp,
            otp_contact=issued.otp_contact,
        )

    set_session_cookie(response, outcome.session_id)
    return LoginResponse(message="Login successful", user=outcome.user)


@router.post(
    "/otp/verify",
    response_model=OTPVerifyResponse,
    summary="Verify a login OTP",
)
@limiter.limit(RATE_LIMIT_AUTH, key_func=get_ip_only)
async def verify_otp(
    request: Request,
    response: Response,
    data: OTPVerifyRequest,
    tenant: TenantContext = Depends(require_tenant),
    auth_service: AuthService = Depends(get_auth_service),
) -> OTPVerifyResponse:
    """Verify the OTP and start the login session.

    Raises:
        HTTPException: 401 for an unknown session or wrong code, 404 if
            the user no longer exists.
    """
    try:
        result, outcome = await auth_service.verify_otp(
            tenant_id=tenant.id,
            session_id=data.session_id,
            otp=data.otp,
            user_id=data.user_id,
            ip_address=_get_client_ip(request),
            user_agent=_user_agent(request),
        )
    except OTPRequestError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e
    except UserNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found") from e
    except AccountInactiveError as e:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(e)) from e

    if not result.success or outcome is None:
        raise HTTPException(status_code=result.status_code, detail=result.message)

    set_session_cookie(response, outcome.session_id)
    return OTPVerifyResponse(success=True, message=result.message, user=outcome.user)


@router.post(
    "/otp/resend",
    response_model=OTPIssueResponse,
    summary="Send a new OTP",
)
@limiter.limit(RATE_LIMIT_AUTH, key_func=get_ip_only)
async def resend_otp(
    request: Request,
    data: OTPResendRequest,
    tenant: TenantContext = Depends(require_tenant),
    auth_service: AuthService = Depends(get_auth_service),
) -> OTPIssueResponse:
    """Issue a fresh OTP session for a user.

    Raises:
        HTTPException: 404 for an unknown user.
    """
    try:
        issued = await auth_service.resend_otp(tenant.id, data.user_id)
    except OTPRequestError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e
    except UserNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found") from e
    except AccountInactiveError as e:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(e)) from e

    if not issued.success:
        raise HTTPException(status_code=issued.status_code, detail=issued.message)

    return OTPIssueResponse(**issued.to_dict())


@router.post("/logout", response_model=MessageResponse, summary="Log out")
async def logout(
    request: Request,
    response: Response,
    auth_service: AuthService = Depends(get_auth_service),
) -> MessageResponse:
    """Destroy the session and clear the cookie.

    The cookie is cleared even when the store could not be reached.
    """
    await auth_service.logout(get_session_cookie(request))
    clear_session_cookie(response)
    return MessageResponse(message="Logged out successfully")


@router.get("/me", response_model=CurrentUserResponse, summary="Current user")
async def get_me(
    tenant: TenantContext = Depends(require_tenant),
    current_user: CurrentUser | None = Depends(get_optional_user),
) -> CurrentUserResponse | JSONResponse:
    """Return the user stored in the login session.

    An invalid or expired session gets 401 and the cookie is cleared.
    """
    if current_user is None:
        unauthorized = JSONResponse(
            status_code=status.HTTP_401_UNAUTHORIZED,
            content={"detail": "Invalid or expired session"},
        )
        clear_session_cookie(unauthorized)
        return unauthorized

    return CurrentUserResponse(user=current_user.view)
