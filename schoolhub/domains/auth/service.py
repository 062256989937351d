# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Authentication service for cookie-bound sessions.

This module provides the AuthService that orchestrates:
- Password login for every role
- OTP step-up for system administrators
- Session lookup for incoming requests
- Logout

A successful login stores the role-scoped view of the user in a
``login`` session. System administrators first receive an OTP; their
login session is only created once the code is verified.

Example:
    >>> auth_service = AuthService(user_service, store, otp_service, settings.session)
    >>> outcome = await auth_service.login("riverside.example", "jdoe", "secret", "teacher")
    >>> outcome.session_id
    '0b6f...'
"""

from dataclasses import dataclass
from typing import Any

from schoolhub.core.config import SessionSettings
from schoolhub.domains.auth.otp import OTPIssueResult, OTPService, OTPVerificationResult
from schoolhub.domains.auth.password import PasswordHasher
from schoolhub.domains.session import SessionPurpose, SessionStore
from schoolhub.domains.user import UserService, build_user_response
from schoolhub.infrastructure.cache import RedisError
from schoolhub.infrastructure.database.models.central import SchoolProfile
from schoolhub.infrastructure.database.models.tenant import User, UserRole
from schoolhub.utils.datetime import format_iso, utc_now
from schoolhub.utils.logging import get_logger

logger = get_logger(__name__)


class AuthenticationError(Exception):
    """Base exception for authentication errors."""

    pass


class InvalidCredentialsError(AuthenticationError):
    """Raised when the username or password is wrong."""

    def __init__(self) -> None:
        super().__init__("Incorrect username or password")


class AccountInactiveError(AuthenticationError):
    """Raised when account is not active."""

    pass


class AccountLockedError(AuthenticationError):
    """Raised when account is locked after too many failed logins."""

    pass


class LoginNotAllowedError(AuthenticationError):
    """Raised when the school has disabled login for a role."""

    pass


class SessionInvalidError(AuthenticationError):
    """Raised when a session id does not resolve to a usable login session."""

    pass


@dataclass
class LoginOutcome:
    """Result of a login step.

    Either a login session was created (session_id and user are set) or
    an OTP was issued and the caller must verify it (requires_otp).
    """

    user_id: str
    user: dict[str, Any] | None = None
    session_id: str | None = None
    requires_otp: bool = False
    otp: OTPIssueResult | None = None


class AuthService:
    """Login, OTP step-up, session lookup and logout.

    Attributes:
        _users: Tenant user service.
        _store: Session store.
        _otp: OTP service.
        _settings: Session settings (TTL and lockout policy).
        _hasher: Password hasher.
    """

    def __init__(
        self,
        user_service: UserService,
        store: SessionStore,
        otp_service: OTPService,
        settings: SessionSettings,
        password_hasher: PasswordHasher | None = None,
    ) -> None:
        self._users = user_service
        self._store = store
        self._otp = otp_service
        self._settings = settings
        self._hasher = password_hasher or PasswordHasher()

    async def login(
        self,
        tenant_id: str,
        username: str,
        password: str,
        role: str,
        school: SchoolProfile | None = None,
        ip_address: str | None = None,
        user_agent: str | None = None,
    ) -> LoginOutcome:
        """Check credentials and start a session or an OTP challenge.

        Args:
            tenant_id: Tenant (host) the login happens on.
            username: Username.
            password: Plain password.
            role: Role the user logs in as.
            school: School profile, consulted for the per-role login switch.
            ip_address: Client address stored on the session.
            user_agent: Client user agent stored on the session.

        Returns:
            LoginOutcome.

        Raises:
            LoginNotAllowedError: If the school disabled login for the role.
            InvalidCredentialsError: If the user is unknown or the password is wrong.
            AccountInactiveError: If the account is deactivated.
            AccountLockedError: If the account is locked.
            RedisError: If the login session cannot be stored.
        """
        if school is not None and not school.login_allowed(role):
            raise LoginNotAllowedError(f"Login is currently disabled for {role} accounts")

        user = await self._users.get_by_username(username, role=role)
        if user is None:
            logger.info("login_failed", reason="unknown_user", role=role, tenant_id=tenant_id)
            raise InvalidCredentialsError()

        if not user.is_active:
            raise AccountInactiveError("Account is inactive, contact the school administration")

        if user.is_locked:
            raise AccountLockedError(
                f"Account is locked until {format_iso(user.locked_until)}"
            )

        if not self._hasher.verify(password, user.password_hash):
            await self._users.record_failed_login(
                user,
                max_failed_attempts=self._settings.max_failed_attempts,
                lockout_minutes=self._settings.lockout_minutes,
            )
            logger.info(
                "login_failed",
                reason="wrong_password",
                user_id=str(user.id),
                tenant_id=tenant_id,
            )
            raise InvalidCredentialsError()

        await self._users.record_successful_login(user)
        user_id = str(user.id)

        if user.role == UserRole.SYSTEM_ADMIN.value:
            issued = await self._otp.send_otp(user_id, tenant_id, contact=user.contact)
            logger.info("otp_challenge_issued", user_id=user_id, tenant_id=tenant_id)
            return LoginOutcome(user_id=user_id, requires_otp=True, otp=issued)

        view, session_id = await self._start_session(tenant_id, user, ip_address, user_agent)
        logger.info("login_succeeded", user_id=user_id, role=user.role, tenant_id=tenant_id)
        return LoginOutcome(user_id=user_id, user=view, session_id=session_id)

    async def verify_otp(
        self,
        tenant_id: str,
        session_id: str,
        otp: str,
        user_id: str,
        ip_address: str | None = None,
        user_agent: str | None = None,
    ) -> tuple[OTPVerificationResult, LoginOutcome | None]:
        """Verify an OTP and, on success, start the login session.

        Returns:
            The verification result and, when it succeeded, the outcome
            carrying the new login session.

        Raises:
            OTPRequestError: If an argument is missing.
            UserNotFoundError: If the user vanished after the OTP was issued.
            AccountInactiveError: If the account was deactivated meanwhile.
        """
        result = await self._otp.verify_otp(session_id, otp, tenant_id, user_id)
        if not result.success:
            return result, None

        user = await self._users.require_by_id(user_id)
        if not user.is_active:
            raise AccountInactiveError("Account is inactive, contact the school administration")

        view, login_session_id = await self._start_session(tenant_id, user, ip_address, user_agent)
        logger.info(
            "login_succeeded",
            user_id=user_id,
            role=user.role,
            tenant_id=tenant_id,
            otp_verified=True,
        )
        return result, LoginOutcome(user_id=str(user.id), user=view, session_id=login_session_id)

    async def resend_otp(self, tenant_id: str, user_id: str) -> OTPIssueResult:
        """Issue a fresh OTP for a user.

        Raises:
            OTPRequestError: If an argument is missing.
            UserNotFoundError: If the user does not exist.
            AccountInactiveError: If the account is deactivated.
        """
        user = await self._users.require_by_id(user_id)
        if not user.is_active:
            raise AccountInactiveError("Account is inactive, contact the school administration")

        return await self._otp.send_otp(str(user.id), tenant_id, contact=user.contact)

    async def logout(self, session_id: str | None) -> bool:
        """Destroy a session.

        Store failures are logged, not raised, so the caller can still
        clear the cookie.

        Returns:
            True if a session was deleted.
        """
        if not session_id:
            return False

        try:
            removed = await self._store.destroy_session(session_id)
        except RedisError as e:
            logger.error("logout_failed", session_id=session_id, error=str(e))
            return False

        if removed:
            logger.info("logged_out", session_id=session_id)
        return removed

    async def authenticate(
        self,
        session_id: str | None,
        tenant_id: str,
        school: SchoolProfile | None = None,
    ) -> dict[str, Any]:
        """Resolve a session id to its login session record.

        See authenticate_session.
        """
        return await authenticate_session(self._store, session_id, tenant_id, school)

    async def _start_session(
        self,
        tenant_id: str,
        user: User,
        ip_address: str | None,
        user_agent: str | None,
    ) -> tuple[dict[str, Any], str]:
        view = build_user_response(user)
        now = format_iso(utc_now())

        record = {
            **view,
            "tenant_id": tenant_id,
            "purpose": SessionPurpose.LOGIN.value,
            "login_time": now,
            "last_activity": now,
            "ip_address": ip_address,
            "user_agent": user_agent,
        }

        session_id = await self._store.create_session(
            record,
            expire_seconds=self._settings.login_ttl_seconds,
        )
        return view, session_id


async def authenticate_session(
    store: SessionStore,
    session_id: str | None,
    tenant_id: str,
    school: SchoolProfile | None = None,
) -> dict[str, Any]:
    """Resolve a session id to its login session record.

    Sessions of a role whose login the school has since switched off are
    destroyed on their next use.

    Args:
        store: Session store.
        session_id: Id from the session cookie.
        tenant_id: Tenant (host) of the current request.
        school: School profile of the tenant, for the per-role login switch.

    Returns:
        The session record.

    Raises:
        SessionInvalidError: If the session is missing, is not a login
            session, has no user or belongs to another tenant,
            or its role may no longer log in.
        RedisError: If the store read fails.
    """
    if not session_id:
        raise SessionInvalidError("No session")

    session = await store.get_session(session_id)
    if session is None:
        raise SessionInvalidError("Session not found or expired")

    if not session.get("user_id"):
        raise SessionInvalidError("Session has no user")

    if session.get("purpose") != SessionPurpose.LOGIN.value:
        raise SessionInvalidError("Not a login session")

    if session.get("tenant_id") != tenant_id:
        logger.warning(
            "session_tenant_mismatch",
            session_id=session_id,
            tenant_id=tenant_id,
            issued_for=session.get("tenant_id"),
        )
        raise SessionInvalidError("Session belongs to another tenant")

    role = session.get("role")
    if school is not None and role and not school.login_allowed(role):
        await store.destroy_session(session_id)
        logger.info("session_revoked", reason="login_disabled", role=role, tenant_id=tenant_id)
        raise SessionInvalidError(f"Login is currently disabled for {role} accounts")

    return session
