# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""One-time passcode issuance and verification.

An OTP lives in its own short-lived session record tagged with purpose
``otp_verification``. Verification requires the record to belong to the
same tenant and user and the codes to be numerically equal. A
successful verification destroys the record, so a code can be used at
most once.

Failures are reported as a result object (success, message, HTTP status
code) rather than raised. Only malformed requests (missing arguments)
raise OTPRequestError.

Example:
    >>> otp_service = OTPService(store, ttl_seconds=300)
    >>> issued = await otp_service.send_otp(user_id="42", tenant_id="riverside.example")
    >>> result = await otp_service.verify_otp(issued.session_id, "123456", "riverside.example", "42")
    >>> result.success
    False
"""

import logging
import re
import secrets
from abc import ABC, abstractmethod
from dataclasses import asdict, dataclass
from typing import Any

from schoolhub.domains.session import SessionPurpose, SessionStore
from schoolhub.infrastructure.cache import RedisError

logger = logging.getLogger(__name__)

OTP_LENGTH = 6
DEFAULT_OTP_TTL = 60 * 5

_OTP_PATTERN = re.compile(rf"^[0-9]{{{OTP_LENGTH}}}$")

MESSAGE_SENT = "OTP sent successfully, please check your phone or email"
MESSAGE_VERIFIED = "OTP verified successfully"
MESSAGE_INVALID_SESSION = "Invalid or expired session"
MESSAGE_INVALID_OTP = "Invalid OTP"
MESSAGE_INTERNAL_ERROR = "Internal server error"


class OTPRequestError(ValueError):
    """Raised when an OTP request is missing required arguments."""


def generate_otp() -> str:
    """Generate a 6-digit code, uniform over 100000-999999."""
    low = 10 ** (OTP_LENGTH - 1)
    return str(low + secrets.randbelow(9 * low))


def is_well_formed_otp(value: Any) -> bool:
    """Whether a value is exactly six ASCII digits."""
    return isinstance(value, str) and bool(_OTP_PATTERN.match(value))


def mask_contact(contact: str | None) -> str | None:
    """Hide most of a phone number or email address.

    Emails keep the first character of the local part and the domain;
    phone numbers keep their last four characters.
    """
    if not contact:
        return None
    if "@" in contact:
        local, _, domain = contact.partition("@")
        return f"{local[:1]}***"
    if len(contact) <= 4:
        return "*" * len(contact)
    return "*" * (len(contact) - 4) + contact[-4:]


# =============================================================================
# Delivery
# =============================================================================


class OTPChannel(ABC):
    """Delivers a code to the user (SMS, email...)."""

    name: str = "base"

    @abstractmethod
    async def deliver(self, user_id: str, contact: str | None, otp: str) -> bool:
        """Send the code. Returns False if delivery failed."""


class LogOTPChannel(OTPChannel):
    """Writes codes to the application log.

    Used until an SMS/email gateway is configured.
    """

    name = "log"

    async def deliver(self, user_id: str, contact: str | None, otp: str) -> bool:
        logger.info("OTP for user %s (contact %s): %s", user_id, contact or "-", otp)
        return True


# =============================================================================
# Results
# =============================================================================


@dataclass
class OTPIssueResult:
    """Outcome of issuing a code.

    otp is only populated when the service is configured to expose codes
    (development).
    """

    success: bool
    message: str
    status_code: int
    user_id: str
    session_id: str | None = None
    otp: str | None = None
    otp_contact: str | None = None
    requires_otp: bool = True

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data.pop("status_code")
        if self.otp is None:
            data.pop("otp")
        if self.otp_contact is None:
            data.pop("otp_contact")
        return data


@dataclass(frozen=True)
class OTPVerificationResult:
    """Outcome of checking a code."""

    success: bool
    message: str
    status_code: int


# =============================================================================
# Service
# =============================================================================


class OTPService:
    """Issues and verifies one-time codes.

    Attributes:
        _store: Session store holding OTP records.
        _ttl_seconds: Lifetime of an OTP record.
        _channel: Delivery channel.
        _expose_otp: Echo the code back in OTPIssueResult.
    """

    def __init__(
        self,
        store: SessionStore,
        ttl_seconds: int = DEFAULT_OTP_TTL,
        channel: OTPChannel | None = None,
        expose_otp: bool = False,
    ) -> None:
        self._store = store
        self._ttl_seconds = ttl_seconds
        self._channel = channel or LogOTPChannel()
        self._expose_otp = expose_otp

    async def send_otp(
        self,
        user_id: str,
        tenant_id: str,
        contact: str | None = None,
    ) -> OTPIssueResult:
        """Create an OTP session and deliver its code.

        Args:
            user_id: The user stepping up.
            tenant_id: Tenant (host) the login happens on.
            contact: Phone or email the code is sent to.

        Returns:
            OTPIssueResult; status 200 on success, 500 on a store failure.

        Raises:
            OTPRequestError: If user_id or tenant_id is empty.
        """
        if not user_id or not tenant_id:
            raise OTPRequestError("Missing required parameters for sending OTP")

        otp = generate_otp()

        try:
            session_id = await self._store.create_session(
                {
                    "user_id": user_id,
                    "tenant_id": tenant_id,
                    "otp": otp,
                    "purpose": SessionPurpose.OTP_VERIFICATION.value,
                },
                expire_seconds=self._ttl_seconds,
            )
        except RedisError as e:
            logger.error("Failed to store OTP session for user %s: %s", user_id, str(e))
            return OTPIssueResult(
                success=False,
                message=MESSAGE_INTERNAL_ERROR,
                status_code=500,
                user_id=user_id,
            )

        if not await self._channel.deliver(user_id, contact, otp):
            logger.warning("OTP delivery via %s failed for user %s", self._channel.name, user_id)

        return OTPIssueResult(
            success=True,
            message=MESSAGE_SENT,
            status_code=200,
            user_id=user_id,
            session_id=session_id,
            otp=otp if self._expose_otp else None,
            otp_contact=mask_contact(contact),
        )

    async def verify_otp(
        self,
        session_id: str,
        otp: str,
        tenant_id: str,
        user_id: str,
    ) -> OTPVerificationResult:
        """Check a code and consume its session on success.

        Args:
            session_id: Id of the OTP session returned by send_otp.
            otp: Code entered by the user.
            tenant_id: Tenant (host) of the current request.
            user_id: User claiming the code.

        Returns:
            OTPVerificationResult with status 200, 401 or 500.

        Raises:
            OTPRequestError: If any argument is empty.
        """
        if not otp or not session_id or not tenant_id or not user_id:
            raise OTPRequestError("Missing required parameters for OTP verification")

        try:
            session = await self._store.get_session(session_id)

            if not self._session_matches(session, tenant_id, user_id):
                return OTPVerificationResult(False, MESSAGE_INVALID_SESSION, 401)

            if not is_well_formed_otp(otp) or int(session["otp"]) != int(otp):
                logger.info("Wrong OTP submitted for user %s", user_id)
                return OTPVerificationResult(False, MESSAGE_INVALID_OTP, 401)

            if not await self._store.destroy_session(session_id):
                # Consumed by a concurrent verification
                return OTPVerificationResult(False, MESSAGE_INVALID_SESSION, 401)
        except RedisError as e:
            logger.error("OTP verification failed for user %s: %s", user_id, str(e))
            return OTPVerificationResult(False, MESSAGE_INTERNAL_ERROR, 500)

        logger.info("OTP verified for user %s", user_id)
        return OTPVerificationResult(True, MESSAGE_VERIFIED, 200)

    @staticmethod
    def _session_matches(session: dict[str, Any] | None, tenant_id: str, user_id: str) -> bool:
        if not session:
            return False
        stored_otp = session.get("otp")
        return (
            session.get("purpose") == SessionPurpose.OTP_VERIFICATION.value
            and session.get("tenant_id") == tenant_id
            and str(session.get("user_id")) == str(user_id)
            and stored_otp is not None
            and str(stored_otp).isascii()
            and str(stored_otp).isdigit()
        )
