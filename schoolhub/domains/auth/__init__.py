# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Authentication domain services.

This module provides authentication services:
- Password hashing with bcrypt
- One-time passcodes for system administrator step-up
- Login, session lookup and logout

Exports:
    PasswordHasher: Password hashing using bcrypt.
    OTPService: OTP issuance and verification.
    AuthService: Login flow coordinator.
"""

from schoolhub.domains.auth.otp import (
    LogOTPChannel,
    OTPChannel,
    OTPIssueResult,
    OTPRequestError,
    OTPService,
    OTPVerificationResult,
    generate_otp,
)
from schoolhub.domains.auth.password import PasswordHasher, hash_password, verify_password
from schoolhub.domains.auth.service import (
    AccountInactiveError,
    AccountLockedError,
    AuthenticationError,
    AuthService,
    InvalidCredentialsError,
    LoginNotAllowedError,
    LoginOutcome,
    SessionInvalidError,
    authenticate_session,
)

__all__ = [
    "PasswordHasher",
    "hash_password",
    "verify_password",
    "OTPService",
    "OTPChannel",
    "LogOTPChannel",
    "OTPIssueResult",
    "OTPVerificationResult",
    "OTPRequestError",
    "generate_otp",
    "AuthService",
    "LoginOutcome",
    "AuthenticationError",
    "InvalidCredentialsError",
    "AccountInactiveError",
    "AccountLockedError",
    "LoginNotAllowedError",
    "SessionInvalidError",
    "authenticate_session",
]
