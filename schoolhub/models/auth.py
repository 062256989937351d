# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Authentication request and response models.

User views are role-scoped dictionaries, so they are typed as plain
dicts rather than a model with every possible field.
"""

from typing import Any

from pydantic import BaseModel, Field

from schoolhub.infrastructure.database.models.tenant import UserRole


class LoginRequest(BaseModel):
    """Password login."""

    username: str = Field(..., min_length=1, max_length=100)
    password: str = Field(..., min_length=1, max_length=256)
    role: UserRole


class OTPVerifyRequest(BaseModel):
    """Second login step for system administrators."""

    session_id: str = Field(..., min_length=1)
    otp: str = Field(..., min_length=1, max_length=16)
    user_id: str = Field(..., min_length=1)


class OTPResendRequest(BaseModel):
    """Request a fresh OTP."""

    user_id: str = Field(..., min_length=1)


class LoginResponse(BaseModel):
    """Login result.

    Either user is set (a session cookie was issued) or requires_otp is
    true and session_id identifies the pending OTP session.
    """

    success: bool = True
    message: str
    user: dict[str, Any] | None = None
    requires_otp: bool = False
    user_id: str | None = None
    session_id: str | None = None
    otp: str | None = None
    otp_contact: str | None = None


class OTPIssueResponse(BaseModel):
    """A newly issued OTP session."""

    success: bool
    message: str
    user_id: str
    session_id: str | None = None
    requires_otp: bool = True
    otp: str | None = None
    otp_contact: str | None = None


class OTPVerifyResponse(BaseModel):
    success: bool
    message: str
    user: dict[str, Any] | None = None


class MessageResponse(BaseModel):
    success: bool = True
    message: str


class CurrentUserResponse(BaseModel):
    """The user stored in the current login session."""

    user: dict[str, Any]
