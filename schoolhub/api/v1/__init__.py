# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""API v1 routes package.

Modules:
    auth: Login, OTP step-up, logout and current user.
    school: Public profile of the school resolved from the host.
    notifications: Notification read state.
"""

from fastapi import APIRouter

from schoolhub.api.v1 import auth, notifications, school

router = APIRouter(prefix="/api/v1")

router.include_router(auth.router, prefix="/auth", tags=["Authentication"])
router.include_router(school.router, prefix="/school", tags=["School"])
router.include_router(notifications.router, prefix="/notifications", tags=["Notifications"])

__all__ = ["router"]
