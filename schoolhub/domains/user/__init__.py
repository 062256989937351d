# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""User domain: tenant user lookups and role-scoped views."""

from schoolhub.domains.user.responses import (
    COMMON_FIELDS,
    ROLE_FIELDS,
    allowed_fields,
    build_user_response,
    session_user_view,
)
from schoolhub.domains.user.service import (
    NOTIFICATION_TYPES,
    NotificationNotFoundError,
    UserNotFoundError,
    UserService,
)

__all__ = [
    "COMMON_FIELDS",
    "ROLE_FIELDS",
    "allowed_fields",
    "build_user_response",
    "session_user_view",
    "NOTIFICATION_TYPES",
    "NotificationNotFoundError",
    "UserNotFoundError",
    "UserService",
]
