# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Session store domain."""

from schoolhub.domains.session.store import (
    DEFAULT_SESSION_TTL,
    PROTECTED_FIELDS,
    SessionPurpose,
    SessionStore,
    merge_session_data,
    user_sessions_key,
)

__all__ = [
    "SessionStore",
    "SessionPurpose",
    "DEFAULT_SESSION_TTL",
    "PROTECTED_FIELDS",
    "merge_session_data",
    "user_sessions_key",
]
