# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""API middleware components.

- TenantMiddleware: Resolves the school from the Host header.
- SessionAuthMiddleware: Resolves the session cookie to the current user.

Rate limiting uses the slowapi limiter in rate_limit: a default
per-client limit through SlowAPIMiddleware plus per-IP limits on the
auth endpoints.
"""

from schoolhub.api.middleware.session import CurrentUser, SessionAuthMiddleware
from schoolhub.api.middleware.tenant import TenantContext, TenantMiddleware

__all__ = [
    "TenantMiddleware",
    "TenantContext",
    "SessionAuthMiddleware",
    "CurrentUser",
]
