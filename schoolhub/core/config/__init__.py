# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Configuration package for SchoolHub.

Example:
    >>> from schoolhub.core.config import get_settings
    >>> settings = get_settings()
    >>> settings.session.cookie_name
    'sessionId'
"""

from schoolhub.core.config.settings import (
    APISettings,
    CentralDatabaseSettings,
    CORSSettings,
    RateLimitSettings,
    RedisSettings,
    SessionSettings,
    Settings,
    TenantDatabaseSettings,
    clear_settings_cache,
    get_settings,
)

__all__ = [
    "Settings",
    "get_settings",
    "clear_settings_cache",
    "CentralDatabaseSettings",
    "TenantDatabaseSettings",
    "RedisSettings",
    "SessionSettings",
    "RateLimitSettings",
    "CORSSettings",
    "APISettings",
]
