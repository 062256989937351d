# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Utility functions and helpers for SchoolHub.

- logging: Structured logging with structlog
- datetime: Timezone-aware datetime helpers
"""

from schoolhub.utils.datetime import ensure_utc, format_iso, minutes_from_now, utc_now
from schoolhub.utils.logging import bind_context, clear_context, get_logger, setup_logging

__all__ = [
    "utc_now",
    "ensure_utc",
    "format_iso",
    "minutes_from_now",
    "setup_logging",
    "get_logger",
    "bind_context",
    "clear_context",
]
