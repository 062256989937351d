# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""DateTime utilities for SchoolHub.

All timestamps are stored in UTC and every Python datetime handled by
the application is timezone-aware. Session records are JSON, so
datetimes cross the session store as ISO 8601 strings.

Usage:
    from schoolhub.utils.datetime import utc_now

    locked_until = minutes_from_now(30)
"""

from datetime import date, datetime, timedelta, timezone


def utc_now() -> datetime:
    """Get current UTC time as timezone-aware datetime.

    Returns:
        Timezone-aware datetime representing current UTC time.
    """
    return datetime.now(timezone.utc)


def ensure_utc(dt: datetime | None) -> datetime | None:
    """Ensure a datetime is timezone-aware UTC.

    Naive datetimes are assumed to be UTC already; aware ones are
    converted.

    Args:
        dt: A datetime object (naive or aware) or None.

    Returns:
        Timezone-aware UTC datetime or None.
    """
    if dt is None:
        return None

    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)

    return dt.astimezone(timezone.utc)


def minutes_from_now(minutes: int) -> datetime:
    """Get a datetime N minutes from now.

    Args:
        minutes: Number of minutes to add.

    Returns:
        Timezone-aware UTC datetime.
    """
    return utc_now() + timedelta(minutes=minutes)


def format_iso(value: datetime | date | str | None) -> str | None:
    """Format a date or datetime as an ISO 8601 string.

    Strings pass through untouched; user records keep some dates
    (date of birth) as free-form strings.

    Args:
        value: Value to format.

    Returns:
        ISO 8601 formatted string or None.
    """
    if value is None or isinstance(value, str):
        return value

    if isinstance(value, datetime):
        return ensure_utc(value).isoformat()

    return value.isoformat()
