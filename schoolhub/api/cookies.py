# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Session cookie helpers.

The browser only ever holds the opaque session id. The cookie is
httpOnly, scoped to ``/``, lives as long as a login session and is
marked Secure in production.
"""

from fastapi import Request, Response

from schoolhub.core.config import Settings, get_settings


def get_session_cookie(request: Request, settings: Settings | None = None) -> str | None:
    """Read the session id from the request cookies."""
    settings = settings or get_settings()
    return request.cookies.get(settings.session.cookie_name)


def set_session_cookie(
    response: Response,
    session_id: str,
    settings: Settings | None = None,
) -> None:
    """Attach the session cookie to a response."""
    settings = settings or get_settings()
    response.set_cookie(
        key=settings.session.cookie_name,
        value=session_id,
        max_age=settings.session.login_ttl_seconds,
        path="/",
        httponly=True,
        secure=settings.cookie_secure,
        samesite=settings.session.cookie_samesite,
    )


def clear_session_cookie(response: Response, settings: Settings | None = None) -> None:
    """Expire the session cookie (Max-Age=0)."""
    settings = settings or get_settings()
    response.delete_cookie(
        key=settings.session.cookie_name,
        path="/",
        httponly=True,
        secure=settings.cookie_secure,
        samesite=settings.session.cookie_samesite,
    )
