# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Notification request and response models."""

from typing import Any, Literal

from pydantic import BaseModel


class MarkAllReadRequest(BaseModel):
    """Which notifications to mark: all of them or one type."""

    tab: Literal["all", "Login", "Grades", "Security", "Profile"] = "all"


class NotificationsResponse(BaseModel):
    """Notification list after an update.

    sessions_updated is the number of live sessions that received the
    new list.
    """

    success: bool = True
    message: str
    notifications: list[dict[str, Any]]
    sessions_updated: int = 0
