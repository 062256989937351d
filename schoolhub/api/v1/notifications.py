# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Notification endpoints.

Notifications live on the user record and are copied into every login
session. After a change the new list is pushed into all of the user's
live sessions so that other open tabs and devices see it too.
"""

import logging
from typing import Any

from fastapi import APIRouter, HTTPException, status

from schoolhub.api.dependencies import AuthenticatedUser, Store, Users
from schoolhub.domains.session import SessionStore
from schoolhub.domains.user import NotificationNotFoundError, UserNotFoundError
from schoolhub.infrastructure.cache import RedisError
from schoolhub.models.notification import MarkAllReadRequest, NotificationsResponse

logger = logging.getLogger(__name__)

router = APIRouter()


async def _sync_sessions(
    store: SessionStore,
    user_id: str,
    notifications: list[dict[str, Any]],
) -> int:
    # On failure sessions keep the old list until the next login
    try:
        return await store.update_user_session_notifications(user_id, notifications)
    except RedisError as e:
        logger.error("Failed to sync notifications into sessions of user %s: %s", user_id, str(e))
        return 0


@router.patch(
    "/{notification_id}/read",
    response_model=NotificationsResponse,
    summary="Mark a notification as read",
)
async def mark_notification_read(
    notification_id: str,
    current_user: AuthenticatedUser,
    user_service: Users,
    store: Store,
) -> NotificationsResponse:
    """Mark one notification as read.

    Raises:
        HTTPException: 404 if the user or notification is not found.
    """
    try:
        notifications = await user_service.mark_notification_read(current_user.id, notification_id)
    except UserNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found") from e
    except NotificationNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Notification not found") from e

    updated = await _sync_sessions(store, current_user.id, notifications)
    return NotificationsResponse(
        message="Notification marked as read",
        notifications=notifications,
        sessions_updated=updated,
    )


@router.post(
    "/read-all",
    response_model=NotificationsResponse,
    summary="Mark all notifications of a tab as read",
)
async def mark_all_notifications_read(
    data: MarkAllReadRequest,
    current_user: AuthenticatedUser,
    user_service: Users,
    store: Store,
) -> NotificationsResponse:
    """Mark every notification (or every one of a type) as read.

    Raises:
        HTTPException: 404 if the user is not found.
    """
    try:
        notifications = await user_service.mark_all_notifications_read(current_user.id, data.tab)
    except UserNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found") from e

    updated = await _sync_sessions(store, current_user.id, notifications)
    return NotificationsResponse(
        message="All notifications marked as read",
        notifications=notifications,
        sessions_updated=updated,
    )
