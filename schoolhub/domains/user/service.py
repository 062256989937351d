# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""User service for tenant databases.

Lookups used by the login flow, login bookkeeping (failed attempts and
lockout) and notification read state.

Example:
    >>> service = UserService(tenant_db)
    >>> user = await service.get_by_username("jdoe", role="teacher")
"""

import logging
from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from schoolhub.infrastructure.database.models.tenant import User
from schoolhub.utils.datetime import minutes_from_now

logger = logging.getLogger(__name__)

NOTIFICATION_TYPES = ("Login", "Grades", "Security", "Profile")


class UserNotFoundError(Exception):
    """Raised when a user does not exist in the tenant database."""

    def __init__(self, user_id: str) -> None:
        super().__init__(f"User not found: {user_id}")
        self.user_id = user_id


class NotificationNotFoundError(Exception):
    """Raised when a notification id is not on the user's record."""

    def __init__(self, notification_id: str) -> None:
        super().__init__(f"Notification not found: {notification_id}")
        self.notification_id = notification_id


class UserService:
    """Tenant user operations.

    Attributes:
        _db: Tenant database session.
    """

    def __init__(self, db: AsyncSession) -> None:
        self._db = db

    async def get_by_username(self, username: str, role: str | None = None) -> User | None:
        """Find a user by username, optionally restricted to a role."""
        stmt = select(User).where(User.username == username)
        if role:
            stmt = stmt.where(User.role == role)
        result = await self._db.execute(stmt)
        return result.scalar_one_or_none()

    async def get_by_id(self, user_id: str) -> User | None:
        """Find a user by primary key."""
        result = await self._db.execute(select(User).where(User.id == str(user_id)))
        return result.scalar_one_or_none()

    async def require_by_id(self, user_id: str) -> User:
        """Find a user by primary key.

        Raises:
            UserNotFoundError: If the user does not exist.
        """
        user = await self.get_by_id(user_id)
        if user is None:
            raise UserNotFoundError(user_id)
        return user

    async def record_failed_login(
        self,
        user: User,
        max_failed_attempts: int,
        lockout_minutes: int,
    ) -> None:
        """Count a failed password check and lock the account at the limit."""
        user.increment_failed_attempts()

        if user.failed_login_attempts >= max_failed_attempts:
            user.locked_until = minutes_from_now(lockout_minutes)
            logger.warning(
                "Account locked for user %s after %d failed attempts",
                user.id,
                user.failed_login_attempts,
            )

        await self._db.commit()

    async def record_successful_login(self, user: User) -> None:
        user.reset_failed_attempts()
        user.record_login()
        await self._db.commit()

    async def mark_notification_read(
        self,
        user_id: str,
        notification_id: str,
    ) -> list[dict[str, Any]]:
        """Mark one notification as read.

        Returns:
            The user's full notification list after the update.

        Raises:
            UserNotFoundError: If the user does not exist.
            NotificationNotFoundError: If the notification is not found.
        """
        user = await self.require_by_id(user_id)
        notifications = [dict(n) for n in user.notifications or []]

        for notification in notifications:
            if str(notification.get("id")) == notification_id:
                notification["read"] = True
                break
        else:
            raise NotificationNotFoundError(notification_id)

        user.notifications = notifications
        await self._db.commit()
        return notifications

    async def mark_all_notifications_read(
        self,
        user_id: str,
        tab: str = "all",
    ) -> list[dict[str, Any]]:
        """Mark every notification of a type (or all of them) as read.

        Args:
            user_id: The user.
            tab: "all" or one of NOTIFICATION_TYPES.

        Returns:
            The user's full notification list after the update.

        Raises:
            UserNotFoundError: If the user does not exist.
        """
        user = await self.require_by_id(user_id)
        notifications = [dict(n) for n in user.notifications or []]

        for notification in notifications:
            if tab == "all" or notification.get("type") == tab:
                notification["read"] = True

        user.notifications = notifications
        await self._db.commit()
        return notifications
