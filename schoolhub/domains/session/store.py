# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Server-side session store backed by Redis.

A session is a JSON record stored under a random identifier with a TTL.
The identifier is the only thing the browser sees (in the ``sessionId``
cookie). Every session is also registered in a per-user index set,
``user:sessions:{user_id}``, so that all sessions of one user can be
rewritten (profile or notification changes) or revoked together.

Example:
    >>> store = SessionStore(get_redis(), default_ttl=86400)
    >>> session_id = await store.create_session(
    ...     {"user_id": "42", "tenant_id": "riverside.example", "purpose": "login"}
    ... )
    >>> await store.get_session(session_id)
    {'user_id': '42', 'tenant_id': 'riverside.example', 'purpose': 'login'}
"""

import logging
from collections.abc import Iterable, Mapping
from enum import Enum
from typing import Any
from uuid import uuid4

from schoolhub.infrastructure.cache import RedisClient

logger = logging.getLogger(__name__)

DEFAULT_SESSION_TTL = 60 * 60 * 24

USER_SESSIONS_KEY = "user:sessions:{user_id}"

# Fields a merge never overwrites
PROTECTED_FIELDS = (
    "session_id",
    "login_time",
    "last_activity",
    "ip_address",
    "user_agent",
    "csrf_token",
)


class SessionPurpose(str, Enum):
    """What a session record is for."""

    LOGIN = "login"
    OTP_VERIFICATION = "otp_verification"


def user_sessions_key(user_id: str) -> str:
    """Key of the index set holding a user's session ids."""
    return USER_SESSIONS_KEY.format(user_id=user_id)


def merge_session_data(
    existing: Mapping[str, Any],
    new_data: Mapping[str, Any],
    preserve_fields: Iterable[str] = PROTECTED_FIELDS,
) -> dict[str, Any]:
    """Merge new data into an existing session record.

    Values of None in new_data are ignored. Fields listed in
    preserve_fields keep their existing value, and last_activity always
    survives the merge.

    Args:
        existing: The current session record.
        new_data: Data to merge in.
        preserve_fields: Fields that are never overwritten.

    Returns:
        A new merged record.
    """
    preserved = set(preserve_fields)
    merged = dict(existing)

    for key, value in new_data.items():
        if key not in preserved and value is not None:
            merged[key] = value

    if "last_activity" in existing:
        merged["last_activity"] = existing["last_activity"]

    return merged


class SessionStore:
    """Creates, reads, updates and destroys session records.

    Attributes:
        _redis: Redis client.
        _default_ttl: TTL in seconds applied when none is given.
    """

    def __init__(self, redis: RedisClient, default_ttl: int = DEFAULT_SESSION_TTL) -> None:
        self._redis = redis
        self._default_ttl = default_ttl

    @property
    def default_ttl(self) -> int:
        return self._default_ttl

    async def create_session(
        self,
        data: Mapping[str, Any],
        expire_seconds: int | None = None,
        session_id: str | None = None,
    ) -> str:
        """Create (or overwrite) a session and index it under its user.

        Args:
            data: Session record. Must contain user_id.
            expire_seconds: TTL in seconds; the store default if omitted.
            session_id: Existing id to overwrite; a new uuid4 if omitted.

        Returns:
            The session id.

        Raises:
            ValueError: If data has no user_id.
            RedisError: If the store write fails.
        """
        user_id = data.get("user_id")
        if not user_id:
            raise ValueError("Session data must include a user_id to create a session.")

        session_id = session_id or str(uuid4())
        ttl = expire_seconds or self._default_ttl

        await self._redis.set_indexed(
            session_id,
            dict(data),
            expire_seconds=ttl,
            index_key=user_sessions_key(str(user_id)),
        )

        logger.debug("Session created for user %s (ttl=%ss)", user_id, ttl)
        return session_id

    async def get_session(self, session_id: str) -> dict[str, Any] | None:
        """Fetch a session record.

        Args:
            session_id: The session id.

        Returns:
            The record, or None if missing, expired or not a JSON object.

        Raises:
            RedisError: If the store read fails.
        """
        if not session_id:
            return None

        data = await self._redis.get(session_id)
        if data is None:
            return None

        if not isinstance(data, dict):
            logger.warning("Discarding malformed session record %s", session_id[:8])
            return None

        return data

    async def destroy_session(self, session_id: str) -> bool:
        """Delete a session and drop it from its user's index.

        Args:
            session_id: The session id.

        Returns:
            True if a record was deleted.

        Raises:
            RedisError: If the store write fails.
        """
        data = await self.get_session(session_id)

        if data and data.get("user_id"):
            removed = await self._redis.delete_indexed(
                user_sessions_key(str(data["user_id"])), session_id
            )
        else:
            removed = await self._redis.delete(session_id)

        return removed > 0

    async def update_session(
        self,
        session_id: str,
        data: Mapping[str, Any],
        safe_merge: bool = True,
    ) -> bool:
        """Rewrite a live session, keeping its remaining TTL.

        Args:
            session_id: The session id.
            data: New data.
            safe_merge: Merge into the existing record instead of replacing it.

        Returns:
            False if the session is gone or has no expiry left.
        """
        ttl = await self._redis.ttl(session_id)
        if ttl <= 0:
            return False

        record = dict(data)
        if safe_merge:
            existing = await self.get_session(session_id)
            if existing:
                record = merge_session_data(existing, data)

        await self._redis.set(session_id, record, expire_seconds=ttl)
        return True

    async def update_all_user_sessions(
        self,
        user_id: str,
        data: Mapping[str, Any],
        safe_merge: bool = True,
        preserve_fields: Iterable[str] = (),
        only_update_fields: Iterable[str] | None = None,
    ) -> int:
        """Rewrite every live session of a user.

        Each session keeps its remaining TTL. Ids whose session has
        expired are dropped from the user's index.

        Args:
            user_id: The user whose sessions are updated.
            data: New data.
            safe_merge: Merge into each existing record instead of replacing it.
            preserve_fields: Extra fields never overwritten by the merge.
            only_update_fields: If given, copy only these fields from data.

        Returns:
            Number of sessions updated.

        Raises:
            RedisError: If the store fails.
        """
        index_key = user_sessions_key(user_id)
        session_ids = await self._redis.members(index_key)
        if not session_ids:
            return 0

        protected = (*PROTECTED_FIELDS, *preserve_fields)
        only_fields = list(only_update_fields) if only_update_fields else None
        stale: list[str] = []
        updated = 0

        for session_id in sorted(session_ids):
            ttl = await self._redis.ttl(session_id)
            if ttl <= 0:
                stale.append(session_id)
                continue

            existing = await self.get_session(session_id) if safe_merge else None
            if safe_merge and existing is None:
                # Expired after the TTL read
                stale.append(session_id)
                continue

            if existing and only_fields:
                record = dict(existing)
                for field in only_fields:
                    if data.get(field) is not None:
                        record[field] = data[field]
            elif existing:
                record = merge_session_data(existing, data, protected)
            else:
                record = dict(data)

            record["user_id"] = user_id
            await self._redis.set(session_id, record, expire_seconds=ttl)
            updated += 1

        if stale:
            await self._redis.remove_members(index_key, *stale)

        logger.info("Updated %d sessions for user %s", updated, user_id)
        return updated

    async def update_user_session_fields(
        self,
        user_id: str,
        fields: Mapping[str, Any],
        preserve_fields: Iterable[str] = (),
    ) -> int:
        """Update only the given fields in all of a user's sessions."""
        return await self.update_all_user_sessions(
            user_id,
            fields,
            safe_merge=True,
            preserve_fields=preserve_fields,
            only_update_fields=list(fields),
        )

    async def update_user_session_notifications(
        self,
        user_id: str,
        notifications: list[dict[str, Any]],
    ) -> int:
        """Replace the notifications list in all of a user's sessions."""
        return await self.update_user_session_fields(user_id, {"notifications": notifications})

    async def destroy_all_user_sessions(
        self,
        user_id: str,
        exclude_session_id: str | None = None,
    ) -> int:
        """Revoke every session of a user, e.g. after a password reset.

        Args:
            user_id: The user whose sessions are destroyed.
            exclude_session_id: A session to keep (usually the current one).

        Returns:
            Number of sessions deleted.
        """
        index_key = user_sessions_key(user_id)
        session_ids = await self._redis.members(index_key)
        session_ids.discard(exclude_session_id)

        if not session_ids:
            return 0

        removed = await self._redis.delete_indexed(index_key, *sorted(session_ids))
        logger.info("Destroyed %d sessions for user %s", removed, user_id)
        return removed
