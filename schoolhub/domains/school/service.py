# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""School profile lookups against the central database.

A school is identified by the host name it is served under. The host
doubles as the tenant id stored in session records.
"""

import logging
from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from schoolhub.infrastructure.database.models.central import SchoolProfile

logger = logging.getLogger(__name__)

# Profile columns that are safe to show before login
PUBLIC_PROFILE_FIELDS = (
    "host",
    "name",
    "short_name",
    "initials",
    "slogan",
    "description",
    "logo_url",
    "year_founded",
    "subscription_plan",
    "enabled_features",
)


def normalize_host(host: str | None) -> str | None:
    """Lower-case a Host header value and strip its port."""
    if not host:
        return None
    host = host.strip().split(":")[0].lower()
    return host or None


def build_public_profile(profile: SchoolProfile) -> dict[str, Any]:
    """Public view of a school profile; never includes db_name."""
    return {field: getattr(profile, field) for field in PUBLIC_PROFILE_FIELDS}


class SchoolService:
    """Tenant registry queries."""

    def __init__(self, db: AsyncSession) -> None:
        self._db = db

    async def get_by_host(self, host: str) -> SchoolProfile | None:
        """Find the active school served under a host.

        Args:
            host: Host header value; the port is ignored.

        Returns:
            The school profile, or None if unknown or inactive.
        """
        host = normalize_host(host)
        if not host:
            return None

        stmt = select(SchoolProfile).where(
            SchoolProfile.host == host,
            SchoolProfile.is_active.is_(True),
        )
        result = await self._db.execute(stmt)
        profile = result.scalar_one_or_none()

        if profile is None:
            logger.debug("No school profile for host %s", host)
        return profile
