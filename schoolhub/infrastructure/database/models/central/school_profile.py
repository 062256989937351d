# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""School profile model.

A school profile is the tenant registry entry for one school: the host
name the school is served under and the tenant database holding its
users, plus the public branding shown before login.
"""

from typing import Any

from sqlalchemy import JSON, Boolean, CheckConstraint, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from schoolhub.infrastructure.database.models.base import Base, TimestampMixin, UUIDPrimaryKeyMixin

SUBSCRIPTION_PLANS = ("basic", "standard", "premium", "enterprise")


class SchoolProfile(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """Tenant registry entry keyed by host."""

    __tablename__ = "school_profiles"
    __table_args__ = (
        CheckConstraint(
            "subscription_plan IN (" + ", ".join(f"'{plan}'" for plan in SUBSCRIPTION_PLANS) + ")",
            name="ck_school_profiles_subscription_plan",
        ),
    )

    host: Mapped[str] = mapped_column(String(255), unique=True, index=True, nullable=False)
    db_name: Mapped[str | None] = mapped_column(String(63))
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    short_name: Mapped[str | None] = mapped_column(String(100))
    initials: Mapped[str | None] = mapped_column(String(20))
    slogan: Mapped[str | None] = mapped_column(String(255))
    description: Mapped[str | None] = mapped_column(Text)
    logo_url: Mapped[str | None] = mapped_column(String(500))
    year_founded: Mapped[int | None] = mapped_column(Integer)
    subscription_plan: Mapped[str] = mapped_column(String(20), default="basic", nullable=False)
    enabled_features: Mapped[list[str]] = mapped_column(JSON, default=list, nullable=False)
    settings: Mapped[dict[str, Any]] = mapped_column(JSON, default=dict, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    @property
    def has_database(self) -> bool:
        """Whether the school has a tenant database assigned."""
        return bool(self.db_name)

    def login_allowed(self, role: str) -> bool:
        """Check the school-wide login switch for a role.

        Settings hold one block per role (student_settings,
        teacher_settings, administrator_settings) with a login_access
        flag. Missing blocks allow login.
        """
        role_settings = (self.settings or {}).get(f"{role}_settings") or {}
        return bool(role_settings.get("login_access", True))
