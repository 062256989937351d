# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""User models for tenant databases.

Users live in a single ``users`` table discriminated by ``role``. Each
role is a mapped subclass adding its own columns (single-table
inheritance), so a query on User returns Student, Teacher,
Administrator or SystemAdmin instances.
"""

from datetime import datetime
from enum import Enum
from typing import Any

from sqlalchemy import JSON, Boolean, DateTime, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from schoolhub.infrastructure.database.models.base import (
    TenantBase,
    TimestampMixin,
    UUIDPrimaryKeyMixin,
)
from schoolhub.utils.datetime import ensure_utc, utc_now


class UserRole(str, Enum):
    """Roles a tenant user can hold."""

    STUDENT = "student"
    TEACHER = "teacher"
    ADMINISTRATOR = "administrator"
    SYSTEM_ADMIN = "system_admin"


class User(UUIDPrimaryKeyMixin, TimestampMixin, TenantBase):
    """Common user record shared by every role."""

    __tablename__ = "users"

    role: Mapped[str] = mapped_column(String(20), index=True, nullable=False)
    username: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)
    password_hash: Mapped[str | None] = mapped_column(String(255))

    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    middle_name: Mapped[str | None] = mapped_column(String(100))
    last_name: Mapped[str] = mapped_column(String(100), nullable=False)
    nick_name: Mapped[str | None] = mapped_column(String(100))
    gender: Mapped[str] = mapped_column(String(20), nullable=False)
    date_of_birth: Mapped[str] = mapped_column(String(20), nullable=False)
    address: Mapped[str] = mapped_column(String(500), nullable=False)
    phone: Mapped[str] = mapped_column(String(50), nullable=False)
    email: Mapped[str | None] = mapped_column(String(255))
    bio: Mapped[str | None] = mapped_column(Text)
    avatar: Mapped[str | None] = mapped_column(String(500))

    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    must_change_password: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    default_password: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    password_changed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    locked_until: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    failed_login_attempts: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    last_login_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    notifications: Mapped[list[dict[str, Any]]] = mapped_column(JSON, default=list, nullable=False)

    __mapper_args__ = {
        "polymorphic_on": "role",
    }

    @property
    def is_locked(self) -> bool:
        """Whether the account is currently locked."""
        if self.locked_until is None:
            return False
        return ensure_utc(self.locked_until) > utc_now()

    @property
    def contact(self) -> str | None:
        """Where one-time codes are delivered: phone first, then email."""
        return self.phone or self.email

    def increment_failed_attempts(self) -> None:
        self.failed_login_attempts = (self.failed_login_attempts or 0) + 1

    def reset_failed_attempts(self) -> None:
        self.failed_login_attempts = 0
        self.locked_until = None

    def record_login(self) -> None:
        self.last_login_at = utc_now()


class Student(User):
    """Student enrolled in a class."""

    student_id: Mapped[str | None] = mapped_column(String(50), unique=True)
    class_id: Mapped[str | None] = mapped_column(String(50))
    class_name: Mapped[str | None] = mapped_column(String(100))
    class_level: Mapped[str | None] = mapped_column(String(50))
    session: Mapped[str | None] = mapped_column(String(50))
    guardian: Mapped[dict[str, Any] | None] = mapped_column(JSON)

    __mapper_args__ = {"polymorphic_identity": UserRole.STUDENT.value}


class Teacher(User):
    """Teacher with subject assignments and an optional sponsored class."""

    teacher_id: Mapped[str | None] = mapped_column(String(50), unique=True)
    subjects: Mapped[list[dict[str, Any]] | None] = mapped_column(JSON)
    sponsor_class: Mapped[str | None] = mapped_column(String(100))

    __mapper_args__ = {"polymorphic_identity": UserRole.TEACHER.value}


class Administrator(User):
    """School administrator."""

    admin_id: Mapped[str | None] = mapped_column(String(50), unique=True)
    position: Mapped[str | None] = mapped_column(String(100))

    __mapper_args__ = {"polymorphic_identity": UserRole.ADMINISTRATOR.value}


class SystemAdmin(User):
    """Platform operator; always steps up with an OTP at login."""

    sys_id: Mapped[str | None] = mapped_column(String(50), unique=True)

    __mapper_args__ = {"polymorphic_identity": UserRole.SYSTEM_ADMIN.value}
