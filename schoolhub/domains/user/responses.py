# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Role-scoped public views of user records.

The view of a user is what gets copied into a login session and
returned by the API. It is built from allow-lists only: the common
fields plus the fields defined for the user's role. Credentials and
lockout bookkeeping are never part of any list.
"""

from typing import Any

from schoolhub.infrastructure.database.models.tenant import UserRole
from schoolhub.utils.datetime import format_iso

COMMON_FIELDS: tuple[str, ...] = (
    "username",
    "first_name",
    "middle_name",
    "last_name",
    "role",
    "nick_name",
    "gender",
    "date_of_birth",
    "address",
    "phone",
    "email",
    "bio",
    "avatar",
    "is_active",
    "notifications",
    "must_change_password",
    "default_password",
    "password_changed_at",
)

ROLE_FIELDS: dict[str, tuple[str, ...]] = {
    UserRole.STUDENT.value: (
        "student_id",
        "class_id",
        "class_name",
        "class_level",
        "session",
        "guardian",
    ),
    UserRole.TEACHER.value: (
        "teacher_id",
        "subjects",
        "sponsor_class",
    ),
    UserRole.ADMINISTRATOR.value: (
        "admin_id",
        "position",
    ),
    UserRole.SYSTEM_ADMIN.value: (
        "sys_id",
    ),
}

_DATE_FIELDS = frozenset({"password_changed_at", "date_of_birth"})


def allowed_fields(role: str | None) -> tuple[str, ...]:
    """All keys a view of a user with this role may contain."""
    return ("user_id", *COMMON_FIELDS, *ROLE_FIELDS.get(role or "", ()))


def build_user_response(user: Any) -> dict[str, Any]:
    """Build the role-scoped view of a user.

    Args:
        user: A user model instance (or any object with the same
            attributes). Missing attributes become None.

    Returns:
        Dict with user_id, the common fields and the role's fields.
    """
    role = getattr(user, "role", None)
    if isinstance(role, UserRole):
        role = role.value

    view: dict[str, Any] = {"user_id": str(user.id)}

    for field in (*COMMON_FIELDS, *ROLE_FIELDS.get(role or "", ())):
        value = getattr(user, field, None)
        if field in _DATE_FIELDS:
            value = format_iso(value)
        view[field] = value

    view["role"] = role
    if view["notifications"] is None:
        view["notifications"] = []

    return view


def session_user_view(session: dict[str, Any]) -> dict[str, Any]:
    """Extract the user view from a login session record.

    Session bookkeeping (tenant_id, purpose, timestamps, client info)
    is dropped; only keys allowed for the stored role are kept.
    """
    return {key: session[key] for key in allowed_fields(session.get("role")) if key in session}
