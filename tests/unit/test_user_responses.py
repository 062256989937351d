# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for role-scoped user views."""

from datetime import datetime, timezone

import pytest

from schoolhub.domains.user import (
    COMMON_FIELDS,
    ROLE_FIELDS,
    allowed_fields,
    build_user_response,
    session_user_view,
)

SENSITIVE_FIELDS = ("password_hash", "locked_until", "failed_login_attempts", "last_login_at")


class TestBuildUserResponse:
    """Tests for build_user_response."""

    @pytest.mark.parametrize(
        "fixture_name,role",
        [
            ("student", "student"),
            ("teacher", "teacher"),
            ("administrator", "administrator"),
            ("system_admin", "system_admin"),
        ],
    )
    def test_keys_match_role_allow_list(self, request, fixture_name, role) -> None:
        """Every view has exactly user_id, the common fields and its role's fields."""
        user = request.getfixturevalue(fixture_name)

        view = build_user_response(user)

        assert set(view) == {"user_id", *COMMON_FIELDS, *ROLE_FIELDS[role]}
        assert view["role"] == role

    @pytest.mark.parametrize("fixture_name", ["student", "teacher", "administrator", "system_admin"])
    def test_never_leaks_credentials(self, request, fixture_name) -> None:
        user = request.getfixturevalue(fixture_name)
        user.password_hash = "$2b$12$abcdefghijklmnopqrstuv"
        user.locked_until = datetime(2030, 1, 1, tzinfo=timezone.utc)
        user.failed_login_attempts = 4

        view = build_user_response(user)

        for field in SENSITIVE_FIELDS:
            assert field not in view

    def test_student_fields(self, student) -> None:
        view = build_user_response(student)

        assert view["user_id"] == "5d2e9b1c-0a4f-4c3e-8b7a-1f6d2c9e0b31"
        assert view["student_id"] == "STU-0042"
        assert view["class_name"] == "10A"
        assert view["guardian"] == {"name": "Ama Smith", "phone": "+231770000009"}
        assert "teacher_id" not in view
        assert "sys_id" not in view

    def test_teacher_has_no_student_fields(self, teacher) -> None:
        view = build_user_response(teacher)

        assert view["teacher_id"] == "TCH-007"
        assert view["subjects"] == [{"subject": "Mathematics", "classes": ["10A"]}]
        assert "student_id" not in view
        assert "guardian" not in view

    def test_dates_become_iso_strings(self, teacher) -> None:
        teacher.password_changed_at = datetime(2025, 3, 1, 8, 30, tzinfo=timezone.utc)

        view = build_user_response(teacher)

        assert view["password_changed_at"] == "2025-03-01T08:30:00+00:00"
        assert view["date_of_birth"] == "1990-04-12"

    def test_missing_notifications_become_empty_list(self, user_factory) -> None:
        user = user_factory(notifications=None)

        assert build_user_response(user)["notifications"] == []

    def test_unknown_role_gets_common_fields_only(self, teacher) -> None:
        teacher.role = "janitor"

        view = build_user_response(teacher)

        assert set(view) == {"user_id", *COMMON_FIELDS}


class TestSessionUserView:
    """Tests for session_user_view."""

    def test_drops_session_bookkeeping(self, teacher) -> None:
        view = build_user_response(teacher)
        session = {
            **view,
            "tenant_id": "riverside.example",
            "purpose": "login",
            "login_time": "2025-01-01T00:00:00+00:00",
            "last_activity": "2025-01-01T00:00:00+00:00",
            "ip_address": "10.0.0.5",
            "user_agent": "pytest",
        }

        assert session_user_view(session) == view

    def test_drops_fields_of_other_roles(self) -> None:
        session = {"user_id": "u-1", "role": "student", "student_id": "S1", "sys_id": "SYS-1"}

        assert session_user_view(session) == {"user_id": "u-1", "role": "student", "student_id": "S1"}

    def test_allowed_fields_without_role(self) -> None:
        assert allowed_fields(None) == ("user_id", *COMMON_FIELDS)
