# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for school profile lookups."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from schoolhub.domains.school import SchoolService, build_public_profile, normalize_host


class TestNormalizeHost:
    """Tests for normalize_host."""

    @pytest.mark.parametrize(
        "value,expected",
        [
            ("riverside.example", "riverside.example"),
            ("Riverside.Example:8443", "riverside.example"),
            ("  localhost:3000 ", "localhost"),
            ("", None),
            (None, None),
            (":8080", None),
        ],
    )
    def test_normalize(self, value, expected) -> None:
        assert normalize_host(value) == expected


class TestBuildPublicProfile:
    """Tests for build_public_profile."""

    def test_hides_internal_columns(self, school) -> None:
        profile = build_public_profile(school)

        assert profile["host"] == "riverside.example"
        assert profile["name"] == "Riverside Academy"
        assert profile["enabled_features"] == ["grades", "notifications"]
        assert "db_name" not in profile
        assert "settings" not in profile
        assert "id" not in profile


class TestSchoolService:
    """Tests for SchoolService.get_by_host."""

    async def test_found(self, school) -> None:
        result = MagicMock()
        result.scalar_one_or_none.return_value = school
        db = AsyncMock()
        db.execute = AsyncMock(return_value=result)

        assert await SchoolService(db).get_by_host("Riverside.example:443") is school
        db.execute.assert_awaited_once()

    async def test_unknown_host(self) -> None:
        result = MagicMock()
        result.scalar_one_or_none.return_value = None
        db = AsyncMock()
        db.execute = AsyncMock(return_value=result)

        assert await SchoolService(db).get_by_host("nowhere.example") is None

    async def test_empty_host_skips_query(self) -> None:
        db = AsyncMock()

        assert await SchoolService(db).get_by_host("") is None
        db.execute.assert_not_awaited()


class TestLoginAllowed:
    """Tests for SchoolProfile.login_allowed."""

    def test_defaults_to_allowed(self, school) -> None:
        assert school.login_allowed("teacher") is True

    def test_disabled_role(self, school) -> None:
        school.settings = {
            "student_settings": {"login_access": False},
            "teacher_settings": {"login_access": True},
        }

        assert school.login_allowed("student") is False
        assert school.login_allowed("teacher") is True
        assert school.login_allowed("administrator") is True
