# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Pytest configuration and shared fixtures.

This module provides fixtures used across all test types:
- Unit tests (in-memory Redis double, user and school factories)
- Integration tests (skipped unless --run-integration is given)
"""

import builtins
import json
import os
from collections.abc import Iterator
from typing import Any

import pytest

# Rate limit counters stay in process during tests
os.environ.setdefault("RATE_LIMIT_STORAGE_URI", "memory://")

from schoolhub.infrastructure.cache import RedisError  # noqa: E402
from schoolhub.infrastructure.database.models.central import SchoolProfile  # noqa: E402
from schoolhub.infrastructure.database.models.tenant import (  # noqa: E402
    Administrator,
    Student,
    SystemAdmin,
    Teacher,
    User,
)

TEST_HOST = "riverside.example"


# =============================================================================
# Marker Configuration
# =============================================================================


def pytest_addoption(parser: pytest.Parser) -> None:
    parser.addoption(
        "--run-integration",
        action="store_true",
        default=False,
        help="run tests that need PostgreSQL/Redis services",
    )


def pytest_configure(config: pytest.Config) -> None:
    """Configure custom pytest markers."""
    config.addinivalue_line(
        "markers", "unit: mark test as a unit test"
    )
    config.addinivalue_line(
        "markers", "integration: mark test as an integration test (requires services)"
    )


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    if config.getoption("--run-integration"):
        return

    skip_integration = pytest.mark.skip(reason="needs --run-integration")
    for item in items:
        if "integration" in item.keywords:
            item.add_marker(skip_integration)


# =============================================================================
# In-memory Redis
# =============================================================================


class InMemoryRedis:
    """Stand-in for RedisClient keeping data in dicts.

    TTLs are recorded but time does not pass; tests expire keys
    explicitly with expire_now().
    """

    def __init__(self) -> None:
        self.values: dict[str, str] = {}
        self.sets: dict[str, set[str]] = {}
        self.ttls: dict[str, int] = {}
        self.fail = False

    def _check(self) -> None:
        if self.fail:
            raise RedisError("Connection refused")

    def expire_now(self, key: str) -> None:
        self.values.pop(key, None)
        self.sets.pop(key, None)
        self.ttls.pop(key, None)

    async def set(self, key: str, value: Any, expire_seconds: int | None = None) -> None:
        self._check()
        self.values[key] = value if isinstance(value, str) else json.dumps(value, default=str)
        if expire_seconds:
            self.ttls[key] = expire_seconds
        else:
            self.ttls.pop(key, None)

    async def get(self, key: str) -> Any:
        self._check()
        raw = self.values.get(key)
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except json.JSONDecodeError:
            return raw

    async def delete(self, *keys: str) -> int:
        self._check()
        removed = 0
        for key in keys:
            if key in self.values or key in self.sets:
                removed += 1
            self.expire_now(key)
        return removed

    async def exists(self, key: str) -> bool:
        self._check()
        return key in self.values or key in self.sets

    async def expire(self, key: str, seconds: int) -> bool:
        self._check()
        if key not in self.values and key not in self.sets:
            return False
        self.ttls[key] = seconds
        return True

    async def ttl(self, key: str) -> int:
        self._check()
        if key not in self.values and key not in self.sets:
            return -2
        return self.ttls.get(key, -1)

    async def members(self, key: str) -> builtins.set[str]:
        self._check()
        return set(self.sets.get(key, set()))

    async def remove_members(self, key: str, *members: str) -> int:
        self._check()
        current = self.sets.get(key, set())
        removed = len(current.intersection(members))
        current.difference_update(members)
        if not current:
            self.sets.pop(key, None)
        return removed

    async def set_indexed(self, key: str, value: Any, expire_seconds: int, index_key: str) -> None:
        await self.set(key, value, expire_seconds)
        self.sets.setdefault(index_key, set()).add(key)
        self.ttls[index_key] = max(self.ttls.get(index_key, 0), expire_seconds)

    async def delete_indexed(self, index_key: str, *keys: str) -> int:
        await self.remove_members(index_key, *keys)
        return await self.delete(*keys)

    async def ping(self) -> bool:
        return not self.fail


@pytest.fixture
def fake_redis() -> InMemoryRedis:
    return InMemoryRedis()


# =============================================================================
# Model factories
# =============================================================================


def make_user(cls: type[User] = Teacher, **overrides: Any) -> User:
    """Build a user model instance with column defaults filled in."""
    fields: dict[str, Any] = {
        "id": "a3c1f0e2-5b7d-4e19-9f2a-0c8d6e4b1a77",
        "role": cls.__mapper__.polymorphic_identity,
        "username": "jdoe",
        "password_hash": None,
        "first_name": "Jane",
        "middle_name": None,
        "last_name": "Doe",
        "nick_name": None,
        "gender": "female",
        "date_of_birth": "1990-04-12",
        "address": "12 Harbour Road",
        "phone": "+231770000001",
        "email": "jane@riverside.example",
        "bio": None,
        "avatar": None,
        "is_active": True,
        "must_change_password": False,
        "default_password": False,
        "password_changed_at": None,
        "locked_until": None,
        "failed_login_attempts": 0,
        "last_login_at": None,
        "notifications": [],
    }
    fields.update(overrides)
    return cls(**fields)


@pytest.fixture
def user_factory():
    return make_user


@pytest.fixture
def student() -> Student:
    return make_user(
        Student,
        id="5d2e9b1c-0a4f-4c3e-8b7a-1f6d2c9e0b31",
        username="ksmith",
        first_name="Kofi",
        last_name="Smith",
        student_id="STU-0042",
        class_id="cls-10a",
        class_name="10A",
        class_level="Grade 10",
        session="2024/2025",
        guardian={"name": "Ama Smith", "phone": "+231770000009"},
    )


@pytest.fixture
def teacher() -> Teacher:
    return make_user(
        Teacher,
        teacher_id="TCH-007",
        subjects=[{"subject": "Mathematics", "classes": ["10A"]}],
        sponsor_class="10A",
    )


@pytest.fixture
def administrator() -> Administrator:
    return make_user(
        Administrator,
        id="c0b1d2e3-f4a5-4b6c-8d7e-9f0a1b2c3d4e",
        username="registrar",
        admin_id="ADM-001",
        position="Registrar",
    )


@pytest.fixture
def system_admin() -> SystemAdmin:
    return make_user(
        SystemAdmin,
        id="e7f8a9b0-c1d2-4e3f-a4b5-c6d7e8f9a0b1",
        username="root",
        sys_id="SYS-1",
    )


@pytest.fixture
def school() -> SchoolProfile:
    return SchoolProfile(
        id="0f1e2d3c-4b5a-4968-8776-a5b4c3d2e1f0",
        host=TEST_HOST,
        db_name="school_riverside",
        name="Riverside Academy",
        short_name="Riverside",
        initials="RA",
        slogan="Learning by the river",
        description=None,
        logo_url=None,
        year_founded=1998,
        subscription_plan="standard",
        enabled_features=["grades", "notifications"],
        settings={},
        is_active=True,
    )


@pytest.fixture
def clean_settings_cache() -> Iterator[None]:
    from schoolhub.core.config import clear_settings_cache

    clear_settings_cache()
    yield
    clear_settings_cache()
