# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Fixtures for API tests.

The app runs without its lifespan: no database or Redis connections are
opened. Tenant resolution, the Redis client and the user service are
replaced with in-memory versions.
"""

from collections.abc import Iterator
from unittest.mock import AsyncMock

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from schoolhub.api.app import create_app
from schoolhub.api.dependencies import get_password_hasher, get_user_service
from schoolhub.api.middleware.rate_limit import limiter
from schoolhub.api.middleware.tenant import TenantContext, TenantMiddleware
from schoolhub.domains.auth import PasswordHasher
from schoolhub.domains.user import UserService
from schoolhub.infrastructure.cache import redis_client
from schoolhub.infrastructure.database.models.tenant import User

API_PASSWORD = "river-2025"

api_hasher = PasswordHasher(rounds=4)
API_PASSWORD_HASH = api_hasher.hash(API_PASSWORD)


class InMemoryUserService(UserService):
    """UserService whose lookups read from a dict instead of the database."""

    def __init__(self) -> None:
        super().__init__(AsyncMock())
        self.users: dict[str, User] = {}

    def add(self, user: User) -> User:
        if user.password_hash is None:
            user.password_hash = API_PASSWORD_HASH
        self.users[str(user.id)] = user
        return user

    async def get_by_username(self, username: str, role: str | None = None) -> User | None:
        for user in self.users.values():
            if user.username == username and (role is None or user.role == role):
                return user
        return None

    async def get_by_id(self, user_id: str) -> User | None:
        return self.users.get(str(user_id))


@pytest.fixture
def api_password() -> str:
    """Plain password of every user added to the user service without one."""
    return API_PASSWORD


@pytest.fixture
def user_service() -> InMemoryUserService:
    return InMemoryUserService()


@pytest.fixture
def app(monkeypatch, fake_redis, school, user_service, clean_settings_cache) -> Iterator[FastAPI]:
    async def resolve_tenant(self, host: str) -> TenantContext | None:
        return TenantContext(school) if host == school.host else None

    monkeypatch.setattr(TenantMiddleware, "_resolve_tenant", resolve_tenant)
    monkeypatch.setattr(redis_client, "_redis_client", fake_redis)
    monkeypatch.setattr(limiter, "enabled", False)

    application = create_app()
    application.dependency_overrides[get_user_service] = lambda: user_service
    application.dependency_overrides[get_password_hasher] = lambda: api_hasher

    yield application

    application.dependency_overrides.clear()


@pytest.fixture
def client(app, school) -> TestClient:
    return TestClient(app, base_url=f"http://{school.host}")
