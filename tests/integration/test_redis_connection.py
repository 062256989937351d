# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Integration tests for the Redis session store.

These tests require a running Redis 7 instance.
Run with: pytest tests/integration/test_redis_connection.py --run-integration -v

Prerequisites:
    - Redis reachable with the REDIS_* settings
"""

from uuid import uuid4

import pytest

from schoolhub.core.config.settings import Settings, clear_settings_cache
from schoolhub.domains.session import SessionStore, user_sessions_key
from schoolhub.infrastructure.cache.redis_client import (
    RedisClient,
    RedisError,
    close_redis,
    get_redis,
    init_redis,
)


@pytest.fixture
def settings() -> Settings:
    """Provide fresh settings for each test."""
    clear_settings_cache()
    return Settings()


@pytest.fixture
async def redis_client(settings: Settings) -> RedisClient:
    """Provide a connected Redis client."""
    client = RedisClient(settings)
    await client.connect()
    yield client
    await client.close()


@pytest.fixture
def user_id() -> str:
    return f"it-{uuid4()}"


@pytest.mark.integration
class TestRedisInitialization:
    """Tests for Redis initialization."""

    async def test_init_and_close(self, settings: Settings) -> None:
        await init_redis(settings)
        try:
            assert await get_redis().ping() is True
        finally:
            await close_redis()

        with pytest.raises(RedisError) as exc_info:
            get_redis()

        assert "not initialized" in str(exc_info.value)


@pytest.mark.integration
class TestSessionStoreOnRedis:
    """Session store behaviour against a real server."""

    async def test_session_lifecycle(self, redis_client: RedisClient, user_id: str) -> None:
        store = SessionStore(redis_client, default_ttl=120)

        session_id = await store.create_session({"user_id": user_id, "purpose": "login"})
        try:
            assert (await store.get_session(session_id))["user_id"] == user_id
            assert 0 < await redis_client.ttl(session_id) <= 120
            assert session_id in await redis_client.members(user_sessions_key(user_id))
        finally:
            assert await store.destroy_session(session_id) is True

        assert await store.get_session(session_id) is None
        assert await redis_client.members(user_sessions_key(user_id)) == set()

    async def test_index_expiry_never_shrinks(self, redis_client: RedisClient, user_id: str) -> None:
        store = SessionStore(redis_client)

        long_lived = await store.create_session({"user_id": user_id}, expire_seconds=600)
        short_lived = await store.create_session({"user_id": user_id}, expire_seconds=30)
        try:
            assert await redis_client.ttl(user_sessions_key(user_id)) > 30
        finally:
            await store.destroy_all_user_sessions(user_id)

        assert await redis_client.exists(long_lived) is False
        assert await redis_client.exists(short_lived) is False

    async def test_update_keeps_remaining_ttl(self, redis_client: RedisClient, user_id: str) -> None:
        store = SessionStore(redis_client)
        session_id = await store.create_session({"user_id": user_id, "nick_name": "JD"}, 90)
        try:
            assert await store.update_all_user_sessions(user_id, {"nick_name": "Jay"}) == 1
            assert (await store.get_session(session_id))["nick_name"] == "Jay"
            assert 0 < await redis_client.ttl(session_id) <= 90
        finally:
            await store.destroy_all_user_sessions(user_id)
