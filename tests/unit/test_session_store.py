# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for the Redis-backed session store."""

import pytest

from schoolhub.domains.session import (
    PROTECTED_FIELDS,
    SessionStore,
    merge_session_data,
    user_sessions_key,
)
from schoolhub.infrastructure.cache import RedisError


@pytest.fixture
def store(fake_redis) -> SessionStore:
    return SessionStore(fake_redis, default_ttl=86400)


def login_record(user_id: str = "u-1", **extra) -> dict:
    return {"user_id": user_id, "tenant_id": "riverside.example", "purpose": "login", **extra}


class TestMergeSessionData:
    """Tests for merge_session_data."""

    def test_new_values_overwrite(self):
        merged = merge_session_data({"first_name": "Jane"}, {"first_name": "Janet"})
        assert merged["first_name"] == "Janet"

    def test_none_values_are_ignored(self):
        merged = merge_session_data({"email": "a@b.c"}, {"email": None})
        assert merged["email"] == "a@b.c"

    def test_protected_fields_are_kept(self):
        existing = {"login_time": "2025-01-01T00:00:00+00:00", "ip_address": "10.0.0.1"}
        merged = merge_session_data(existing, {"login_time": "later", "ip_address": "10.0.0.2"})
        assert merged == existing

    def test_last_activity_survives_even_if_not_preserved(self):
        existing = {"last_activity": "t0"}
        merged = merge_session_data(existing, {"last_activity": "t1"}, preserve_fields=())
        assert merged["last_activity"] == "t0"

    def test_does_not_mutate_inputs(self):
        existing = {"a": 1}
        merge_session_data(existing, {"a": 2})
        assert existing == {"a": 1}

    def test_default_preserve_fields(self):
        assert "session_id" in PROTECTED_FIELDS
        assert "csrf_token" in PROTECTED_FIELDS


class TestCreateSession:
    """Tests for SessionStore.create_session."""

    async def test_returns_uuid_and_stores_record(self, store, fake_redis):
        session_id = await store.create_session(login_record())

        assert len(session_id) == 36
        assert await store.get_session(session_id) == login_record()

    async def test_uses_default_ttl(self, store, fake_redis):
        session_id = await store.create_session(login_record())
        assert await fake_redis.ttl(session_id) == 86400

    async def test_uses_explicit_ttl(self, store, fake_redis):
        session_id = await store.create_session(login_record(), expire_seconds=300)
        assert await fake_redis.ttl(session_id) == 300

    async def test_indexes_session_under_user(self, store, fake_redis):
        first = await store.create_session(login_record())
        second = await store.create_session(login_record())

        assert await fake_redis.members(user_sessions_key("u-1")) == {first, second}

    async def test_overwrites_given_session_id(self, store):
        session_id = await store.create_session(login_record(nick_name="JD"))
        same_id = await store.create_session(login_record(nick_name="Jay"), session_id=session_id)

        assert same_id == session_id
        assert (await store.get_session(session_id))["nick_name"] == "Jay"

    async def test_requires_user_id(self, store):
        with pytest.raises(ValueError):
            await store.create_session({"tenant_id": "riverside.example"})

    async def test_store_failure_propagates(self, store, fake_redis):
        fake_redis.fail = True
        with pytest.raises(RedisError):
            await store.create_session(login_record())


class TestGetSession:
    """Tests for SessionStore.get_session."""

    async def test_missing_session(self, store):
        assert await store.get_session("does-not-exist") is None

    async def test_empty_id(self, store):
        assert await store.get_session("") is None

    async def test_expired_session(self, store, fake_redis):
        session_id = await store.create_session(login_record())
        fake_redis.expire_now(session_id)

        assert await store.get_session(session_id) is None

    async def test_non_object_payload_is_discarded(self, store, fake_redis):
        await fake_redis.set("garbage-session-id", "not json")
        assert await store.get_session("garbage-session-id") is None


class TestDestroySession:
    """Tests for SessionStore.destroy_session."""

    async def test_removes_record_and_index_entry(self, store, fake_redis):
        keep = await store.create_session(login_record())
        drop = await store.create_session(login_record())

        assert await store.destroy_session(drop) is True
        assert await store.get_session(drop) is None
        assert await fake_redis.members(user_sessions_key("u-1")) == {keep}

    async def test_unknown_session(self, store):
        assert await store.destroy_session("does-not-exist") is False

    async def test_record_without_user(self, store, fake_redis):
        await fake_redis.set("orphan-session", {"purpose": "login"}, expire_seconds=60)

        assert await store.destroy_session("orphan-session") is True
        assert await store.get_session("orphan-session") is None


class TestUpdateSession:
    """Tests for SessionStore.update_session."""

    async def test_merges_and_keeps_ttl(self, store, fake_redis):
        session_id = await store.create_session(
            login_record(nick_name="JD", login_time="t0"), expire_seconds=1234
        )

        assert await store.update_session(session_id, {"nick_name": "Jay", "login_time": "t9"})

        record = await store.get_session(session_id)
        assert record["nick_name"] == "Jay"
        assert record["login_time"] == "t0"
        assert await fake_redis.ttl(session_id) == 1234

    async def test_replace_without_safe_merge(self, store):
        session_id = await store.create_session(login_record(nick_name="JD"))

        await store.update_session(session_id, {"user_id": "u-1"}, safe_merge=False)

        assert await store.get_session(session_id) == {"user_id": "u-1"}

    async def test_gone_session(self, store):
        assert await store.update_session("does-not-exist", {"a": 1}) is False


class TestUpdateAllUserSessions:
    """Tests for SessionStore.update_all_user_sessions."""

    async def test_updates_every_live_session(self, store):
        ids = [await store.create_session(login_record(nick_name="JD")) for _ in range(3)]

        updated = await store.update_all_user_sessions("u-1", {"nick_name": "Jay"})

        assert updated == 3
        for session_id in ids:
            assert (await store.get_session(session_id))["nick_name"] == "Jay"

    async def test_each_session_keeps_its_own_ttl(self, store, fake_redis):
        short = await store.create_session(login_record(), expire_seconds=300)
        long = await store.create_session(login_record(), expire_seconds=86400)

        await store.update_all_user_sessions("u-1", {"nick_name": "Jay"})

        assert await fake_redis.ttl(short) == 300
        assert await fake_redis.ttl(long) == 86400

    async def test_drops_expired_ids_from_index(self, store, fake_redis):
        live = await store.create_session(login_record())
        stale = await store.create_session(login_record())
        fake_redis.expire_now(stale)

        updated = await store.update_all_user_sessions("u-1", {"nick_name": "Jay"})

        assert updated == 1
        assert await fake_redis.members(user_sessions_key("u-1")) == {live}
        assert await store.get_session(stale) is None

    async def test_session_expiring_mid_update_is_not_recreated(self, store, fake_redis, monkeypatch):
        session_id = await store.create_session(login_record())
        read_ttl = fake_redis.ttl

        async def ttl_then_expire(key):
            remaining = await read_ttl(key)
            fake_redis.expire_now(key)
            return remaining

        monkeypatch.setattr(fake_redis, "ttl", ttl_then_expire)

        updated = await store.update_all_user_sessions("u-1", {"notifications": []})

        assert updated == 0
        assert session_id not in fake_redis.values
        assert await fake_redis.members(user_sessions_key("u-1")) == set()

    async def test_does_not_touch_other_users(self, store):
        other = await store.create_session(login_record("u-2", nick_name="Other"))
        await store.create_session(login_record("u-1"))

        await store.update_all_user_sessions("u-1", {"nick_name": "Jay"})

        assert (await store.get_session(other))["nick_name"] == "Other"

    async def test_extra_preserve_fields(self, store):
        session_id = await store.create_session(login_record(role="teacher"))

        await store.update_all_user_sessions(
            "u-1", {"role": "administrator"}, preserve_fields=("role",)
        )

        assert (await store.get_session(session_id))["role"] == "teacher"

    async def test_only_update_fields(self, store):
        session_id = await store.create_session(login_record(nick_name="JD", bio="old"))

        await store.update_all_user_sessions(
            "u-1",
            {"nick_name": "Jay", "bio": "new"},
            only_update_fields=["bio"],
        )

        record = await store.get_session(session_id)
        assert record["bio"] == "new"
        assert record["nick_name"] == "JD"

    async def test_user_id_is_always_kept(self, store):
        session_id = await store.create_session(login_record())

        await store.update_all_user_sessions("u-1", {"user_id": "u-999"}, safe_merge=False)

        assert (await store.get_session(session_id))["user_id"] == "u-1"

    async def test_no_sessions(self, store):
        assert await store.update_all_user_sessions("nobody", {"a": 1}) == 0

    async def test_update_user_session_notifications(self, store):
        session_id = await store.create_session(login_record(notifications=[]))
        notifications = [{"id": "n1", "type": "Grades", "read": True}]

        updated = await store.update_user_session_notifications("u-1", notifications)

        assert updated == 1
        assert (await store.get_session(session_id))["notifications"] == notifications


class TestDestroyAllUserSessions:
    """Tests for SessionStore.destroy_all_user_sessions."""

    async def test_destroys_everything(self, store, fake_redis):
        ids = [await store.create_session(login_record()) for _ in range(2)]

        assert await store.destroy_all_user_sessions("u-1") == 2
        for session_id in ids:
            assert await store.get_session(session_id) is None
        assert await fake_redis.members(user_sessions_key("u-1")) == set()

    async def test_keeps_excluded_session(self, store, fake_redis):
        current = await store.create_session(login_record())
        await store.create_session(login_record())

        assert await store.destroy_all_user_sessions("u-1", exclude_session_id=current) == 1
        assert await store.get_session(current) is not None
        assert await fake_redis.members(user_sessions_key("u-1")) == {current}

    async def test_no_sessions(self, store):
        assert await store.destroy_all_user_sessions("nobody") == 0
