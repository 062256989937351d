# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Cache infrastructure using Redis.

Example:
    from schoolhub.infrastructure.cache import init_redis, get_redis, close_redis

    await init_redis(settings)
    redis = get_redis()
    await redis.set("key", {"value": 1}, expire_seconds=60)
    await close_redis()
"""

from schoolhub.infrastructure.cache.redis_client import (
    RedisClient,
    RedisError,
    close_redis,
    get_redis,
    init_redis,
)

__all__ = [
    "RedisClient",
    "RedisError",
    "close_redis",
    "get_redis",
    "init_redis",
]
