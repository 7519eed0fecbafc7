"""Shared test setup: required settings in the environment, in-memory Redis."""

import os

os.environ.setdefault("BACKEND_API_URL", "http://backend.test")
os.environ.setdefault("REDIS_URL", "redis://localhost:6379/15")
os.environ.setdefault("ENVIRONMENT", "test")

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError


class FakeRedis:
    """In-memory stand-in for RedisClient's hash operations."""

    def __init__(self):
        self._hashes: dict[str, dict[str, str]] = {}
        self.hset_calls = 0
        self.hmget_calls = 0

    async def hset_many(self, key: str, mapping):
        self.hset_calls += 1
        bucket = self._hashes.setdefault(key, {})
        added = sum(1 for field in mapping if field not in bucket)
        bucket.update(mapping)
        return added

    async def hmget(self, key: str, fields):
        self.hmget_calls += 1
        bucket = self._hashes.get(key, {})
        return [bucket.get(field) for field in fields]

    def raw_hash(self, key: str) -> dict[str, str]:
        return dict(self._hashes.get(key, {}))


class FailingRedis:
    """Redis that raises on every call (simulated outage)."""

    async def hset_many(self, key: str, mapping):
        raise RedisConnectionError("Redis connection refused")

    async def hmget(self, key: str, fields):
        raise RedisConnectionError("Redis connection refused")


@pytest.fixture
def fake_redis():
    return FakeRedis()


@pytest.fixture
def failing_redis():
    return FailingRedis()
