"""Tests for the Redis-backed analytics cache with a mocked client."""

import json
from unittest.mock import AsyncMock

import pytest
import redis.asyncio as redis

from caseflow.core.config import Settings
from caseflow.infrastructure.cache.redis_cache import CacheService


@pytest.fixture
def client() -> AsyncMock:
    return AsyncMock()


def _cache(client, **settings) -> CacheService:
    return CacheService(redis_client=client, settings=Settings(**settings))


async def test_get_decodes_stored_json(client) -> None:
    client.get.return_value = json.dumps({"velocity": 0.5})

    assert await _cache(client).get("analytics:velocity:_all:7") == {"velocity": 0.5}


async def test_miss_returns_none(client) -> None:
    client.get.return_value = None

    assert await _cache(client).get("k") is None


async def test_set_writes_with_ttl(client) -> None:
    assert await _cache(client).set("k", [1, 2], ttl=30) is True
    client.setex.assert_awaited_once_with("k", 30, "[1, 2]")


async def test_redis_error_degrades_to_miss(client) -> None:
    client.get.side_effect = redis.ResponseError("WRONGTYPE")

    assert await _cache(client).get("k") is None


async def test_lost_connection_without_reconnect_disables_cache(client) -> None:
    client.setex.side_effect = redis.ConnectionError("gone")
    cache = _cache(client, redis_enabled=False)

    assert await cache.set("k", 1) is False
    assert cache.is_available() is False
    client.aclose.assert_awaited_once()


async def test_unavailable_cache_never_touches_redis() -> None:
    cache = CacheService(settings=Settings(redis_enabled=False))
    await cache.connect()

    assert cache.is_available() is False
    assert await cache.get("k") is None
    assert await cache.set("k", {"a": 1}) is False
