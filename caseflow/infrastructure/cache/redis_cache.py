"""Redis store for cached analytics payloads.

The cache is an optimisation only. A Redis outage turns every lookup into a
miss and every write into a no-op; after a dropped connection one reconnect
is attempted before giving up on that call. Key layout is defined in
``caseflow.infrastructure.cache.keys``.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

import redis.asyncio as redis

from caseflow.core.config import Settings, get_settings

logger = logging.getLogger(__name__)

T = TypeVar("T")

_TRANSIENT = (redis.ConnectionError, redis.TimeoutError)


def _client_from(settings: Settings) -> redis.Redis:
    password = settings.redis_password.get_secret_value() if settings.redis_password else None
    return redis.Redis(
        host=settings.redis_host,
        port=settings.redis_port,
        db=settings.redis_db,
        password=password,
        decode_responses=True,
        socket_connect_timeout=5,
        socket_keepalive=True,
    )


class CacheService:
    """JSON values in Redis with per-key TTL (satisfies ``ICacheService``)."""

    def __init__(
        self, redis_client: redis.Redis | None = None, settings: Settings | None = None
    ) -> None:
        self.settings = settings or get_settings()
        self.client = redis_client

    def is_available(self) -> bool:
        return self.client is not None

    async def connect(self) -> None:
        """Open and ping a client; on failure stay disconnected and log why."""
        if self.client is not None or not self.settings.redis_enabled:
            return
        client = _client_from(self.settings)
        try:
            await client.ping()
        except _TRANSIENT as exc:
            logger.warning("Analytics cache offline, Redis unreachable: %s", exc)
            await client.aclose()
            return
        self.client = client
        logger.info(
            "Analytics cache on redis://%s:%s/%s",
            self.settings.redis_host,
            self.settings.redis_port,
            self.settings.redis_db,
        )

    async def disconnect(self) -> None:
        client, self.client = self.client, None
        if client is not None:
            await client.aclose()

    async def _reconnect(self) -> bool:
        stale, self.client = self.client, None
        if stale is not None:
            try:
                await stale.aclose()
            except redis.RedisError as exc:
                logger.debug("Closing stale Redis client failed: %s", exc)
        await self.connect()
        return self.client is not None

    async def _run(
        self, action: str, key: str, op: Callable[[redis.Redis], Awaitable[T]], fallback: T
    ) -> T:
        if self.client is None:
            return fallback
        try:
            return await op(self.client)
        except _TRANSIENT:
            logger.warning("Redis connection lost during %s %s; reconnecting", action, key)
            if not await self._reconnect():
                return fallback
            assert self.client is not None
            try:
                return await op(self.client)
            except redis.RedisError:
                logger.exception("Cache %s %s failed after reconnect", action, key)
                return fallback
        except redis.RedisError:
            logger.exception("Cache %s %s failed", action, key)
            return fallback

    async def get(self, key: str) -> Any | None:
        raw = await self._run("get", key, lambda c: c.get(key), None)
        logger.debug("cache %s %s", "miss" if raw is None else "hit", key)
        return None if raw is None else json.loads(raw)

    async def set(self, key: str, value: Any, ttl: int = 300) -> bool:
        payload = json.dumps(value)

        async def store(c: redis.Redis) -> bool:
            await c.setex(key, ttl, payload)
            return True

        return await self._run("set", key, store, False)
