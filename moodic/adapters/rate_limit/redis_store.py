"""Redis-backed counter store.

Counters live in Redis so every API instance shares one quota per client.
INCR is atomic server-side; PEXPIRE and PTTL are issued as separate commands.
"""

from __future__ import annotations

import logging

from redis.asyncio import Redis
from redis.exceptions import RedisError

from moodic.adapters.rate_limit.base import CounterStore, StoreError

logger = logging.getLogger(__name__)


class RedisCounterStore(CounterStore):
    """CounterStore over ``redis.asyncio``.

    Every client-library or socket failure is re-raised as ``StoreError`` so
    the limiter has a single failure type to fail open on.
    """

    def __init__(self, client: Redis) -> None:
        self._client = client

    @classmethod
    def from_url(
        cls,
        url: str,
        *,
        socket_timeout: float | None = None,
        socket_connect_timeout: float | None = None,
    ) -> "RedisCounterStore":
        """Build a store from a connection URL.

        Args:
            url: Redis URL (redis:// or rediss://).
            socket_timeout: Per-command socket timeout in seconds.
            socket_connect_timeout: Connect timeout in seconds.
        """
        client = Redis.from_url(
            url,
            socket_timeout=socket_timeout,
            socket_connect_timeout=socket_connect_timeout,
            decode_responses=True,
        )
        return cls(client)

    async def increment(self, key: str) -> int:
        try:
            return int(await self._client.incr(key))
        except (RedisError, OSError) as exc:
            raise StoreError(f"INCR {key} failed: {exc}") from exc

    async def expire(self, key: str, ttl_ms: int) -> None:
        try:
            await self._client.pexpire(key, ttl_ms)
        except (RedisError, OSError) as exc:
            raise StoreError(f"PEXPIRE {key} failed: {exc}") from exc

    async def ttl(self, key: str) -> int:
        try:
            return int(await self._client.pttl(key))
        except (RedisError, OSError) as exc:
            raise StoreError(f"PTTL {key} failed: {exc}") from exc

    async def close(self) -> None:
        try:
            await self._client.aclose()
        except (RedisError, OSError) as exc:
            logger.warning("redis.close_failed", extra={"error_msg": str(exc)})
