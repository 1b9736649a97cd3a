"""Unit tests for the Redis counter store (client mocked)."""

from unittest.mock import AsyncMock, MagicMock

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError
from redis.exceptions import TimeoutError as RedisTimeoutError

from moodic.adapters.rate_limit.base import RateLimitPolicy, StoreError
from moodic.adapters.rate_limit.limiter import FixedWindowRateLimiter
from moodic.adapters.rate_limit.redis_store import RedisCounterStore


@pytest.fixture
def redis_client() -> MagicMock:
    client = MagicMock()
    client.incr = AsyncMock(return_value=1)
    client.pexpire = AsyncMock(return_value=True)
    client.pttl = AsyncMock(return_value=60_000)
    client.aclose = AsyncMock()
    return client


@pytest.mark.asyncio
async def test_commands_map_to_incr_pexpire_pttl(redis_client: MagicMock) -> None:
    store = RedisCounterStore(redis_client)

    assert await store.increment("ratelimit:mood:abc") == 1
    await store.expire("ratelimit:mood:abc", 60_000)
    assert await store.ttl("ratelimit:mood:abc") == 60_000

    redis_client.incr.assert_awaited_once_with("ratelimit:mood:abc")
    redis_client.pexpire.assert_awaited_once_with("ratelimit:mood:abc", 60_000)
    redis_client.pttl.assert_awaited_once_with("ratelimit:mood:abc")


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "error",
    [RedisConnectionError("refused"), RedisTimeoutError("slow"), OSError("unreachable")],
)
async def test_client_failures_become_store_errors(redis_client: MagicMock, error: Exception) -> None:
    redis_client.incr.side_effect = error
    store = RedisCounterStore(redis_client)

    with pytest.raises(StoreError):
        await store.increment("k")


@pytest.mark.asyncio
async def test_limiter_over_redis_sets_expiry_only_on_first_hit(redis_client: MagicMock) -> None:
    store = RedisCounterStore(redis_client)
    limiter = FixedWindowRateLimiter(store, clock=lambda: 0)
    policy = RateLimitPolicy(max_requests=4, window_ms=60_000, key_namespace="ratelimit:mood")

    await limiter.check("abc", policy)
    redis_client.incr.return_value = 2
    redis_client.pttl.return_value = 55_000
    decision = await limiter.check("abc", policy)

    redis_client.pexpire.assert_awaited_once_with("ratelimit:mood:abc", 60_000)
    assert decision.remaining == 2
    assert decision.reset_at == 55_000


@pytest.mark.asyncio
async def test_limiter_fails_open_when_redis_is_down(redis_client: MagicMock) -> None:
    redis_client.incr.side_effect = RedisConnectionError("refused")
    limiter = FixedWindowRateLimiter(RedisCounterStore(redis_client), clock=lambda: 0)
    policy = RateLimitPolicy(max_requests=4, window_ms=60_000)

    decision = await limiter.check("abc", policy)

    assert decision.allowed is True
    assert decision.remaining == 4
    assert decision.reset_at == 60_000


@pytest.mark.asyncio
async def test_close_closes_client(redis_client: MagicMock) -> None:
    await RedisCounterStore(redis_client).close()

    redis_client.aclose.assert_awaited_once()


def test_from_url_builds_client() -> None:
    store = RedisCounterStore.from_url("redis://localhost:6379/0", socket_timeout=1.0)

    assert isinstance(store, RedisCounterStore)
