"""Unit tests for the fixed-window rate limiter."""

import pytest

from moodic.adapters.rate_limit.base import (
    TTL_KEY_MISSING,
    TTL_NO_EXPIRY,
    CounterStore,
    RateLimitDecision,
    RateLimitPolicy,
    StoreError,
)
from moodic.adapters.rate_limit.in_memory import InMemoryCounterStore
from moodic.adapters.rate_limit.limiter import FixedWindowRateLimiter

HOUR_MS = 3_600_000


def _policy(max_requests: int = 4, window_ms: int = HOUR_MS, namespace: str = "ratelimit:test"):
    return RateLimitPolicy(max_requests=max_requests, window_ms=window_ms, key_namespace=namespace)


class TestFreshWindow:
    @pytest.mark.asyncio
    async def test_first_call_is_allowed_with_one_slot_used(self, limiter, clock) -> None:
        decision = await limiter.check("abc", _policy(max_requests=4))

        assert decision.allowed is True
        assert decision.remaining == 3
        assert decision.limit == 4
        assert decision.reset_at == clock.now_ms + HOUR_MS

    @pytest.mark.asyncio
    async def test_first_call_sets_expiry_to_window(self, limiter, memory_store) -> None:
        await limiter.check("abc", _policy(window_ms=60_000))

        assert await memory_store.ttl("ratelimit:test:abc") == 60_000


class TestWithinWindow:
    @pytest.mark.asyncio
    async def test_remaining_counts_down_to_zero(self, limiter) -> None:
        policy = _policy(max_requests=4)

        decisions = [await limiter.check("abc", policy) for _ in range(4)]

        assert [d.allowed for d in decisions] == [True, True, True, True]
        assert [d.remaining for d in decisions] == [3, 2, 1, 0]

    @pytest.mark.asyncio
    async def test_calls_over_limit_are_denied_with_zero_remaining(self, limiter) -> None:
        policy = _policy(max_requests=2)
        for _ in range(2):
            await limiter.check("abc", policy)

        over = [await limiter.check("abc", policy) for _ in range(3)]

        assert all(d.allowed is False for d in over)
        assert all(d.remaining == 0 for d in over)

    @pytest.mark.asyncio
    async def test_denied_calls_still_increment_the_counter(self, limiter, memory_store) -> None:
        policy = _policy(max_requests=1)
        for _ in range(5):
            await limiter.check("abc", policy)

        assert await memory_store.increment("ratelimit:test:abc") == 6

    @pytest.mark.asyncio
    async def test_later_calls_do_not_refresh_expiry(self, limiter, clock) -> None:
        policy = _policy(max_requests=10, window_ms=60_000)
        first = await limiter.check("abc", policy)

        clock.advance(20_000)
        second = await limiter.check("abc", policy)

        assert second.reset_at == first.reset_at

    @pytest.mark.asyncio
    async def test_reset_at_never_increases_and_stays_in_future(self, limiter, clock) -> None:
        policy = _policy(max_requests=3, window_ms=60_000)
        previous = None

        for _ in range(6):
            decision = await limiter.check("abc", policy)
            assert decision.reset_at >= clock.now_ms
            if previous is not None:
                assert decision.reset_at <= previous
            previous = decision.reset_at
            clock.advance(5_000)


class TestWindowExpiry:
    @pytest.mark.asyncio
    async def test_next_call_after_expiry_is_a_fresh_first_call(self, limiter, clock) -> None:
        policy = _policy(max_requests=1, window_ms=10_000)
        assert (await limiter.check("abc", policy)).allowed is True
        assert (await limiter.check("abc", policy)).allowed is False

        clock.advance(10_000)
        decision = await limiter.check("abc", policy)

        assert decision.allowed is True
        assert decision.remaining == 0
        assert decision.reset_at == clock.now_ms + 10_000


class TestIsolation:
    @pytest.mark.asyncio
    async def test_identities_have_independent_counters(self, limiter) -> None:
        policy = _policy(max_requests=1)
        await limiter.check("k1", policy)

        assert (await limiter.check("k1", policy)).allowed is False
        assert (await limiter.check("k2", policy)).allowed is True

    @pytest.mark.asyncio
    async def test_namespaces_have_independent_counters(self, limiter) -> None:
        mood = _policy(max_requests=1, namespace="ratelimit:mood")
        playlists = _policy(max_requests=1, namespace="ratelimit:playlists")
        await limiter.check("abc", mood)

        assert (await limiter.check("abc", mood)).allowed is False
        assert (await limiter.check("abc", playlists)).allowed is True


class TestFailOpen:
    @pytest.mark.asyncio
    async def test_every_call_is_allowed_when_store_fails(self, failing_store, clock) -> None:
        limiter = FixedWindowRateLimiter(failing_store, clock=clock)
        policy = _policy(max_requests=2, window_ms=60_000)

        decisions = [await limiter.check("abc", policy) for _ in range(5)]

        assert all(d.allowed for d in decisions)
        assert all(d.remaining == 2 for d in decisions)
        assert all(d.reset_at == clock.now_ms + 60_000 for d in decisions)
        assert failing_store.calls == 5

    @pytest.mark.asyncio
    async def test_evaluate_propagates_store_error(self, failing_store) -> None:
        limiter = FixedWindowRateLimiter(failing_store)

        with pytest.raises(StoreError):
            await limiter.evaluate("abc", _policy())

    @pytest.mark.asyncio
    async def test_failure_after_increment_fails_open(self, clock) -> None:
        class ExpireFails(InMemoryCounterStore):
            async def expire(self, key: str, ttl_ms: int) -> None:
                raise StoreError("timeout")

        store = ExpireFails(clock=clock)
        limiter = FixedWindowRateLimiter(store, clock=clock)

        decision = await limiter.check("abc", _policy(max_requests=3))

        assert decision.allowed is True
        assert decision.remaining == 3
        # The increment itself went through
        assert await store.ttl("ratelimit:test:abc") == TTL_NO_EXPIRY


class _ScriptedTTLStore(CounterStore):
    def __init__(self, count: int, ttl: int) -> None:
        self.count = count
        self._ttl = ttl
        self.expire_calls: list[tuple[str, int]] = []

    async def increment(self, key: str) -> int:
        return self.count

    async def expire(self, key: str, ttl_ms: int) -> None:
        self.expire_calls.append((key, ttl_ms))

    async def ttl(self, key: str) -> int:
        return self._ttl


class TestMissingTTL:
    @pytest.mark.asyncio
    async def test_key_without_expiry_is_rearmed(self, clock) -> None:
        store = _ScriptedTTLStore(count=3, ttl=TTL_NO_EXPIRY)
        limiter = FixedWindowRateLimiter(store, clock=clock)

        decision = await limiter.check("abc", _policy(max_requests=4, window_ms=60_000))

        assert store.expire_calls == [("ratelimit:test:abc", 60_000)]
        assert decision.reset_at == clock.now_ms + 60_000
        assert decision.remaining == 1

    @pytest.mark.asyncio
    async def test_key_missing_on_ttl_read_uses_full_window(self, clock) -> None:
        store = _ScriptedTTLStore(count=2, ttl=TTL_KEY_MISSING)
        limiter = FixedWindowRateLimiter(store, clock=clock)

        decision = await limiter.check("abc", _policy(window_ms=60_000))

        assert store.expire_calls == []
        assert decision.reset_at == clock.now_ms + 60_000


class TestRetryAfter:
    @pytest.mark.parametrize(
        ("ms_until_reset", "expected_seconds"),
        [(1001, 2), (1000, 1), (1, 1), (0, 0), (-5_000, 0)],
    )
    def test_rounds_up_to_whole_seconds(self, ms_until_reset: int, expected_seconds: int) -> None:
        now_ms = 1_700_000_000_000
        decision = RateLimitDecision(
            allowed=False, limit=4, remaining=0, reset_at=now_ms + ms_until_reset
        )

        assert decision.retry_after_seconds(now_ms) == expected_seconds


class TestScenario:
    @pytest.mark.asyncio
    async def test_four_per_hour_for_one_client(self, limiter, clock) -> None:
        policy = _policy(max_requests=4, window_ms=HOUR_MS)

        allowed = [await limiter.check("abc", policy) for _ in range(4)]
        clock.advance(1_500)
        denied = await limiter.check("abc", policy)

        assert [d.remaining for d in allowed] == [3, 2, 1, 0]
        assert all(d.allowed for d in allowed)
        assert denied.allowed is False
        assert denied.remaining == 0
        assert denied.retry_after_seconds(clock.now_ms) == 3599
