import asyncio
import threading
from concurrent.futures import ThreadPoolExecutor

import pytest

from auth_api.services.rate_limit import (
    InMemoryRateLimitStore,
    KeyScope,
    RateLimiter,
    RateLimitPolicy,
    RateLimitSettings,
    build_policies,
)


class FakeClock:
    def __init__(self, now: float = 1_000_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def make_limiter(max_requests=3, window_seconds=60, clock=None, enabled=True):
    policy = RateLimitPolicy(
        name="test",
        window_seconds=window_seconds,
        max_requests=max_requests,
        key_scope=KeyScope.IP,
        message="Slow down",
    )
    other = RateLimitPolicy(
        name="other",
        window_seconds=window_seconds,
        max_requests=max_requests,
        key_scope=KeyScope.IP,
    )
    return RateLimiter([policy, other], clock=clock or FakeClock(), enabled=enabled)


@pytest.mark.asyncio
async def test_allows_up_to_max_then_denies():
    clock = FakeClock()
    limiter = make_limiter(max_requests=3, window_seconds=60, clock=clock)

    decisions = [await limiter.hit("test", "1.2.3.4") for _ in range(4)]

    assert [d.allowed for d in decisions] == [True, True, True, False]
    assert [d.remaining for d in decisions] == [2, 1, 0, 0]
    denied = decisions[-1]
    assert denied.retry_after == 60
    assert denied.message == "Slow down"
    assert denied.reset_at == clock.now + 60


@pytest.mark.asyncio
async def test_retry_after_rounds_up_remaining_window():
    clock = FakeClock()
    limiter = make_limiter(max_requests=1, window_seconds=60, clock=clock)

    await limiter.hit("test", "k")
    clock.advance(20.5)
    decision = await limiter.hit("test", "k")

    assert not decision.allowed
    assert decision.retry_after == 40


@pytest.mark.asyncio
async def test_window_rolls_over_after_reset():
    clock = FakeClock()
    limiter = make_limiter(max_requests=2, window_seconds=60, clock=clock)

    for _ in range(3):
        await limiter.hit("test", "k")
    assert await limiter.is_limited("test", "k")

    # Still inside the window at exactly reset_at
    clock.advance(60)
    assert not (await limiter.hit("test", "k")).allowed

    clock.advance(0.001)
    decision = await limiter.hit("test", "k")
    assert decision.allowed
    assert decision.remaining == 1
    assert decision.reset_at == clock.now + 60


@pytest.mark.asyncio
async def test_keys_and_policies_are_independent():
    limiter = make_limiter(max_requests=1)

    assert (await limiter.hit("test", "a")).allowed
    assert not (await limiter.hit("test", "a")).allowed
    assert (await limiter.hit("test", "b")).allowed
    assert (await limiter.hit("other", "a")).allowed


@pytest.mark.asyncio
async def test_remaining_and_reset():
    limiter = make_limiter(max_requests=3)

    assert await limiter.remaining("test", "k") == 3
    await limiter.hit("test", "k")
    assert await limiter.remaining("test", "k") == 2

    await limiter.reset("test", "k")
    assert await limiter.remaining("test", "k") == 3
    assert not await limiter.is_limited("test", "k")


@pytest.mark.asyncio
async def test_unknown_policy_is_rejected():
    limiter = make_limiter()
    with pytest.raises(ValueError):
        await limiter.hit("missing", "k")


@pytest.mark.asyncio
async def test_disabled_limiter_never_denies():
    limiter = make_limiter(max_requests=1, enabled=False)
    decisions = [await limiter.hit("test", "k") for _ in range(5)]
    assert all(d.allowed for d in decisions)
    assert len(limiter.store) == 0


@pytest.mark.asyncio
async def test_sweep_drops_only_expired_records():
    clock = FakeClock()
    limiter = make_limiter(window_seconds=60, clock=clock)

    await limiter.hit("test", "old")
    clock.advance(30)
    await limiter.hit("test", "new")
    clock.advance(31)

    assert await limiter.sweep() == 1
    assert len(limiter.store) == 1
    assert await limiter.remaining("test", "new") == 2


@pytest.mark.asyncio
async def test_concurrent_tasks_admit_at_most_max():
    limiter = make_limiter(max_requests=10)

    decisions = await asyncio.gather(*(limiter.hit("test", "k") for _ in range(50)))

    assert sum(d.allowed for d in decisions) == 10


def test_concurrent_threads_admit_at_most_max():
    limiter = make_limiter(max_requests=25)
    barrier = threading.Barrier(8)

    def worker() -> int:
        barrier.wait()
        allowed = 0
        for _ in range(20):
            if asyncio.run(limiter.hit("test", "shared")).allowed:
                allowed += 1
        return allowed

    with ThreadPoolExecutor(max_workers=8) as pool:
        results = list(pool.map(lambda _: worker(), range(8)))

    assert sum(results) == 25


@pytest.mark.asyncio
async def test_store_increment_returns_snapshot():
    store = InMemoryRateLimitStore()
    first = await store.increment("k", 10, now=100.0)
    second = await store.increment("k", 10, now=101.0)

    assert (first.count, first.reset_at) == (1, 110.0)
    assert (second.count, second.reset_at) == (2, 110.0)


def test_default_policies():
    policies = {p.name: p for p in build_policies(RateLimitSettings())}

    assert (policies["general"].window_seconds, policies["general"].max_requests) == (900, 100)
    assert (policies["strict"].window_seconds, policies["strict"].max_requests) == (900, 5)
    assert (policies["auth"].max_requests, policies["auth"].key_scope) == (10, KeyScope.IP_USER_AGENT)
    assert (policies["password_reset"].max_requests, policies["password_reset"].key_scope) == (3, KeyScope.EMAIL)
    assert (policies["email_verification"].window_seconds, policies["email_verification"].max_requests) == (3600, 5)
