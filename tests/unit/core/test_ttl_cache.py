from __future__ import annotations

"""
Unit tests for the TTL cache helpers.

Verifies:
1. Reuse of fresh entries and regeneration of stale ones.
2. Negative caching: generator errors are captured, never raised.
3. Failed entries are always regenerated.
4. Invalid age limits disable reuse.
5. Synchronous generators returning awaitables are rejected.
"""

import asyncio
import math
from typing import List

import pytest

from cachedfs.core.ttl_cache import cache_or_generate, cache_or_generate_async, is_reusable
from cachedfs.domain.errors import TTLContractError
from cachedfs.domain.models import CacheEntry


class FakeClock:
    def __init__(self, now: float = 100.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now


class CountingGenerator:
    def __init__(self, value: object = "v") -> None:
        self.calls = 0
        self.value = value

    def __call__(self) -> object:
        self.calls += 1
        return self.value


def test_fresh_entry_is_reused_within_window() -> None:
    """Two calls 50 ms apart with a 100 ms window generate once."""
    clock = FakeClock()
    gen = CountingGenerator()

    first = cache_or_generate(None, gen, 0.1, clock)
    clock.now += 0.05
    second = cache_or_generate(first, gen, 0.1, clock)

    assert gen.calls == 1
    assert second is first
    assert second.value == "v"


def test_stale_entry_is_regenerated() -> None:
    """Two calls 150 ms apart with a 100 ms window generate twice."""
    clock = FakeClock()
    gen = CountingGenerator()

    first = cache_or_generate(None, gen, 0.1, clock)
    clock.now += 0.15
    second = cache_or_generate(first, gen, 0.1, clock)

    assert gen.calls == 2
    assert second is not first
    assert second.created_at == clock.now


def test_entry_at_exact_age_limit_is_stale() -> None:
    clock = FakeClock()
    gen = CountingGenerator()
    first = cache_or_generate(None, gen, 1.0, clock)
    clock.now += 1.0
    cache_or_generate(first, gen, 1.0, clock)
    assert gen.calls == 2


def test_generator_error_is_captured() -> None:
    def boom() -> None:
        raise OSError("disk on fire")

    entry = cache_or_generate(None, boom, 0.1, FakeClock())
    assert entry.failed
    assert entry.value is None
    assert isinstance(entry.error, OSError)


def test_failed_entry_is_always_regenerated() -> None:
    clock = FakeClock()
    calls: List[int] = []

    def flaky() -> str:
        calls.append(1)
        if len(calls) == 1:
            raise OSError("first")
        return "ok"

    first = cache_or_generate(None, flaky, 10.0, clock)
    second = cache_or_generate(first, flaky, 10.0, clock)

    assert first.failed
    assert second.value == "ok"
    assert len(calls) == 2


@pytest.mark.parametrize("max_age", [-1, math.nan, "0.1", None, True])
def test_invalid_age_disables_reuse(max_age: object) -> None:
    entry = CacheEntry(value="v", error=None, created_at=100.0)
    assert is_reusable(entry, max_age, 100.0) is False  # type: ignore[arg-type]


def test_zero_age_never_reuses() -> None:
    clock = FakeClock()
    gen = CountingGenerator()
    first = cache_or_generate(None, gen, 0, clock)
    cache_or_generate(first, gen, 0, clock)
    assert gen.calls == 2


def test_sync_generator_returning_awaitable_is_rejected() -> None:
    async def coro() -> str:
        return "never"

    with pytest.raises(TTLContractError) as exc:
        cache_or_generate(None, coro, 0.1, FakeClock())
    assert isinstance(exc.value, TypeError)


@pytest.mark.asyncio
async def test_async_twin_reuses_and_captures() -> None:
    clock = FakeClock()
    calls: List[int] = []

    async def gen() -> int:
        calls.append(1)
        await asyncio.sleep(0)
        return len(calls)

    first = await cache_or_generate_async(None, gen, 0.1, clock)
    second = await cache_or_generate_async(first, gen, 0.1, clock)
    assert second is first
    assert len(calls) == 1

    async def boom() -> None:
        raise OSError("nope")

    failed = await cache_or_generate_async(None, boom, 0.1, clock)
    assert failed.failed
