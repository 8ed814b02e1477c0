from __future__ import annotations

"""
Read-Through TTL Cache Helpers.

Stateless helpers that decide whether a previously computed CacheEntry can
be reused or must be regenerated. Errors raised by the generator are
captured into the entry (negative caching) instead of propagating; an entry
holding an error is always regenerated on the next call.
"""

import inspect
import math
import time
from typing import Awaitable, Callable, Optional, TypeVar

from cachedfs.domain.errors import TTLContractError
from cachedfs.domain.models import CacheEntry

T = TypeVar("T")

Clock = Callable[[], float]


def is_reusable(previous: Optional[CacheEntry], max_age: float, now: float) -> bool:
    """
    Decide whether a previous entry can be returned as is.

    An entry is reusable only if it exists, holds a value rather than an
    error, the age limit is a usable number and the entry is still fresh.
    """
    if previous is None or previous.failed:
        return False
    if not isinstance(max_age, (int, float)) or isinstance(max_age, bool):
        return False
    if math.isnan(max_age) or max_age < 0:
        return False
    return previous.is_fresh(now, max_age)


def cache_or_generate(
        previous: Optional[CacheEntry[T]],
        generate: Callable[[], T],
        max_age: float,
        clock: Clock = time.monotonic,
) -> CacheEntry[T]:
    """
    Return a fresh entry, computing it synchronously when needed.

    Args:
        previous: The entry produced by an earlier call, if any.
        generate: Zero-argument computation producing the value.
        max_age: Freshness window in seconds.
        clock: Monotonic time source.

    Returns:
        CacheEntry[T]: ``previous`` when reusable, otherwise a new entry with
        the generated value or the captured exception.

    Raises:
        TTLContractError: If ``generate`` returns an awaitable.
    """
    now = clock()
    if is_reusable(previous, max_age, now):
        return previous

    try:
        value = generate()
    except Exception as e:
        return CacheEntry(value=None, error=e, created_at=now)

    if inspect.isawaitable(value):
        close = getattr(value, "close", None)
        if callable(close):
            close()
        raise TTLContractError(
            "Synchronous cache generator returned an awaitable",
            details={"generator": getattr(generate, "__qualname__", repr(generate))},
        )

    return CacheEntry(value=value, error=None, created_at=now)


async def cache_or_generate_async(
        previous: Optional[CacheEntry[T]],
        generate: Callable[[], Awaitable[T]],
        max_age: float,
        clock: Clock = time.monotonic,
) -> CacheEntry[T]:
    """
    Suspending twin of cache_or_generate for coroutine generators.
    """
    now = clock()
    if is_reusable(previous, max_age, now):
        return previous

    try:
        value = await generate()
    except Exception as e:
        return CacheEntry(value=None, error=e, created_at=now)

    return CacheEntry(value=value, error=None, created_at=now)
