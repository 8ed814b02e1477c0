from __future__ import annotations

"""
Transient Fault Masking.

Runs a filesystem action at most twice. A failure classified as not-found
or resource-busy is retried once after a jittered 100-200 ms pause, which
absorbs entries that flicker during concurrent writes and locks held for an
instant. Any other failure is returned immediately. Nothing here raises:
the caller receives an AttemptResult and decides what to escalate.
"""

import asyncio
import errno
import logging
import random
import time
from typing import Any, Awaitable, Callable, Optional, TypeVar

from cachedfs.domain.constants import (
    BACKOFF_MIN_SECONDS,
    BACKOFF_SPREAD_SECONDS,
    MAX_ATTEMPTS,
    TRANSIENT_BUSY,
    TRANSIENT_NOT_FOUND,
)
from cachedfs.domain.models import AttemptResult, ErrorCategory, ErrorInfo

logger = logging.getLogger(__name__)

T = TypeVar("T")


# -----------------------------------------------------------------------------
# ERROR CLASSIFICATION
# -----------------------------------------------------------------------------

def error_code(exc: BaseException) -> str:
    """
    Return the symbolic code of an exception.

    Uses the errno symbol when available (``ENOENT``), then a string
    ``code`` attribute, then the exception class name.
    """
    num = getattr(exc, "errno", None)
    if isinstance(num, int) and num in errno.errorcode:
        return errno.errorcode[num]
    code = getattr(exc, "code", None)
    if isinstance(code, str) and code:
        return code
    return type(exc).__name__


def classify_error(exc: BaseException) -> ErrorInfo:
    """Build the ErrorInfo describing a failed action."""
    code = error_code(exc)
    if code == TRANSIENT_NOT_FOUND:
        category = ErrorCategory.NOT_FOUND
    elif code == TRANSIENT_BUSY:
        category = ErrorCategory.RESOURCE_BUSY
    else:
        category = ErrorCategory.OTHER
    return ErrorInfo(code=code, category=category, message=str(exc), exception=exc)


# -----------------------------------------------------------------------------
# RETRY POLICY
# -----------------------------------------------------------------------------

class RetryingOperation:
    """
    Fixed two-attempt retry policy.

    The sleep functions and random source are injectable so tests can skip
    the backoff; the attempt count and backoff window are not.
    """

    def __init__(
            self,
            sleep: Callable[[float], Any] = time.sleep,
            async_sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
            rng: Callable[[], float] = random.random,
    ) -> None:
        self._sleep = sleep
        self._async_sleep = async_sleep
        self._rng = rng

    def backoff_delay(self) -> float:
        """Uniform delay between 100 and 200 ms."""
        return BACKOFF_MIN_SECONDS + BACKOFF_SPREAD_SECONDS * self._rng()

    def attempt(
            self,
            fallback: Optional[T],
            action: Callable[..., T],
            *args: Any,
    ) -> AttemptResult[T]:
        """
        Execute a blocking action with transient-fault masking.

        Args:
            fallback: Value reported as data when every attempt fails.
            action: The callable to run.
            *args: Positional arguments for the action.

        Returns:
            AttemptResult[T]: The result and, on failure, the last error.
        """
        error: Optional[ErrorInfo] = None
        attempts = 0

        for attempts in range(1, MAX_ATTEMPTS + 1):
            try:
                return AttemptResult(data=action(*args), error=None, attempts=attempts)
            except Exception as e:
                error = classify_error(e)

            if not error.transient or attempts >= MAX_ATTEMPTS:
                break
            delay = self.backoff_delay()
            logger.debug(f"Retrying after {error.code} in {delay * 1000:.0f} ms")
            self._sleep(delay)

        return AttemptResult(data=fallback, error=error, attempts=attempts)

    async def attempt_async(
            self,
            fallback: Optional[T],
            action: Callable[..., Awaitable[T]],
            *args: Any,
    ) -> AttemptResult[T]:
        """
        Suspending twin of attempt(); the backoff yields to other tasks.
        """
        error: Optional[ErrorInfo] = None
        attempts = 0

        for attempts in range(1, MAX_ATTEMPTS + 1):
            try:
                data = await action(*args)
                return AttemptResult(data=data, error=None, attempts=attempts)
            except Exception as e:
                error = classify_error(e)

            if not error.transient or attempts >= MAX_ATTEMPTS:
                break
            delay = self.backoff_delay()
            logger.debug(f"Retrying after {error.code} in {delay * 1000:.0f} ms")
            await self._async_sleep(delay)

        return AttemptResult(data=fallback, error=error, attempts=attempts)
