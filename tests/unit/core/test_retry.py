from __future__ import annotations

"""
Unit tests for the retry policy.

Verifies:
1. Error classification from errno values and string codes.
2. A transient failure is retried exactly once, with a 100-200 ms pause.
3. A permanent failure is not retried.
4. The fallback value is returned when every attempt fails.
5. The suspending variant follows the same rules.
"""

import errno
from typing import Any, List

import pytest

from cachedfs.core.retry import RetryingOperation, classify_error, error_code
from cachedfs.domain.models import ErrorCategory


class FailingAction:
    """Raises the queued exceptions in order, then returns ``result``."""

    def __init__(self, *errors: BaseException, result: Any = "done") -> None:
        self.errors = list(errors)
        self.result = result
        self.calls = 0

    def __call__(self, *args: Any) -> Any:
        self.calls += 1
        if self.errors:
            raise self.errors.pop(0)
        return self.result


def _enoent() -> OSError:
    return FileNotFoundError(errno.ENOENT, "No such file or directory")


# -----------------------------------------------------------------------------
# CLASSIFICATION
# -----------------------------------------------------------------------------

def test_error_code_from_errno() -> None:
    assert error_code(_enoent()) == "ENOENT"
    assert error_code(OSError(errno.EBUSY, "busy")) == "EBUSY"
    assert error_code(PermissionError(errno.EACCES, "denied")) == "EACCES"


def test_error_code_from_code_attribute_and_class() -> None:
    exc = RuntimeError("custom")
    exc.code = "EBUSY"  # type: ignore[attr-defined]
    assert error_code(exc) == "EBUSY"
    assert error_code(ValueError("x")) == "ValueError"


def test_classify_error_categories() -> None:
    assert classify_error(_enoent()).category is ErrorCategory.NOT_FOUND
    assert classify_error(OSError(errno.EBUSY, "busy")).category is ErrorCategory.RESOURCE_BUSY
    info = classify_error(PermissionError(errno.EACCES, "denied"))
    assert info.category is ErrorCategory.OTHER
    assert info.transient is False


# -----------------------------------------------------------------------------
# BLOCKING ATTEMPTS
# -----------------------------------------------------------------------------

def test_success_on_first_attempt(fast_retry: RetryingOperation, sleeper: Any) -> None:
    action = FailingAction()
    result = fast_retry.attempt(None, action, "p")
    assert result.ok
    assert result.data == "done"
    assert action.calls == 1
    assert sleeper.delays == []


def test_transient_error_is_retried_once(fast_retry: RetryingOperation, sleeper: Any) -> None:
    action = FailingAction(_enoent())
    result = fast_retry.attempt(None, action)
    assert result.ok
    assert result.data == "done"
    assert result.attempts == 2
    assert action.calls == 2
    assert len(sleeper.delays) == 1
    assert 0.1 <= sleeper.delays[0] <= 0.2


def test_persistent_transient_error_stops_after_two_attempts(fast_retry: RetryingOperation) -> None:
    action = FailingAction(_enoent(), _enoent(), _enoent())
    result = fast_retry.attempt("fallback", action)
    assert action.calls == 2
    assert result.data == "fallback"
    assert result.error is not None
    assert result.error.code == "ENOENT"


def test_permanent_error_is_not_retried(fast_retry: RetryingOperation, sleeper: Any) -> None:
    action = FailingAction(PermissionError(errno.EACCES, "denied"))
    result = fast_retry.attempt([], action)
    assert action.calls == 1
    assert result.data == []
    assert result.error is not None
    assert result.error.code == "EACCES"
    assert sleeper.delays == []


def test_backoff_bounds() -> None:
    assert RetryingOperation(rng=lambda: 0.0).backoff_delay() == pytest.approx(0.1)
    assert RetryingOperation(rng=lambda: 1.0).backoff_delay() == pytest.approx(0.2)


def test_arguments_are_forwarded(fast_retry: RetryingOperation) -> None:
    seen: List[Any] = []
    fast_retry.attempt(None, lambda *a: seen.extend(a), "x", 1)
    assert seen == ["x", 1]


# -----------------------------------------------------------------------------
# SUSPENDING ATTEMPTS
# -----------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_async_transient_error_is_retried_once(fast_retry: RetryingOperation, sleeper: Any) -> None:
    calls: List[int] = []

    async def action() -> str:
        calls.append(1)
        if len(calls) == 1:
            raise OSError(errno.EBUSY, "busy")
        return "ok"

    result = await fast_retry.attempt_async(None, action)
    assert result.data == "ok"
    assert len(calls) == 2
    assert len(sleeper.delays) == 1


@pytest.mark.asyncio
async def test_async_permanent_error_is_not_retried(fast_retry: RetryingOperation) -> None:
    calls: List[int] = []

    async def action() -> str:
        calls.append(1)
        raise IsADirectoryError(errno.EISDIR, "is a directory")

    result = await fast_retry.attempt_async("fb", action)
    assert len(calls) == 1
    assert result.data == "fb"
    assert result.error is not None
    assert result.error.code == "EISDIR"
