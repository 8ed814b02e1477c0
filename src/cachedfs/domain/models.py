from __future__ import annotations

"""
Domain Data Models.

Value objects exchanged between the resolver, the caches, the retry policy
and the nodes. All of them are immutable.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Generic, Optional, Tuple, TypeVar

T = TypeVar("T")


# -----------------------------------------------------------------------------
# ENTRY KINDS
# -----------------------------------------------------------------------------

class Kind(str, Enum):
    """Shape of a filesystem entry as last observed."""

    FILE = "file"
    FOLDER = "folder"
    ABSENT = "absent"


class ErrorCategory(str, Enum):
    """Retry classification of an I/O failure."""

    NOT_FOUND = "not-found"
    RESOURCE_BUSY = "resource-busy"
    OTHER = "other"

    @property
    def transient(self) -> bool:
        return self is not ErrorCategory.OTHER


# -----------------------------------------------------------------------------
# RESOLUTION MODELS
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class PathProblem:
    """
    An argument the resolver could not interpret.

    Attributes:
        index: Position of the caller argument; nested items share their list's position.
        value: The offending value.
    """
    index: int
    value: Any

    def describe(self) -> str:
        return f"#{self.index}: {self.value!r} ({type(self.value).__name__})"


@dataclass(frozen=True)
class ResolvedPath:
    """
    Outcome of a resolution.

    Attributes:
        path: The canonical path string.
        parts: Raw segments that contributed to the path.
        problems: Arguments that were left out.
    """
    path: str
    parts: Tuple[str, ...] = ()
    problems: Tuple[PathProblem, ...] = ()


# -----------------------------------------------------------------------------
# CACHE & RETRY MODELS
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class CacheEntry(Generic[T]):
    """
    A computed value (or the error raised computing it) and its birth time.

    Attributes:
        value: Result of the generator, None when it raised.
        error: Exception captured from the generator, if any.
        created_at: Clock reading at creation, in seconds.
    """
    value: Optional[T]
    error: Optional[BaseException]
    created_at: float

    @property
    def failed(self) -> bool:
        return self.error is not None

    def is_fresh(self, now: float, max_age: float) -> bool:
        """Return True while the entry is younger than max_age."""
        return now - self.created_at < max_age


@dataclass(frozen=True)
class ErrorInfo:
    """
    Classified description of a failed I/O action.

    Attributes:
        code: errno symbol (e.g. 'ENOENT') or the exception class name.
        category: Retry classification derived from the code.
        message: Text of the exception.
        exception: The original exception object.
    """
    code: str
    category: ErrorCategory
    message: str
    exception: BaseException = field(repr=False, compare=False)

    @property
    def transient(self) -> bool:
        return self.category.transient


@dataclass(frozen=True)
class AttemptResult(Generic[T]):
    """
    Value-or-error pair returned by the retry policy.

    Attributes:
        data: The action result, or the fallback on failure.
        error: Description of the last failure, None on success.
        attempts: Number of times the action was invoked.
    """
    data: Optional[T]
    error: Optional[ErrorInfo] = None
    attempts: int = 1

    @property
    def ok(self) -> bool:
        return self.error is None
