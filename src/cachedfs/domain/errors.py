from __future__ import annotations

"""
Exception Hierarchy.

Every error raised on purpose by the library derives from CachedFsError,
which carries a human-readable message and an optional details mapping for
diagnostics. Low-level I/O failures are never raised from here directly:
they travel as ErrorInfo values until a node decides to escalate them.
"""

from typing import Any, Dict, Optional


class CachedFsError(Exception):
    """Base exception for all cachedfs errors."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        """
        Initialize exception with message and optional details.

        Args:
            message: Human-readable error message.
            details: Optional dictionary with additional error context.
        """
        super().__init__(message)
        self.message = message
        self.details = details


class ConfigurationError(CachedFsError):
    """Raised when a configuration value or file cannot be interpreted."""

    pass


class InvalidArgumentError(CachedFsError):
    """Raised when call arguments cannot be turned into a usable path or payload."""

    pass


class StructuralConflictError(CachedFsError):
    """
    Raised when an operation contradicts the shape of the filesystem.

    Examples: writing over an existing file with overwrite disabled,
    creating a folder where a file lives, or appending to a missing file
    that was required to exist.
    """

    pass


class MissingTargetError(StructuralConflictError):
    """Raised when an operation requires an existing file that is not there."""

    pass


class UnsupportedParentError(ConfigurationError):
    """Raised when asking for the parent of a root (``/``, ``C:/``)."""

    pass


class InvariantViolationError(CachedFsError):
    """Raised when node identity is found to be inconsistent."""

    pass


class TTLContractError(CachedFsError, TypeError):
    """Raised when a synchronous cache generator hands back an awaitable."""

    pass
