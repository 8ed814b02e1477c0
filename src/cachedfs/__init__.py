from __future__ import annotations

"""
cachedfs: memoized filesystem nodes with short-lived attribute caching.

Every distinct path maps to exactly one node object; stat results, folder
listings and file contents are cached for a short window and transient I/O
faults are retried once.
"""

from cachedfs.core.nodes import AsyncNode, Node
from cachedfs.domain.config import FsConfig, Mode, load_config
from cachedfs.domain.errors import (
    CachedFsError,
    ConfigurationError,
    InvalidArgumentError,
    InvariantViolationError,
    MissingTargetError,
    StructuralConflictError,
    TTLContractError,
    UnsupportedParentError,
)
from cachedfs.domain.models import Kind
from cachedfs.filesystem import (
    FileSystem,
    async_fs,
    get_default_filesystem,
    reset_cache,
    set_default_filesystem,
    sync_fs,
)

__version__ = "0.1.0"

__all__ = [
    "AsyncNode",
    "CachedFsError",
    "ConfigurationError",
    "FileSystem",
    "FsConfig",
    "InvalidArgumentError",
    "InvariantViolationError",
    "Kind",
    "MissingTargetError",
    "Mode",
    "Node",
    "StructuralConflictError",
    "TTLContractError",
    "UnsupportedParentError",
    "async_fs",
    "get_default_filesystem",
    "load_config",
    "reset_cache",
    "set_default_filesystem",
    "sync_fs",
]
