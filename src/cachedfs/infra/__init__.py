from __future__ import annotations

from .fs import (
    AsyncFsOperations,
    FsOperations,
    default_async_operations,
    default_operations,
)

__all__ = [
    "AsyncFsOperations",
    "FsOperations",
    "default_async_operations",
    "default_operations",
]
