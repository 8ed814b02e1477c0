from __future__ import annotations

from .object_cache import ObjectCache
from .resolver import PathResolver
from .retry import RetryingOperation, classify_error
from .ttl_cache import cache_or_generate, cache_or_generate_async

__all__ = [
    "ObjectCache",
    "PathResolver",
    "RetryingOperation",
    "classify_error",
    "cache_or_generate",
    "cache_or_generate_async",
]
