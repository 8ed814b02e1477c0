from __future__ import annotations

from .config import FsConfig, Mode, load_config, parse_mode
from .models import (
    AttemptResult,
    CacheEntry,
    ErrorCategory,
    ErrorInfo,
    Kind,
    PathProblem,
    ResolvedPath,
)

__all__ = [
    "FsConfig",
    "Mode",
    "load_config",
    "parse_mode",
    "AttemptResult",
    "CacheEntry",
    "ErrorCategory",
    "ErrorInfo",
    "Kind",
    "PathProblem",
    "ResolvedPath",
]
