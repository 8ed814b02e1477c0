from __future__ import annotations

from .config import LoggingConfig
from .core import (
    configure_logging,
    get_logger,
    shutdown_logging,
)
from .handlers import SourcePathFilter, relative_source

__all__ = [
    "LoggingConfig",
    "SourcePathFilter",
    "configure_logging",
    "get_logger",
    "relative_source",
    "shutdown_logging",
]
