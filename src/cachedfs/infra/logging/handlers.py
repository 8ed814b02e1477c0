from __future__ import annotations

"""
Logging Handlers and Low-Level Utilities.

Provides handler factories, the source-path filter used by the default
formats, and the tagging mechanism that lets configure_logging tell its own
handlers apart from those installed by the host application.
"""

import logging
import os
import sys
from logging.handlers import RotatingFileHandler
from typing import Callable, Optional

# Internal attribute used to tag and identify our own handlers
_HANDLER_TAG_ATTR: str = "_cachedfs_handler"


# ==============================================================================
# RECORD DECORATION
# ==============================================================================

class SourcePathFilter(logging.Filter):
    """
    Stamp each record with ``source``: its emitting file relative to the cwd.

    Files under the working directory are shown as ``./pkg/module.py``;
    anything else keeps its absolute path. Always lets the record through.
    """

    def __init__(self, cwd_provider: Callable[[], str] = os.getcwd) -> None:
        super().__init__()
        self._cwd_provider = cwd_provider

    def filter(self, record: logging.LogRecord) -> bool:
        record.source = relative_source(record.pathname, self._cwd_provider())
        return True


def relative_source(pathname: str, cwd: str) -> str:
    """Express a source file path relative to cwd, with forward slashes."""
    src = (pathname or "").replace("\\", "/")
    base = cwd.replace("\\", "/").rstrip("/")
    if base and src.startswith(base + "/"):
        return "." + src[len(base):]
    return src


# ==============================================================================
# INTERNAL LOGGING UTILITIES
# ==============================================================================

def _tag_handler(handler: logging.Handler) -> None:
    """Mark a handler as an internally-managed handler."""
    try:
        setattr(handler, _HANDLER_TAG_ATTR, True)
    except Exception:
        pass


def _is_our_handler(handler: logging.Handler) -> bool:
    """Verify if a handler was initialized by this module."""
    return bool(getattr(handler, _HANDLER_TAG_ATTR, False))


def _create_rotating_file_handler(
        log_file: str,
        level_int: int,
        formatter: logging.Formatter,
        max_bytes: int,
        backup_count: int,
) -> Optional[RotatingFileHandler]:
    """
    Initialize a RotatingFileHandler with robust error handling.

    Args:
        log_file: Target path for the log file.
        level_int: Numeric logging level.
        formatter: Pre-configured logging formatter.
        max_bytes: Rollover threshold in bytes.
        backup_count: Number of archived files to keep.

    Returns:
        Optional[RotatingFileHandler]: Configured handler or None if I/O fails.
    """
    try:
        _ensure_parent_dir(log_file)
        fh = RotatingFileHandler(
            log_file,
            maxBytes=int(max_bytes),
            backupCount=int(backup_count),
            encoding="utf-8",
        )
        fh.setLevel(level_int)
        fh.setFormatter(formatter)
        fh.addFilter(SourcePathFilter())
        _tag_handler(fh)
        return fh
    except OSError as e:
        sys.stderr.write(f"WARNING: Log persistence failure at '{log_file}': {e}\n")
        return None


# ==============================================================================
# PRIVATE HELPERS
# ==============================================================================

def _ensure_parent_dir(path: str) -> None:
    parent = os.path.dirname(os.path.abspath(path))
    if parent and not os.path.exists(parent):
        os.makedirs(parent, exist_ok=True)
