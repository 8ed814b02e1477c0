from __future__ import annotations

"""
Domain Constants.

Centralizes the fixed policy values of the library: resolver key lookup
order, transient error codes, retry policy and default cache ages.
"""

import re
from typing import Tuple

# -----------------------------------------------------------------------------
# PATH RESOLUTION
# -----------------------------------------------------------------------------

# Lookup order for objects that carry a path under a well-known key
PATH_KEYS: Tuple[str, ...] = (
    "name",
    "path",
    "filePath",
    "filepath",
    "file_path",
    "fullPath",
    "fullpath",
    "full_path",
)

# Characters that are never accepted inside a canonical path
FORBIDDEN_PATH_CHARS: Tuple[str, ...] = ('"', "<", ">", "*")

CHILD_NAME_SEPARATORS: Tuple[str, ...] = ("/", "\\")

# Segments that point at the node itself or above it, never at a child
RELATIVE_SEGMENTS: Tuple[str, ...] = (".", "..")

DRIVE_ROOT_RX = re.compile(r"^[A-Za-z]:/?$")

# -----------------------------------------------------------------------------
# RETRY POLICY
# -----------------------------------------------------------------------------

TRANSIENT_NOT_FOUND = "ENOENT"
TRANSIENT_BUSY = "EBUSY"

MAX_ATTEMPTS = 2
BACKOFF_MIN_SECONDS = 0.1
BACKOFF_SPREAD_SECONDS = 0.1

# -----------------------------------------------------------------------------
# CACHE AGES (seconds)
# -----------------------------------------------------------------------------

DEFAULT_STAT_MAX_AGE = 0.1
DEFAULT_CHILDREN_MAX_AGE = 0.1
DEFAULT_DATA_MAX_AGE = 0.1
