from __future__ import annotations

"""
Canonical Path Resolution.

Turns the loose argument shapes accepted by the public entry points
(strings, numbers, path-likes, nested lists, objects carrying a path under a
well-known key) into a single canonical path string. The canonical form is
the key of the identity cache, so two spellings of the same location must
always collapse to the same string.
"""

import logging
import math
import os
import re
from collections.abc import Mapping
from typing import Any, Callable, List, Optional, Sequence, Tuple

from cachedfs.domain.config import FsConfig
from cachedfs.domain.constants import FORBIDDEN_PATH_CHARS, PATH_KEYS
from cachedfs.domain.errors import InvalidArgumentError
from cachedfs.domain.models import PathProblem, ResolvedPath

logger = logging.getLogger(__name__)

_MULTI_SLASH_RX = re.compile(r"/{2,}")


class PathResolver:
    """
    Builds canonical paths relative to the current working directory.

    Paths under the working directory are expressed as ``.`` or
    ``./<rest>``; everything else stays absolute. The working directory is
    read from ``cwd_provider`` once per resolution.
    """

    def __init__(
            self,
            config: Optional[FsConfig] = None,
            cwd_provider: Callable[[], str] = os.getcwd,
    ) -> None:
        self.config = config or FsConfig()
        self._cwd_provider = cwd_provider

    # ==========================================================================
    # PUBLIC API
    # ==========================================================================

    def resolve(self, *args: Any) -> ResolvedPath:
        """
        Resolve call arguments into a canonical path.

        Args:
            *args: Path fragments in any supported shape.

        Returns:
            ResolvedPath: The canonical path, contributing parts and the
            arguments that could not be interpreted.
        """
        if self._is_iteration_callback(args):
            logger.debug(f"Resolver: iteration callback at index {args[1]}")
            args = (args[0],)

        # (caller argument position, value); nested items keep their root's position
        work: List[Tuple[int, Any]] = list(enumerate(args))
        parts: List[str] = []
        problems: List[PathProblem] = []

        # The work list grows while flattening, so iterate by index
        i = 0
        while i < len(work):
            position, arg = work[i]
            segment = self._classify(arg, bool(parts))
            if isinstance(segment, list):
                work.extend((position, item) for item in segment)
            elif segment is _SKIP:
                pass
            elif segment is None:
                problems.append(PathProblem(index=position, value=arg))
            else:
                parts.append(segment)
            i += 1

        path = self.canonicalize("/".join(parts))
        return ResolvedPath(path=path, parts=tuple(parts), problems=tuple(problems))

    def canonicalize(self, path: str) -> str:
        """
        Normalize a single path string and re-express it against the cwd.

        Idempotent: canonicalizing a canonical path returns it unchanged.
        """
        absolute = self.absolute(path)
        cwd = _to_slashes(self._cwd_provider())

        if absolute == cwd:
            return "."
        prefix = cwd if cwd.endswith("/") else cwd + "/"
        if absolute.startswith(prefix):
            return "./" + absolute[len(prefix):]
        return absolute

    def absolute(self, path: str) -> str:
        """Return the normalized absolute form of a path, with forward slashes."""
        normalized = normalize(path)
        cwd = self._cwd_provider()
        if not os.path.isabs(normalized):
            normalized = os.path.join(cwd, normalized)
        return normalize(_to_slashes(os.path.normpath(normalized)))

    # ==========================================================================
    # PRIVATE HELPERS
    # ==========================================================================

    @staticmethod
    def _is_iteration_callback(args: Sequence[Any]) -> bool:
        """Detect the (value, index, sequence) shape produced by per-element callbacks."""
        if len(args) != 3:
            return False
        value, index, seq = args
        if not isinstance(index, int) or isinstance(index, bool):
            return False
        if not isinstance(seq, (list, tuple)):
            return False
        if not 0 <= index < len(seq):
            return False
        try:
            return bool(seq[index] is value or seq[index] == value)
        except Exception:
            return False

    @staticmethod
    def _classify(arg: Any, has_parts: bool) -> Any:
        """
        Map one argument to a path segment.

        Returns:
            The segment string, a list of items to flatten for sequences,
            _SKIP for ignorable values, or None for problems.
        """
        if arg is None:
            return _SKIP
        if isinstance(arg, str):
            if arg == "" and not has_parts:
                return "."
            return arg
        if isinstance(arg, bool):
            return None
        if isinstance(arg, int):
            return str(arg)
        if isinstance(arg, float):
            return _float_segment(arg)
        if isinstance(arg, os.PathLike):
            value = os.fspath(arg)
            return value.decode("utf-8", "replace") if isinstance(value, bytes) else value
        if isinstance(arg, (list, tuple)):
            return list(arg)
        return _lookup_path_key(arg)


# -----------------------------------------------------------------------------
# NORMALIZATION HELPERS
# -----------------------------------------------------------------------------

_SKIP = object()


def _to_slashes(path: str) -> str:
    return path.replace("\\", "/")


def normalize(path: str) -> str:
    """
    Apply the textual normalization rules.

    Converts backslashes, collapses repeated slashes, removes query markers
    and trims a trailing slash (the root itself is preserved).
    """
    p = _MULTI_SLASH_RX.sub("/", _to_slashes(path)).replace("?", "")
    if len(p) > 1 and p.endswith("/"):
        p = p[:-1]
    return p


def check_path(path: str) -> str:
    """
    Reject canonical paths that can never name a real entry.

    Raises:
        InvalidArgumentError: If the path is blank or holds a forbidden character.
    """
    if not path or not path.strip() or any(c in path for c in FORBIDDEN_PATH_CHARS):
        raise InvalidArgumentError(f"Invalid path: {path!r}", details={"path": path})
    return path


def _lookup_path_key(arg: Any) -> Optional[str]:
    """Find the first non-empty string stored under a well-known path key."""
    for key in PATH_KEYS:
        if isinstance(arg, Mapping):
            value = arg.get(key)
        else:
            value = getattr(arg, key, None)
        if isinstance(value, str) and value:
            return value
    return None


def _float_segment(value: float) -> Optional[str]:
    """Render a float the way a number reads in a path: 1.0 -> '1', 1.5 -> '1.5'."""
    if not math.isfinite(value):
        return None
    if value.is_integer():
        return str(int(value))
    return repr(value)
