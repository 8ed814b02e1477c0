from __future__ import annotations

"""
Shared Node Machinery.

Everything a filesystem node does without touching the disk: path
arithmetic, the parent lookup, the cached attribute slots, invalidation and
the mode-dependent escalation policy. The blocking and suspending node
classes only add the I/O-bound operations on top.
"""

import inspect
import logging
import posixpath
import stat as stat_module
from typing import TYPE_CHECKING, Any, Callable, List, Optional

from cachedfs.core.object_cache import ObjectCache
from cachedfs.core.resolver import check_path
from cachedfs.domain.constants import (
    CHILD_NAME_SEPARATORS,
    DRIVE_ROOT_RX,
    RELATIVE_SEGMENTS,
)
from cachedfs.domain.errors import (
    CachedFsError,
    InvalidArgumentError,
    UnsupportedParentError,
)
from cachedfs.domain.models import CacheEntry, ErrorInfo, Kind

if TYPE_CHECKING:
    from cachedfs.filesystem import FileSystem

logger = logging.getLogger(__name__)


class BaseNode:
    """
    A memoized reference to one canonical path.

    Cached slots are tri-state: None (never computed), an entry holding an
    error (absent or unreadable) or an entry holding a value.
    """

    # Attribute of the owning FileSystem holding this variant's ObjectCache
    _registry_attr = "nodes"

    def __init__(self, path: str, owner: FileSystem) -> None:
        self._path = path
        self._owner = owner
        self.config = owner.config
        self._absolute = owner.resolver.absolute(path)
        self._parent: Optional[BaseNode] = None

        self.cached_stat: Any = None
        self._stat_entry: Optional[CacheEntry] = None
        self._children_entry: Optional[CacheEntry] = None
        self._data_entry: Optional[CacheEntry] = None

    # ==========================================================================
    # PATH ACCESSORS
    # ==========================================================================

    @property
    def path(self) -> str:
        """Canonical path, the identity key of this node."""
        return self._path

    @property
    def absolute_path(self) -> str:
        """Absolute location the canonical path was resolved against."""
        return self._absolute

    @property
    def parts(self) -> List[str]:
        return self._path.split("/")

    @property
    def name(self) -> str:
        return self._path.split("/")[-1]

    @property
    def extension(self) -> str:
        """Text after the last dot of the name, without the dot."""
        name = self.name
        i = name.rfind(".")
        return "" if i <= 0 else name[i + 1:]

    def __str__(self) -> str:
        return self._path

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._path!r})"

    def __fspath__(self) -> str:
        return self._path

    # ==========================================================================
    # NAVIGATION (no I/O)
    # ==========================================================================

    def parent(self) -> Any:
        """
        Return the node of the containing folder.

        Paths of two segments or fewer ('.', './a', '/a') go through the
        absolute path so that the working directory and root-level entries
        get a real parent. The result is memoized.

        Raises:
            UnsupportedParentError: For '/' and bare drive roots.
        """
        if self._parent is None:
            self._parent = self._registry.get_or_create(self._parent_path(self._path))
        return self._parent

    def nested(self, suffix: str) -> Any:
        """Return the node at ``<path>/<suffix>`` without checking existence."""
        return self._lookup(f"{self._path}/{suffix}")

    # ==========================================================================
    # CACHE CONTROL
    # ==========================================================================

    def invalidate(self) -> None:
        """Drop every cached attribute of this node."""
        self.cached_stat = None
        self._stat_entry = None
        self._children_entry = None
        self._data_entry = None

    def _invalidate_lineage(self) -> None:
        """
        Invalidate this node and the listing of every instantiated ancestor.

        Only ancestors already present in the registry are touched; the walk
        never creates nodes.
        """
        self.invalidate()
        path = self._path
        while True:
            try:
                parent_path = self._parent_path(path)
            except UnsupportedParentError:
                break
            if parent_path == path:
                break
            node = self._registry.peek(parent_path)
            if node is not None:
                node.cached_stat = None
                node._stat_entry = None
                node._children_entry = None
            path = parent_path

    # ==========================================================================
    # INTERNAL HELPERS
    # ==========================================================================

    @property
    def _registry(self) -> ObjectCache:
        return getattr(self._owner, self._registry_attr)

    def _lookup(self, raw_path: str, check: bool = True) -> Any:
        path = self._owner.resolver.canonicalize(raw_path)
        if check:
            check_path(path)
        return self._registry.get_or_create(path)

    def _parent_path(self, path: str) -> str:
        resolver = self._owner.resolver
        absolute = resolver.absolute(path)
        if absolute == "/" or DRIVE_ROOT_RX.match(absolute):
            raise UnsupportedParentError(
                f"Unsupported parent of root path {path}", details={"path": path}
            )
        parts = path.split("/")
        if len(parts) <= 2:
            target = posixpath.dirname(absolute)
        else:
            target = "/".join(parts[:-1])
        return resolver.canonicalize(target)

    def _child_path(self, name: str) -> str:
        return f"{self._path}/{name}"

    @staticmethod
    def _validate_child_name(name: Any) -> str:
        """Accept a single segment naming a direct child."""
        if (
                not isinstance(name, str)
                or not name
                or name in RELATIVE_SEGMENTS
                or any(s in name for s in CHILD_NAME_SEPARATORS)
        ):
            raise InvalidArgumentError(
                f"Cannot create child folder with name {name!r}", details={"name": name}
            )
        return name

    @staticmethod
    def _validate_descendant_name(name: Any) -> str:
        """Accept a relative suffix that stays below the node ('a', 'a/b')."""
        if not isinstance(name, str) or not name:
            raise InvalidArgumentError(f"Invalid child name {name!r}", details={"name": name})
        segments = name.replace("\\", "/").split("/")
        if name.startswith(CHILD_NAME_SEPARATORS) or any(s in RELATIVE_SEGMENTS for s in segments):
            raise InvalidArgumentError(
                f"Child name {name!r} escapes its parent", details={"name": name}
            )
        return name

    @staticmethod
    def _as_filter(predicate: Callable[..., Any]) -> Callable[[Any, int, List[Any]], Any]:
        """
        Adapt a listing predicate to the (child, index, children) call shape.

        Predicates taking three positional parameters (or ``*args``) receive
        all three; any other predicate receives only the child.
        """
        try:
            params = list(inspect.signature(predicate).parameters.values())
        except (TypeError, ValueError):
            return lambda child, index, children: predicate(child)

        positional = [
            p for p in params
            if p.kind in (inspect.Parameter.POSITIONAL_ONLY, inspect.Parameter.POSITIONAL_OR_KEYWORD)
        ]
        if len(positional) >= 3 or any(p.kind is inspect.Parameter.VAR_POSITIONAL for p in params):
            return lambda child, index, children: predicate(child, index, children)
        return lambda child, index, children: predicate(child)

    @staticmethod
    def _kind_of(st: Any) -> Kind:
        if st is None:
            return Kind.ABSENT
        if stat_module.S_ISREG(st.st_mode):
            return Kind.FILE
        if stat_module.S_ISDIR(st.st_mode):
            return Kind.FOLDER
        return Kind.ABSENT

    @staticmethod
    def _matches(kind: Kind, wanted: Kind) -> Optional[bool]:
        """True if kind is wanted, False if it is the other concrete kind, else None."""
        if kind is wanted:
            return True
        if kind is Kind.ABSENT:
            return None
        return False

    def _escalate(self, exc: CachedFsError, level: int = logging.WARNING) -> None:
        """Raise under strict mode, log otherwise."""
        if self.config.strict:
            raise exc
        logger.log(level, exc.message)

    def _report_io_failure(self, operation: str, error: ErrorInfo) -> None:
        """Raise the original exception under strict mode, log otherwise."""
        if self.config.strict:
            raise error.exception
        logger.warning(f"{operation} failed at {self._path}: [{error.code}] {error.message}")

    def _note_stat_failure(self, error: ErrorInfo) -> None:
        if not error.transient:
            logger.warning(f"Failed to stat with code {error.code} at {self._path}")
