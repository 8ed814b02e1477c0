from __future__ import annotations

"""
Blocking Filesystem Node.

Each operation blocks the calling thread for the OS call and, on a
transient failure, for the retry backoff. Attributes are read through the
TTL cache so repeated queries inside the freshness window cost nothing.
"""

import json
import logging
from typing import Any, Callable, List, Optional

from cachedfs.core.nodes.base import BaseNode
from cachedfs.core.payload import coerce_payload
from cachedfs.core.retry import classify_error
from cachedfs.core.ttl_cache import cache_or_generate
from cachedfs.domain.errors import (
    InvariantViolationError,
    MissingTargetError,
    StructuralConflictError,
    UnsupportedParentError,
)
from cachedfs.domain.models import Kind

logger = logging.getLogger(__name__)


class Node(BaseNode):
    """Filesystem entry with blocking, cached accessors."""

    _registry_attr = "nodes"

    # ==========================================================================
    # ATTRIBUTES
    # ==========================================================================

    def stat(self) -> Any:
        """
        Return the stat result of the entry, or None.

        Missing entries and failures look the same from here: both return
        None. Never raises.
        """
        def generate() -> Any:
            result = self._owner.retry.attempt(None, self._owner.operations.stat, self._absolute)
            if result.error:
                raise result.error.exception
            return result.data

        entry = cache_or_generate(
            self._stat_entry, generate, self.config.stat_max_age, self._owner.clock
        )
        self._stat_entry = entry
        if entry.failed:
            self._note_stat_failure(classify_error(entry.error))
            self.cached_stat = None
            return None

        self.cached_stat = entry.value
        return entry.value

    def kind(self) -> Kind:
        return self._kind_of(self.stat())

    def is_file(self) -> Optional[bool]:
        """True for a file, False for a folder, None when absent or unknown."""
        return self._matches(self.kind(), Kind.FILE)

    def is_folder(self) -> Optional[bool]:
        """True for a folder, False for a file, None when absent or unknown."""
        return self._matches(self.kind(), Kind.FOLDER)

    def exists(self) -> bool:
        return self.stat() is not None

    def size(self) -> Optional[int]:
        st = self.stat()
        return None if st is None else st.st_size

    # ==========================================================================
    # LISTING
    # ==========================================================================

    def list_children(self, predicate: Optional[Callable[..., Any]] = None) -> List[Node]:
        """
        List the entries of this folder as nodes, sorted by name.

        Args:
            predicate: Optional filter; entries for which it returns a
                truthy value are kept. Called with the child, or with
                (child, index, children) when it takes three arguments.

        Returns:
            List[Node]: Child nodes shared with the identity cache. Empty for
            non-folders (strict mode raises instead).
        """
        if self.kind() is not Kind.FOLDER:
            self._escalate(StructuralConflictError(
                f"Cannot get children of non-folder at {self._path}"
            ), level=logging.DEBUG)
            return []

        def generate() -> List[Node]:
            result = self._owner.retry.attempt([], self._owner.operations.list_dir, self._absolute)
            if result.error:
                raise result.error.exception
            return [self._lookup(self._child_path(name), check=False) for name in sorted(result.data or [])]

        entry = cache_or_generate(
            self._children_entry, generate, self.config.children_max_age, self._owner.clock
        )
        self._children_entry = entry
        if entry.failed:
            self._report_io_failure("list", classify_error(entry.error))
            return []

        children = list(entry.value)
        if predicate is None:
            return children
        keep = self._as_filter(predicate)
        return [child for i, child in enumerate(children) if keep(child, i, children)]

    def list_files(self) -> List[Node]:
        return self.list_children(lambda n: n.is_file() is True)

    def list_folders(self) -> List[Node]:
        return self.list_children(lambda n: n.is_folder() is True)

    def siblings(self) -> List[Node]:
        """Return the other entries of the parent folder."""
        parent = self.parent()
        if parent.kind() is not Kind.FOLDER:
            self._escalate(StructuralConflictError(
                f"Cannot get children of non-folder at {parent.path}"
            ), level=logging.DEBUG)
            return []

        children = parent.list_children()
        if self.kind() is not Kind.ABSENT and not any(c is self for c in children):
            self._escalate(InvariantViolationError(
                f"Node {self._path} not found among the children of {parent.path}",
                details={"path": self._path, "parent": parent.path},
            ))
        return [c for c in children if c is not self]

    # ==========================================================================
    # READING
    # ==========================================================================

    def read_bytes(self) -> Optional[bytes]:
        """
        Return the file contents, or None for non-files and failed reads.
        """
        if self.is_file() is not True:
            self._escalate(StructuralConflictError(
                f"Cannot get data of non-file at {self._path}"
            ), level=logging.DEBUG)
            return None

        def generate() -> bytes:
            result = self._owner.retry.attempt(None, self._owner.operations.read_file, self._absolute)
            if result.error:
                raise result.error.exception
            if not isinstance(result.data, bytes):
                raise TypeError(f"Invalid read result of type {type(result.data).__name__}")
            return result.data

        entry = cache_or_generate(
            self._data_entry, generate, self.config.data_max_age, self._owner.clock
        )
        self._data_entry = entry
        if entry.failed:
            self._report_io_failure("read", classify_error(entry.error))
            return None
        return entry.value

    def read_text(self, encoding: str = "utf-8", errors: str = "replace") -> Optional[str]:
        data = self.read_bytes()
        return None if data is None else data.decode(encoding, errors)

    def read_json(self) -> Any:
        """
        Parse the file as JSON. Empty files give None.

        Malformed content gives None with a warning, or raises ValueError
        under strict mode.
        """
        data = self.read_bytes()
        if data is None or not data.strip():
            return None
        try:
            return json.loads(data)
        except ValueError as e:
            if self.config.strict:
                raise
            logger.warning(f"Failed to parse json file at {self._path}: {e}")
            return None

    # ==========================================================================
    # MUTATION
    # ==========================================================================

    def create_directory(self, name: Optional[str] = None) -> Node:
        """
        Ensure a folder exists, creating missing ancestors.

        Without ``name`` the folder is this node; with ``name`` it is the
        direct child of that name, which is returned.

        Raises:
            StructuralConflictError: If a file occupies the target or this node.
            InvalidArgumentError: If ``name`` holds a path separator.
        """
        if name is None:
            kind = self.kind()
            if kind is Kind.FOLDER:
                return self
            if kind is Kind.FILE:
                raise StructuralConflictError(
                    f"Cannot create folder on an existing file at {self._path}"
                )
            logger.debug(f"Creating folder at {self._path}")
            self._mutate("mkdir", self._owner.operations.make_dirs)
            return self

        self._validate_child_name(name)
        if self.kind() is Kind.FILE:
            raise StructuralConflictError(
                f"Cannot create folder inside an existing file at {self._path}"
            )
        target = self._lookup(self._child_path(name))
        target_kind = target.kind()
        if target_kind is Kind.FILE:
            raise StructuralConflictError(
                f"Cannot create folder on an existing file inside {self._path}"
            )
        if target_kind is Kind.FOLDER:
            return target
        return target.create_directory()

    def write_bytes(self, data: Any, overwrite: bool = False) -> bool:
        """
        Write the payload, replacing any previous contents.

        Args:
            data: Payload; see coerce_payload for accepted shapes.
            overwrite: Must be True to replace an existing file.

        Returns:
            bool: True on success, False on a reported I/O failure.

        Raises:
            StructuralConflictError: If the file exists and overwrite is False,
                or the parent is a file.
        """
        payload = coerce_payload(data)
        kind = self.kind()
        if kind is Kind.FILE and not overwrite:
            raise StructuralConflictError(
                f"Write target already exists at {self._path} (overwrite disabled)"
            )
        if kind is Kind.FOLDER:
            self._escalate(StructuralConflictError(f"Cannot write on folder at {self._path}"))

        self._prepare_parent()
        logger.debug(f"Writing {len(payload)} bytes to {self._path}")
        return self._mutate("write", self._owner.operations.write_file, payload)

    def append_bytes(self, data: Any, must_exist: bool = False) -> bool:
        """
        Append the payload, creating the file unless ``must_exist`` is set.

        Raises:
            MissingTargetError: If must_exist is set and the file is missing.
        """
        payload = coerce_payload(data)
        kind = self.kind()
        if must_exist and kind is not Kind.FILE:
            raise MissingTargetError(f"Append file target does not exist at {self._path}")
        if kind is Kind.FOLDER:
            self._escalate(StructuralConflictError(f"Cannot write on non-file at {self._path}"))

        self._prepare_parent()
        logger.debug(f"Appending {len(payload)} bytes to {self._path}")
        return self._mutate("append", self._owner.operations.append_file, payload)

    def overwrite(self, data: Any) -> bool:
        """Replace the contents of an existing file."""
        if self.kind() is not Kind.FILE:
            raise MissingTargetError(f"Rewrite target does not exist at {self._path}")
        return self.write_bytes(data, True)

    def descend(self, name: str) -> Optional[Node]:
        """
        Return the child node of that name even if it does not exist.

        A node confirmed to be a file has no children: None is returned
        (strict mode raises).

        Raises:
            InvalidArgumentError: If the name climbs out of this node.
        """
        self._validate_descendant_name(name)
        if self.kind() is Kind.FILE:
            self._escalate(StructuralConflictError(
                f"Cannot target child inside existing file at {self._path}"
            ), level=logging.DEBUG)
            return None
        return self._lookup(self._child_path(name))

    # ==========================================================================
    # PRIVATE HELPERS
    # ==========================================================================

    def _prepare_parent(self) -> None:
        """Create a missing parent folder; refuse a parent that is a file."""
        try:
            parent = self.parent()
        except UnsupportedParentError:
            return
        parent_kind = parent.kind()
        if parent_kind is Kind.FILE:
            raise StructuralConflictError(f"Invalid file parent type of {self._path}")
        if parent_kind is Kind.ABSENT:
            logger.debug(f"Creating parent at {parent.path}")
            parent.create_directory()

    def _mutate(self, operation: str, action: Callable[..., Any], *args: Any) -> bool:
        result = self._owner.retry.attempt(None, action, self._absolute, *args)
        self._invalidate_lineage()
        if result.error:
            self._report_io_failure(operation, result.error)
            return False
        return True
