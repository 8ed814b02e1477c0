from __future__ import annotations

"""
Suspending Filesystem Node.

Same state machine and caching rules as the blocking node; OS calls go
through the aiofiles operation table and the retry backoff suspends only
the calling task.
"""

import inspect
import json
import logging
from typing import Any, Callable, List, Optional

from cachedfs.core.nodes.base import BaseNode
from cachedfs.core.payload import coerce_payload
from cachedfs.core.retry import classify_error
from cachedfs.core.ttl_cache import cache_or_generate_async
from cachedfs.domain.errors import (
    InvariantViolationError,
    MissingTargetError,
    StructuralConflictError,
    UnsupportedParentError,
)
from cachedfs.domain.models import Kind

logger = logging.getLogger(__name__)


class AsyncNode(BaseNode):
    """Filesystem entry whose I/O-bound accessors are coroutines."""

    _registry_attr = "async_nodes"

    # ==========================================================================
    # ATTRIBUTES
    # ==========================================================================

    async def stat(self) -> Any:
        """Return the stat result of the entry, or None. Never raises."""
        async def generate() -> Any:
            result = await self._owner.retry.attempt_async(
                None, self._owner.async_operations.stat, self._absolute
            )
            if result.error:
                raise result.error.exception
            return result.data

        entry = await cache_or_generate_async(
            self._stat_entry, generate, self.config.stat_max_age, self._owner.clock
        )
        self._stat_entry = entry
        if entry.failed:
            self._note_stat_failure(classify_error(entry.error))
            self.cached_stat = None
            return None

        self.cached_stat = entry.value
        return entry.value

    async def kind(self) -> Kind:
        return self._kind_of(await self.stat())

    async def is_file(self) -> Optional[bool]:
        return self._matches(await self.kind(), Kind.FILE)

    async def is_folder(self) -> Optional[bool]:
        return self._matches(await self.kind(), Kind.FOLDER)

    async def exists(self) -> bool:
        return await self.stat() is not None

    async def size(self) -> Optional[int]:
        st = await self.stat()
        return None if st is None else st.st_size

    # ==========================================================================
    # LISTING
    # ==========================================================================

    async def list_children(
            self,
            predicate: Optional[Callable[..., Any]] = None,
    ) -> List[AsyncNode]:
        """
        List the entries of this folder as nodes, sorted by name.

        The predicate may be a plain function or return an awaitable; it is
        evaluated one entry at a time, in order. Three-argument predicates also
        receive the index and the full list of children.
        """
        if await self.kind() is not Kind.FOLDER:
            self._escalate(StructuralConflictError(
                f"Cannot get children of non-folder at {self._path}"
            ), level=logging.DEBUG)
            return []

        async def generate() -> List[AsyncNode]:
            result = await self._owner.retry.attempt_async(
                [], self._owner.async_operations.list_dir, self._absolute
            )
            if result.error:
                raise result.error.exception
            return [
                self._lookup(self._child_path(name), check=False)
                for name in sorted(result.data or [])
            ]

        entry = await cache_or_generate_async(
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
        kept: List[AsyncNode] = []
        for i, child in enumerate(children):
            verdict = keep(child, i, children)
            if inspect.isawaitable(verdict):
                verdict = await verdict
            if verdict:
                kept.append(child)
        return kept

    async def list_files(self) -> List[AsyncNode]:
        async def wanted(n: AsyncNode) -> bool:
            return await n.is_file() is True
        return await self.list_children(wanted)

    async def list_folders(self) -> List[AsyncNode]:
        async def wanted(n: AsyncNode) -> bool:
            return await n.is_folder() is True
        return await self.list_children(wanted)

    async def siblings(self) -> List[AsyncNode]:
        parent = self.parent()
        if await parent.kind() is not Kind.FOLDER:
            self._escalate(StructuralConflictError(
                f"Cannot get children of non-folder at {parent.path}"
            ), level=logging.DEBUG)
            return []

        children = await parent.list_children()
        if await self.kind() is not Kind.ABSENT and not any(c is self for c in children):
            self._escalate(InvariantViolationError(
                f"Node {self._path} not found among the children of {parent.path}",
                details={"path": self._path, "parent": parent.path},
            ))
        return [c for c in children if c is not self]

    # ==========================================================================
    # READING
    # ==========================================================================

    async def read_bytes(self) -> Optional[bytes]:
        if await self.is_file() is not True:
            self._escalate(StructuralConflictError(
                f"Cannot get data of non-file at {self._path}"
            ), level=logging.DEBUG)
            return None

        async def generate() -> bytes:
            result = await self._owner.retry.attempt_async(
                None, self._owner.async_operations.read_file, self._absolute
            )
            if result.error:
                raise result.error.exception
            if not isinstance(result.data, bytes):
                raise TypeError(f"Invalid read result of type {type(result.data).__name__}")
            return result.data

        entry = await cache_or_generate_async(
            self._data_entry, generate, self.config.data_max_age, self._owner.clock
        )
        self._data_entry = entry
        if entry.failed:
            self._report_io_failure("read", classify_error(entry.error))
            return None
        return entry.value

    async def read_text(self, encoding: str = "utf-8", errors: str = "replace") -> Optional[str]:
        data = await self.read_bytes()
        return None if data is None else data.decode(encoding, errors)

    async def read_json(self) -> Any:
        data = await self.read_bytes()
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

    async def create_directory(self, name: Optional[str] = None) -> AsyncNode:
        """
        Creates a folder if it does not exist and returns its node.

        Missing ancestors are created in the same call.
        """
        if name is None:
            kind = await self.kind()
            if kind is Kind.FOLDER:
                return self
            if kind is Kind.FILE:
                raise StructuralConflictError(
                    f"Cannot create folder on an existing file at {self._path}"
                )
            logger.debug(f"Creating folder at {self._path}")
            await self._mutate("mkdir", self._owner.async_operations.make_dirs)
            return self

        self._validate_child_name(name)
        if await self.kind() is Kind.FILE:
            raise StructuralConflictError(
                f"Cannot create folder inside an existing file at {self._path}"
            )
        target = self._lookup(self._child_path(name))
        target_kind = await target.kind()
        if target_kind is Kind.FILE:
            raise StructuralConflictError(
                f"Cannot create folder on an existing file inside {self._path}"
            )
        if target_kind is Kind.FOLDER:
            return target
        return await target.create_directory()

    async def write_bytes(self, data: Any, overwrite: bool = False) -> bool:
        payload = coerce_payload(data)
        kind = await self.kind()
        if kind is Kind.FILE and not overwrite:
            raise StructuralConflictError(
                f"Write target already exists at {self._path} (overwrite disabled)"
            )
        if kind is Kind.FOLDER:
            self._escalate(StructuralConflictError(f"Cannot write on folder at {self._path}"))

        await self._prepare_parent()
        logger.debug(f"Writing {len(payload)} bytes to {self._path}")
        return await self._mutate("write", self._owner.async_operations.write_file, payload)

    async def append_bytes(self, data: Any, must_exist: bool = False) -> bool:
        payload = coerce_payload(data)
        kind = await self.kind()
        if must_exist and kind is not Kind.FILE:
            raise MissingTargetError(f"Append file target does not exist at {self._path}")
        if kind is Kind.FOLDER:
            self._escalate(StructuralConflictError(f"Cannot write on non-file at {self._path}"))

        await self._prepare_parent()
        logger.debug(f"Appending {len(payload)} bytes to {self._path}")
        return await self._mutate("append", self._owner.async_operations.append_file, payload)

    async def overwrite(self, data: Any) -> bool:
        if await self.kind() is not Kind.FILE:
            raise MissingTargetError(f"Rewrite target does not exist at {self._path}")
        return await self.write_bytes(data, True)

    async def descend(self, name: str) -> Optional[AsyncNode]:
        """Get a child node even if it does not exist, unless this node is a file."""
        self._validate_descendant_name(name)
        if await self.kind() is Kind.FILE:
            self._escalate(StructuralConflictError(
                f"Cannot target child inside existing file at {self._path}"
            ), level=logging.DEBUG)
            return None
        return self._lookup(self._child_path(name))

    # ==========================================================================
    # PRIVATE HELPERS
    # ==========================================================================

    async def _prepare_parent(self) -> None:
        try:
            parent = self.parent()
        except UnsupportedParentError:
            return
        parent_kind = await parent.kind()
        if parent_kind is Kind.FILE:
            raise StructuralConflictError(f"Invalid file parent type of {self._path}")
        if parent_kind is Kind.ABSENT:
            logger.debug(f"Creating parent at {parent.path}")
            await parent.create_directory()

    async def _mutate(self, operation: str, action: Callable[..., Any], *args: Any) -> bool:
        result = await self._owner.retry.attempt_async(None, action, self._absolute, *args)
        self._invalidate_lineage()
        if result.error:
            self._report_io_failure(operation, result.error)
            return False
        return True
