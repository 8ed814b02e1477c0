from __future__ import annotations

"""
FileSystem Facade.

Binds one configuration to one resolver, one retry policy, the OS
operation tables and the two identity registries (blocking and suspending
nodes). The module-level helpers act on a lazily created default instance so
that casual callers never have to build one.
"""

import logging
import os
import threading
import time
from typing import Any, Callable, Optional

from cachedfs.core.nodes import AsyncNode, Node
from cachedfs.core.object_cache import ObjectCache
from cachedfs.core.resolver import PathResolver, check_path
from cachedfs.core.retry import RetryingOperation
from cachedfs.domain.config import FsConfig, load_config
from cachedfs.domain.errors import InvalidArgumentError
from cachedfs.domain.models import ResolvedPath
from cachedfs.infra.fs import (
    AsyncFsOperations,
    FsOperations,
    default_async_operations,
    default_operations,
)

logger = logging.getLogger(__name__)


class FileSystem:
    """
    Entry point producing memoized nodes.

    Args:
        config: Mode and cache ages. Defaults to FsConfig().
        operations: Blocking OS operation table.
        async_operations: Suspending OS operation table.
        retry: Retry policy shared by every node.
        cwd_provider: Returns the working directory paths are relative to.
        clock: Monotonic time source for cache freshness.
    """

    def __init__(
            self,
            config: Optional[FsConfig] = None,
            operations: Optional[FsOperations] = None,
            async_operations: Optional[AsyncFsOperations] = None,
            retry: Optional[RetryingOperation] = None,
            cwd_provider: Callable[[], str] = os.getcwd,
            clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.config = config or FsConfig()
        self.resolver = PathResolver(self.config, cwd_provider)
        self.retry = retry or RetryingOperation()
        self.operations = operations or default_operations()
        self.async_operations = async_operations or default_async_operations()
        self.clock = clock

        self.nodes: ObjectCache[Node] = ObjectCache(lambda p: Node(p, self), self.config)
        self.async_nodes: ObjectCache[AsyncNode] = ObjectCache(
            lambda p: AsyncNode(p, self), self.config
        )

    # ==========================================================================
    # PUBLIC API
    # ==========================================================================

    def node(self, *args: Any) -> Node:
        """
        Return the blocking node for the path described by ``args``.

        Raises:
            InvalidArgumentError: On unresolvable arguments (outside forgiving
                mode) or a path with forbidden characters.
        """
        return self.nodes.get_or_create(self._resolve(args))

    def async_node(self, *args: Any) -> AsyncNode:
        """Return the suspending node for the path described by ``args``."""
        return self.async_nodes.get_or_create(self._resolve(args))

    def reset(self) -> None:
        """Forget every node of both registries."""
        self.nodes.reset()
        self.async_nodes.reset()

    # ==========================================================================
    # PRIVATE HELPERS
    # ==========================================================================

    def _resolve(self, args: Any) -> str:
        resolved: ResolvedPath = self.resolver.resolve(*args)
        if resolved.problems:
            message = "Invalid path arguments: " + "; ".join(
                p.describe() for p in resolved.problems
            )
            if not self.config.forgiving:
                raise InvalidArgumentError(
                    message,
                    details={"problems": [p.describe() for p in resolved.problems]},
                )
            logger.warning(f"{message} (resolved to {resolved.path})")
        return check_path(resolved.path)


# -----------------------------------------------------------------------------
# DEFAULT INSTANCE
# -----------------------------------------------------------------------------

_default: Optional[FileSystem] = None
_default_lock = threading.Lock()


def get_default_filesystem() -> FileSystem:
    """Return the shared FileSystem, built from load_config() on first use."""
    global _default
    if _default is None:
        with _default_lock:
            if _default is None:
                _default = FileSystem(load_config())
                logger.debug(f"Default filesystem created in {_default.config.mode.value} mode")
    return _default


def set_default_filesystem(fs: Optional[FileSystem]) -> None:
    """Replace the shared FileSystem; None makes the next call rebuild it."""
    global _default
    with _default_lock:
        _default = fs


def sync_fs(*args: Any) -> Node:
    return get_default_filesystem().node(*args)


def async_fs(*args: Any) -> AsyncNode:
    return get_default_filesystem().async_node(*args)


def reset_cache() -> None:
    """Forget every node of the shared FileSystem."""
    get_default_filesystem().reset()
