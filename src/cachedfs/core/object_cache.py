from __future__ import annotations

"""
Node Identity Registry.

Maps canonical paths to node instances so that every lookup of a path
returns the very same object. Membership tests such as "is this node among
its parent's children" rely on that identity. Entries are never evicted;
the registry grows with the number of distinct paths touched until reset()
is called.
"""

import logging
import threading
from typing import Callable, Dict, Generic, List, Optional, TypeVar

from cachedfs.domain.config import FsConfig

logger = logging.getLogger(__name__)

N = TypeVar("N")


class ObjectCache(Generic[N]):
    """
    Get-or-create registry keyed by canonical path.

    Args:
        factory: Builds a node for a canonical path on a miss.
        config: Configuration of the owning filesystem.
    """

    def __init__(self, factory: Callable[[str], N], config: Optional[FsConfig] = None) -> None:
        self.config = config or FsConfig()
        self._factory = factory
        self._nodes: Dict[str, N] = {}
        self._lock = threading.Lock()

    def get_or_create(self, path: str) -> N:
        """Return the node bound to ``path``, creating it on first use."""
        node = self._nodes.get(path)
        if node is not None:
            return node

        with self._lock:
            node = self._nodes.get(path)
            if node is None:
                logger.debug(f"ObjectCache: creating node for {path}")
                node = self._factory(path)
                self._nodes[path] = node
            return node

    def peek(self, path: str) -> Optional[N]:
        """Return the node for ``path`` only if it was already created."""
        return self._nodes.get(path)

    def reset(self) -> None:
        """Forget every node. Later lookups produce new instances."""
        with self._lock:
            count = len(self._nodes)
            self._nodes.clear()
        logger.debug(f"ObjectCache: dropped {count} nodes")

    def paths(self) -> List[str]:
        return list(self._nodes)

    def __contains__(self, path: object) -> bool:
        return path in self._nodes

    def __len__(self) -> int:
        return len(self._nodes)
