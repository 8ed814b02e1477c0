from __future__ import annotations

from .async_node import AsyncNode
from .base import BaseNode
from .sync_node import Node

__all__ = [
    "AsyncNode",
    "BaseNode",
    "Node",
]
