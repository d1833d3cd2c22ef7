"""Store protocol and the in-memory implementation."""

from ladderkeeper.store.base import LadderStore
from ladderkeeper.store.memory import MemoryLadderStore

__all__ = [
    "LadderStore",
    "MemoryLadderStore",
]
