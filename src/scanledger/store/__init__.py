"""Storage collaborator interface and the in-memory implementation.

The ledger never keeps its own copy of the lines: every read and write
goes through a :class:`LineStore`.
"""

from scanledger.store.base import LineStore
from scanledger.store.memory import MemoryLineStore

__all__ = ["LineStore", "MemoryLineStore"]
