"""Storage collaborator protocol."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from scanledger.models.line import InventoryLine


@runtime_checkable
class LineStore(Protocol):
    """Async key-value store of inventory lines.

    Implementations raise whatever their backend raises; the ledger
    wraps failures in :class:`~scanledger.exceptions.StoreOperationError`.
    """

    async def open(self) -> None:
        """Prepare the backend. Called once before any other operation."""

    async def get_all(self) -> list[InventoryLine]: ...

    async def put(self, line: InventoryLine) -> None:
        """Insert or replace the line with ``line.id``."""

    async def delete(self, line_id: str) -> None: ...

    async def clear(self) -> None: ...

    async def find_by_key(self, key: str) -> list[InventoryLine]:
        """Return lines whose ``key`` equals *key* (0 or 1 in practice)."""
