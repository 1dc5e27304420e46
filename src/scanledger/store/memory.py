"""In-memory line store."""

from __future__ import annotations

from scanledger.models.line import InventoryLine


class MemoryLineStore:
    """Dict-backed :class:`~scanledger.store.base.LineStore`.

    Lines come back in insertion order.  Models are frozen, so handing
    out the stored instances is safe.
    """

    def __init__(self, lines: list[InventoryLine] | None = None) -> None:
        self._lines: dict[str, InventoryLine] = {line.id: line for line in lines or []}
        self.opened = False

    async def open(self) -> None:
        self.opened = True

    async def get_all(self) -> list[InventoryLine]:
        return list(self._lines.values())

    async def put(self, line: InventoryLine) -> None:
        self._lines[line.id] = line

    async def delete(self, line_id: str) -> None:
        self._lines.pop(line_id, None)

    async def clear(self) -> None:
        self._lines.clear()

    async def find_by_key(self, key: str) -> list[InventoryLine]:
        return [line for line in self._lines.values() if line.key == key]
