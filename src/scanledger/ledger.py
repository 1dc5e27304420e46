"""Inventory ledger: aggregation and duplicate rejection.

Lines are identified by :func:`~scanledger.models.line.make_line_key`.
Without a sub-lot, repeated scans of a key accumulate into one line.
With a sub-lot, each key may exist once and a repeat is rejected.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from datetime import datetime
from enum import StrEnum
from typing import TypeVar

from scanledger.exceptions import DuplicateSubLotError, NoActiveLocationError, StoreOperationError
from scanledger.models._base import LedgerModel, blank_to_none, trim, utcnow
from scanledger.models.line import InventoryLine, make_line_key
from scanledger.store.base import LineStore

_logger = logging.getLogger(__name__)

T = TypeVar("T")


class UpsertAction(StrEnum):
    INSERTED = "inserted"
    INCREMENTED = "incremented"


class UpsertResult(LedgerModel):
    line: InventoryLine
    action: UpsertAction


class InventoryLedger:
    """Apply the aggregate-or-reject rule against a :class:`LineStore`.

    Every store call is awaited in sequence; the ledger holds no copy of
    the lines between operations.
    """

    def __init__(self, store: LineStore, *, clock: Callable[[], datetime] = utcnow) -> None:
        self._store = store
        self._clock = clock

    @property
    def store(self) -> LineStore:
        return self._store

    async def _store_call(self, operation: str, fn: Callable[[], Awaitable[T]]) -> T:
        """Run a store operation, wrapping any failure in :class:`StoreOperationError`."""
        try:
            return await fn()
        except Exception as exc:
            _logger.debug("Store %s failed", operation, exc_info=True)
            raise StoreOperationError(str(exc) or type(exc).__name__, operation=operation) from exc

    async def upsert(
        self,
        location: str | None,
        reference: str,
        lot: str | None = None,
        sub_lot: str | None = None,
        *,
        manual: bool = False,
    ) -> UpsertResult:
        """Record one scan of an item at *location*.

        Raises
        ------
        NoActiveLocationError
            *location* is empty.
        DuplicateSubLotError
            *sub_lot* is set and the exact key already exists.
        StoreOperationError
            The store failed; nothing was written.
        """
        location = trim(location)
        if not location:
            raise NoActiveLocationError("No active location. Scan a location first.")
        reference = trim(reference)
        if not reference:
            raise ValueError("reference must be non-empty")
        lot = blank_to_none(lot)
        sub_lot = blank_to_none(sub_lot)

        key = make_line_key(location, reference, lot, sub_lot)
        existing = await self._store_call("find_by_key", lambda: self._store.find_by_key(key))
        now = self._clock()

        if sub_lot is not None:
            if existing:
                raise DuplicateSubLotError(
                    f"Duplicate rejected (sub-lot): {reference} / {lot or '-'} / {sub_lot}",
                    key=key,
                )
            line = InventoryLine.create(
                location=location, reference=reference, lot=lot, sub_lot=sub_lot, manual=manual, now=now
            )
            action = UpsertAction.INSERTED
        elif existing:
            line = existing[0].incremented(manual=manual, now=now)
            action = UpsertAction.INCREMENTED
        else:
            line = InventoryLine.create(location=location, reference=reference, lot=lot, manual=manual, now=now)
            action = UpsertAction.INSERTED

        await self._store_call("put", lambda: self._store.put(line))
        _logger.debug("Ledger %s key=%s quantity=%d", action, key, line.quantity)
        return UpsertResult(line=line, action=action)

    async def remove(self, line_id: str) -> None:
        await self._store_call("delete", lambda: self._store.delete(line_id))

    async def lines(self) -> list[InventoryLine]:
        return await self._store_call("get_all", self._store.get_all)

    async def count(self) -> int:
        return len(await self.lines())

    async def clear(self) -> None:
        await self._store_call("clear", self._store.clear)
