"""Scan session state machine.

Dispatches each scan according to what it is (a command, a location or
an item) and where the session stands::

    AWAITING_LOCATION --location--> AWAITING_ITEMS --item--> AWAITING_ITEMS
          ^                               |
          +------- close location --------+
    any --finish--> FINISHED --any scan--> AWAITING_LOCATION (scan is the location)

Usage::

    async with ScanSession(MemoryLineStore()) as session:
        await session.handle_scan("A-01-03")
        await session.handle_scan("\\x1d02REF100\\x1d10L5")
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

from scanledger.classifier import CodeClassifier, ScanKind
from scanledger.config import ScannerConfig
from scanledger.decoding import Gs1Decoder
from scanledger.exceptions import (
    DecoderRuntimeFault,
    DuplicateSubLotError,
    EmptyLocationError,
    NoActiveLocationError,
    ScanLedgerError,
    StoreInitError,
    StoreOperationError,
)
from scanledger.export import ExportSink, export_rows
from scanledger.ledger import InventoryLedger, UpsertAction
from scanledger.models._base import trim
from scanledger.models.item import DecodedItem, NotDecodable
from scanledger.models.line import InventoryLine
from scanledger.models.session import (
    MessageLevel,
    ScanOutcome,
    SessionContext,
    SessionSnapshot,
    SessionState,
)
from scanledger.store.base import LineStore

_logger = logging.getLogger(__name__)


def _describe(reference: str, lot: str | None, sub_lot: str | None, manual: bool) -> str:
    text = f"{reference} (lot {lot or '-'})"
    if sub_lot:
        text += f" (sub-lot {sub_lot})"
    if manual:
        text += " [manual]"
    return text


class ScanSession:
    """Single inventory session over a :class:`LineStore`.

    All state lives in :attr:`context`; pass one in to start from a
    known state.  Operations never raise for per-scan problems: they
    return a :class:`ScanOutcome` and also report it to *on_message*.
    """

    def __init__(
        self,
        store: LineStore,
        *,
        config: ScannerConfig | None = None,
        context: SessionContext | None = None,
        decoder: Gs1Decoder | None = None,
        on_message: Callable[[ScanOutcome], None] | None = None,
    ) -> None:
        self._config = config or ScannerConfig()
        self._store = store
        self._ledger = InventoryLedger(store)
        self._classifier = CodeClassifier(self._config)
        self._decoder = decoder or Gs1Decoder(sub_lot_width=self._config.sub_lot_width)
        self._on_message = on_message
        self._opened = False
        self.context = context if context is not None else SessionContext()

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def open(self) -> None:
        """Initialize the store. Raises :class:`StoreInitError` on failure."""
        try:
            await self._store.open()
        except Exception as exc:
            raise StoreInitError(f"Could not initialize storage: {exc}") from exc
        self._opened = True
        self._emit(MessageLevel.OK, "Ready. Scan a LOCATION.")

    async def __aenter__(self) -> ScanSession:
        await self.open()
        return self

    async def __aexit__(self, *exc: Any) -> None:
        self._opened = False

    def _require_open(self) -> None:
        if not self._opened:
            raise ScanLedgerError("Session not initialized. Use 'async with ScanSession(...) as session:'")

    # ------------------------------------------------------------------
    # Messages
    # ------------------------------------------------------------------

    def _emit(self, level: MessageLevel, message: str, **extra: Any) -> ScanOutcome:
        outcome = ScanOutcome(level=level, message=message, **extra)
        if self._on_message is not None:
            try:
                self._on_message(outcome)
            except Exception:
                _logger.debug("on_message callback failed", exc_info=True)
        return outcome

    def _set_state(self, state: SessionState) -> None:
        if self.context.state is not state:
            _logger.debug("Session state %s -> %s", self.context.state, state)
        self.context.state = state

    # ------------------------------------------------------------------
    # Read-only views
    # ------------------------------------------------------------------

    @property
    def config(self) -> ScannerConfig:
        return self._config

    @property
    def ledger(self) -> InventoryLedger:
        return self._ledger

    @property
    def state(self) -> SessionState:
        return self.context.state

    @property
    def current_location(self) -> str | None:
        return self.context.current_location

    async def snapshot(self) -> SessionSnapshot:
        """Current state for display. A store failure is reported, not raised."""
        self._require_open()
        line_count: int | None = None
        try:
            line_count = await self._ledger.count()
        except StoreOperationError as exc:
            self._emit(MessageLevel.ERROR, f"ERROR: {exc}")
        return SessionSnapshot(
            state=self.context.state,
            current_location=self.context.current_location,
            last_scan=self.context.last_scan,
            line_count=line_count,
        )

    def expected_state(self, raw: str, state: SessionState | None = None) -> SessionState:
        """State after :meth:`handle_scan` of *raw*, starting from *state*.

        Touches neither the context nor the store.  Item scans are assumed
        to keep the session on its location whatever the ledger answers.
        """
        state = self.context.state if state is None else state
        scan = self._classifier.classify(raw)
        if scan.kind is ScanKind.IGNORED:
            return state
        if scan.kind is ScanKind.FINISH:
            return SessionState.FINISHED
        if scan.kind is ScanKind.CLOSE_LOCATION:
            return SessionState.AWAITING_LOCATION if state is SessionState.AWAITING_ITEMS else state
        if scan.kind is ScanKind.SET_LOCATION and not trim(scan.location or ""):
            return state
        return SessionState.AWAITING_ITEMS

    # ------------------------------------------------------------------
    # Scan dispatch
    # ------------------------------------------------------------------

    async def handle_scan(self, raw: str) -> ScanOutcome:
        """Classify one assembled scan and act on it."""
        self._require_open()
        scan = self._classifier.classify(raw)
        if scan.kind is ScanKind.IGNORED:
            return ScanOutcome(level=MessageLevel.INFO, message="Scan ignored.")

        self.context.last_scan = scan.text

        if scan.kind is ScanKind.FINISH:
            return self.finish()
        if scan.kind is ScanKind.CLOSE_LOCATION:
            return self.close_location()
        if scan.kind is ScanKind.SET_LOCATION:
            return self.set_location(scan.location or "")

        if self.context.state is SessionState.FINISHED:
            self._set_state(SessionState.AWAITING_LOCATION)
            self._emit(MessageLevel.WARNING, "Capture resumed: scan a LOCATION.")

        if self.context.state is SessionState.AWAITING_LOCATION:
            return self.set_location(scan.text)
        return await self._register_item(scan.text)

    @staticmethod
    def _require_location(candidate: str) -> str:
        location = trim(candidate)
        if not location:
            raise EmptyLocationError("Empty location. Scan it again.")
        return location

    def set_location(self, candidate: str) -> ScanOutcome:
        """Make *candidate* the current location, from any state."""
        self._require_open()
        try:
            location = self._require_location(candidate)
        except EmptyLocationError as exc:
            return self._emit(MessageLevel.ERROR, str(exc))
        self.context.current_location = location
        self._set_state(SessionState.AWAITING_ITEMS)
        return self._emit(MessageLevel.OK, f"Location set: {location}. Scan items...")

    def close_location(self) -> ScanOutcome:
        self._require_open()
        if not self.context.current_location:
            return self._emit(MessageLevel.WARNING, "No active location to close.")
        self.context.current_location = None
        self._set_state(SessionState.AWAITING_LOCATION)
        return self._emit(MessageLevel.WARNING, "Location closed. Scan the next location.")

    def finish(self) -> ScanOutcome:
        self._require_open()
        if self.context.state is SessionState.FINISHED:
            return self._emit(MessageLevel.WARNING, "The inventory is already finished.")
        self.context.current_location = None
        self._set_state(SessionState.FINISHED)
        return self._emit(MessageLevel.WARNING, "Inventory finished. You can export it now.")

    # ------------------------------------------------------------------
    # Items
    # ------------------------------------------------------------------

    def _decode(self, text: str) -> DecodedItem:
        """Decode *text*, degrading to the raw reference on any failure."""
        try:
            result = self._decoder.decode(text)
        except DecoderRuntimeFault as exc:
            _logger.warning("Decoder fault on %r", text, exc_info=True)
            self._emit(MessageLevel.WARNING, f"Decoder error ({exc}); stored as raw reference.")
            return DecodedItem.from_raw(text)
        if isinstance(result, NotDecodable):
            return result.to_item()
        return result

    async def _register_item(self, text: str) -> ScanOutcome:
        if not self.context.current_location:
            self._set_state(SessionState.AWAITING_LOCATION)
            return self._emit(MessageLevel.ERROR, "No active location. Scan a location first.")
        item = self._decode(text)
        return await self._store_item(item.reference, item.lot, item.sub_lot, manual=False)

    async def add_manual(self, reference: str, lot: str | None = None, sub_lot: str | None = None) -> ScanOutcome:
        """Record a hand-typed item at the current location."""
        self._require_open()
        if not self.context.current_location:
            return self._emit(MessageLevel.WARNING, "Set a location before adding items manually.")
        if not trim(reference):
            return self._emit(MessageLevel.ERROR, "Reference is required for manual entry.")
        return await self._store_item(reference, lot, sub_lot, manual=True)

    async def _store_item(
        self,
        reference: str,
        lot: str | None,
        sub_lot: str | None,
        *,
        manual: bool,
    ) -> ScanOutcome:
        try:
            result = await self._ledger.upsert(
                self.context.current_location, reference, lot, sub_lot, manual=manual
            )
        except NoActiveLocationError as exc:
            self._set_state(SessionState.AWAITING_LOCATION)
            return self._emit(MessageLevel.ERROR, str(exc))
        except DuplicateSubLotError as exc:
            return self._emit(MessageLevel.ERROR, str(exc))
        except StoreOperationError as exc:
            return self._emit(MessageLevel.ERROR, f"ERROR: {exc}")

        line = result.line
        self.context.last_written_line_id = line.id
        description = _describe(line.reference, line.lot, line.sub_lot, manual)
        if result.action is UpsertAction.INCREMENTED:
            return self._emit(MessageLevel.OK, f"OK (added): {description} -> quantity {line.quantity}", line=line)
        return self._emit(MessageLevel.OK, f"OK: {description}", line=line)

    # ------------------------------------------------------------------
    # Undo / reset / export
    # ------------------------------------------------------------------

    async def undo(self) -> ScanOutcome:
        """Delete the last written line. Only one level deep."""
        self._require_open()
        line_id = self.context.last_written_line_id
        if line_id is None:
            return self._emit(MessageLevel.WARNING, "Nothing to undo.")
        try:
            await self._ledger.remove(line_id)
        except StoreOperationError as exc:
            return self._emit(MessageLevel.ERROR, f"ERROR: {exc}")
        self.context.last_written_line_id = None
        return self._emit(MessageLevel.OK, "Undo OK (last line removed).")

    async def reset(self) -> ScanOutcome:
        """Clear every stored line and return to the initial state."""
        self._require_open()
        try:
            await self._ledger.clear()
        except StoreOperationError as exc:
            return self._emit(MessageLevel.ERROR, f"ERROR: {exc}")
        self.context.reset()
        return self._emit(MessageLevel.WARNING, "Store cleared. Scan a LOCATION to start.")

    async def export(self, sink: ExportSink) -> ScanOutcome:
        self._require_open()
        try:
            lines = await self._ledger.lines()
        except StoreOperationError as exc:
            return self._emit(MessageLevel.ERROR, f"ERROR: {exc}")
        if not lines:
            return self._emit(MessageLevel.WARNING, "Nothing to export.")
        sink.export_rows(export_rows(lines))
        return self._emit(MessageLevel.OK, f"Export generated ({len(lines)} lines).")

    async def lines(self) -> list[InventoryLine]:
        """Stored lines; empty (with an error reported) if the store fails."""
        self._require_open()
        try:
            return await self._ledger.lines()
        except StoreOperationError as exc:
            self._emit(MessageLevel.ERROR, f"ERROR: {exc}")
            return []
