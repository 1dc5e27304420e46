"""Session state, user-facing outcomes and display snapshots."""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, ConfigDict

from scanledger.models._base import LedgerModel
from scanledger.models.line import InventoryLine


class SessionState(StrEnum):
    AWAITING_LOCATION = "awaiting_location"
    AWAITING_ITEMS = "awaiting_items"
    FINISHED = "finished"


class MessageLevel(StrEnum):
    OK = "ok"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class SessionContext(BaseModel):
    """Mutable per-process session context.

    Owned by :class:`~scanledger.session.ScanSession`; every handler
    reads and writes it explicitly rather than through module globals.
    """

    model_config = ConfigDict(extra="forbid", validate_assignment=True)

    state: SessionState = SessionState.AWAITING_LOCATION
    current_location: str | None = None
    last_written_line_id: str | None = None
    last_scan: str | None = None

    def reset(self) -> None:
        self.state = SessionState.AWAITING_LOCATION
        self.current_location = None
        self.last_written_line_id = None
        self.last_scan = None


class ScanOutcome(LedgerModel):
    """Result of one session operation, suitable for a message area."""

    level: MessageLevel
    message: str
    line: InventoryLine | None = None

    @property
    def ok(self) -> bool:
        return self.level in (MessageLevel.OK, MessageLevel.INFO)


class SessionSnapshot(LedgerModel):
    """Read-only view for display. ``line_count`` is ``None`` if the store failed."""

    state: SessionState
    current_location: str | None
    last_scan: str | None
    line_count: int | None = None
