"""Scan events produced by the assembler."""

from __future__ import annotations

from datetime import datetime
from enum import StrEnum

from pydantic import Field, field_validator

from scanledger.models._base import LedgerModel, trim, utcnow


class ControlKey(StrEnum):
    """Non-printable keys a keyboard-wedge scanner may send."""

    ENTER = "Enter"
    TAB = "Tab"
    BACKSPACE = "Backspace"


class ScanEvent(LedgerModel):
    """A trimmed scan string and the moment it was flushed."""

    text: str
    received_at: datetime = Field(default_factory=utcnow)

    @field_validator("text")
    @classmethod
    def _strip_text(cls, value: str) -> str:
        text = trim(value)
        if not text:
            raise ValueError("scan text must be non-empty")
        return text
