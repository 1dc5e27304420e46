"""Scan classification.

Decides what a scan string means before any payload decoding is tried:
one of the session commands, or a payload whose meaning (location or
item) depends on the session state.
"""

from __future__ import annotations

from enum import StrEnum

from scanledger.config import ScannerConfig
from scanledger.models._base import LedgerModel, trim


class ScanKind(StrEnum):
    IGNORED = "ignored"
    FINISH = "finish"
    CLOSE_LOCATION = "close_location"
    SET_LOCATION = "set_location"
    PAYLOAD = "payload"


class Classification(LedgerModel):
    """A classified scan.

    ``text`` is the trimmed scan with any ignored prefix removed, in its
    original casing.  ``location`` is only set for ``SET_LOCATION``.
    """

    kind: ScanKind
    text: str = ""
    location: str | None = None


class CodeClassifier:
    """Match scans against the configured command vocabulary."""

    def __init__(self, config: ScannerConfig | None = None) -> None:
        config = config or ScannerConfig()
        self._ignored_prefix = config.ignored_prefix.upper()
        self._finish = frozenset(command.upper() for command in config.finish_commands)
        self._close_location = frozenset(command.upper() for command in config.close_location_commands)
        self._location_prefixes = tuple(prefix.upper() for prefix in config.location_prefixes)

    def strip_ignored_prefix(self, raw: str) -> str:
        """Drop the ignored marker if it prefixes *raw*; ``""`` if *raw* is the marker."""
        text = trim(raw)
        if not self._ignored_prefix:
            return text
        if text.upper().startswith(self._ignored_prefix):
            return trim(text[len(self._ignored_prefix) :])
        return text

    def classify(self, raw: str) -> Classification:
        text = self.strip_ignored_prefix(raw)
        if not text:
            return Classification(kind=ScanKind.IGNORED)

        folded = text.upper()
        if folded in self._finish:
            return Classification(kind=ScanKind.FINISH, text=text)
        if folded in self._close_location:
            return Classification(kind=ScanKind.CLOSE_LOCATION, text=text)
        for prefix in self._location_prefixes:
            if folded.startswith(prefix):
                return Classification(
                    kind=ScanKind.SET_LOCATION,
                    text=text,
                    location=trim(text[len(prefix) :]),
                )
        return Classification(kind=ScanKind.PAYLOAD, text=text)
