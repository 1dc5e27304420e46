"""Data models for scans, decoded items and inventory lines."""

from scanledger.models._base import LedgerModel, OptionalText, blank_to_none, trim
from scanledger.models.item import DecodedItem, DecodeResult, EncodingVariant, NotDecodable
from scanledger.models.line import InventoryLine, make_line_key
from scanledger.models.scan import ControlKey, ScanEvent
from scanledger.models.session import (
    MessageLevel,
    ScanOutcome,
    SessionContext,
    SessionSnapshot,
    SessionState,
)

__all__ = [
    "ControlKey",
    "DecodeResult",
    "DecodedItem",
    "EncodingVariant",
    "InventoryLine",
    "LedgerModel",
    "MessageLevel",
    "NotDecodable",
    "OptionalText",
    "ScanEvent",
    "ScanOutcome",
    "SessionContext",
    "SessionSnapshot",
    "SessionState",
    "blank_to_none",
    "make_line_key",
    "trim",
]
