"""Decoder results.

:func:`scanledger.decoding.decode` returns either a :class:`DecodedItem`
or a :class:`NotDecodable`.  Keeping both as explicit variants makes
the raw-reference fallback visible at the call site instead of hiding
it behind ``None``.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Literal

from pydantic import Field, field_validator

from scanledger.models._base import LedgerModel, OptionalText, trim


class EncodingVariant(StrEnum):
    """Which payload encoding produced a :class:`DecodedItem`."""

    CONTROL_SEPARATED = "control_separated"
    GLYPH_SEPARATED = "glyph_separated"
    PARENTHESIZED = "parenthesized"
    CONCATENATED = "concatenated"
    RAW = "raw"


class DecodedItem(LedgerModel):
    """Reference, lot and sub-lot extracted from one scan."""

    kind: Literal["decoded"] = "decoded"
    reference: str = Field(..., description="Article reference or GTIN")
    lot: OptionalText = None
    sub_lot: OptionalText = None
    raw_input: str = Field(..., description="Scan string as received")
    encoding: EncodingVariant = EncodingVariant.RAW

    @field_validator("reference")
    @classmethod
    def _normalize_reference(cls, value: str) -> str:
        reference = trim(value)
        if not reference:
            raise ValueError("reference must be non-empty")
        return reference

    @classmethod
    def from_raw(cls, raw_input: str) -> DecodedItem:
        """Treat the whole scan string as the reference, without lot or sub-lot."""
        return cls(reference=raw_input, raw_input=raw_input, encoding=EncodingVariant.RAW)


class NotDecodable(LedgerModel):
    """No supported encoding matched the payload."""

    kind: Literal["not_decodable"] = "not_decodable"
    raw_input: str

    def to_item(self) -> DecodedItem:
        return DecodedItem.from_raw(self.raw_input)


DecodeResult = DecodedItem | NotDecodable
