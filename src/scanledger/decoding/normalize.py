"""Payload normalization helpers.

Centralizes the scanner artefact repairs shared by the decoding
strategies: symbology prefixes, mojibake, substituted separator glyphs
and control-byte separators.
"""

from __future__ import annotations

import re

from scanledger._constants import (
    FIELD_SEPARATOR,
    MOJIBAKE_STRAY,
    SEPARATOR_GLYPH,
    SEPARATOR_GLYPH_MOJIBAKE,
)
from scanledger.models._base import trim

# Symbology identifier prefixes that scanners prepend (ISO/IEC 15424), e.g. ]C1, ]d2.
_SYMBOLOGY_PREFIX = re.compile(r"^\][A-Za-z]\d")

_CONTROL_RUN = re.compile(r"[\x00-\x1f]+")


def strip_symbology_prefix(text: str) -> str:
    return _SYMBOLOGY_PREFIX.sub("", text, count=1)


def normalize_payload(raw: str) -> str:
    """Trim and drop a leading symbology identifier."""
    return trim(strip_symbology_prefix(trim(raw)))


def has_control_separator(text: str) -> bool:
    return _CONTROL_RUN.search(text) is not None


def repair_mojibake(text: str) -> str:
    """Recover the separator glyph from its UTF-8-read-as-Latin-1 form."""
    return text.replace(SEPARATOR_GLYPH_MOJIBAKE, SEPARATOR_GLYPH).replace(MOJIBAKE_STRAY, "")


def has_separator_glyph(text: str) -> bool:
    return SEPARATOR_GLYPH in text or SEPARATOR_GLYPH_MOJIBAKE in text


def controls_to_separator(text: str) -> str:
    """Collapse every run of control bytes (0-31) into one separator."""
    return _CONTROL_RUN.sub(FIELD_SEPARATOR, text)


def glyph_to_separator(text: str) -> str:
    return controls_to_separator(repair_mojibake(text).replace(SEPARATOR_GLYPH, FIELD_SEPARATOR))


def split_segments(text: str) -> list[str]:
    """Split a normalized payload on the separator, dropping empty segments."""
    return [segment for segment in text.split(FIELD_SEPARATOR) if segment]


def strip_controls(text: str) -> str:
    return trim(_CONTROL_RUN.sub("", text))


def pad_sub_lot(value: str | None, width: int) -> str | None:
    """Left-pad numeric sub-lots with zeros; pass anything else through.

    >>> pad_sub_lot("7", 5)
    '00007'
    >>> pad_sub_lot("A7", 5)
    'A7'
    """
    text = trim(value)
    if not text:
        return None
    if text.isascii() and text.isdigit():
        return text.zfill(width)
    return text
