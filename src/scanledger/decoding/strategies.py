"""Decoding strategies for the supported payload encodings.

Each strategy looks at a normalized payload and either returns a
:class:`~scanledger.models.item.DecodedItem` or ``None`` when the
payload is not in its encoding.  :class:`~scanledger.decoding.Gs1Decoder`
tries them in order; the first hit wins.

Supported encodings, in fallback order:

1. Control-separated: ``<GS>02REF<GS>10LOT<GS>04SUB<GS>21``.
2. Glyph-separated: same layout with ``Ê`` (or its mojibake ``ÃŠ``)
   typed in place of the GS byte.
3. Parenthesized: ``(01)GTIN(10)LOT(21)SUB``.
4. Concatenated: ``01`` + 14-digit GTIN, then ``10``/``21`` fields
   with no separator.
"""

from __future__ import annotations

import logging
from typing import Protocol

from scanledger._constants import (
    AI_GTIN,
    AI_LOT,
    AI_REFERENCE,
    AI_SERIAL,
    AI_SUB_LOT,
    FIELD_SEPARATOR,
    FIXED_LENGTH_AIS,
    GTIN_LENGTH,
)
from scanledger.decoding.normalize import (
    controls_to_separator,
    glyph_to_separator,
    has_separator_glyph,
    pad_sub_lot,
    split_segments,
    strip_controls,
)
from scanledger.models._base import trim
from scanledger.models.item import DecodedItem, EncodingVariant

_logger = logging.getLogger(__name__)


class DecodeStrategy(Protocol):
    """One payload encoding."""

    variant: EncodingVariant

    def decode(self, text: str, raw_input: str) -> DecodedItem | None: ...


# ------------------------------------------------------------------
# Separated segments (variants 1 and 2)
# ------------------------------------------------------------------


class _SegmentStrategy:
    """Shared segment reader for the separator-based encodings.

    Every segment starts with a 2-digit AI: ``02`` reference, ``10``
    lot, ``04`` sub-lot.  ``21`` closes the record and is ignored, as is
    any AI we do not know.  A later segment overrides an earlier one.
    """

    variant: EncodingVariant

    def __init__(self, *, sub_lot_width: int) -> None:
        self._sub_lot_width = sub_lot_width

    def _read_segments(self, segments: list[str], raw_input: str) -> DecodedItem | None:
        reference: str | None = None
        lot: str | None = None
        sub_lot: str | None = None

        for segment in segments:
            ai, value = segment[:2], segment[2:]
            if ai == AI_REFERENCE:
                reference = trim(value)
            elif ai == AI_LOT:
                lot = trim(value)
            elif ai == AI_SUB_LOT:
                sub_lot = pad_sub_lot(value, self._sub_lot_width)

        if not reference:
            return None
        return DecodedItem(
            reference=reference,
            lot=lot,
            sub_lot=sub_lot,
            raw_input=raw_input,
            encoding=self.variant,
        )


class ControlSeparatedStrategy(_SegmentStrategy):
    """Segments separated by control bytes; runs of controls count once.

    A payload without any separator is a single segment.  Payloads
    carrying the substitute glyph belong to :class:`GlyphSeparatedStrategy`.
    """

    variant = EncodingVariant.CONTROL_SEPARATED

    def decode(self, text: str, raw_input: str) -> DecodedItem | None:
        if has_separator_glyph(text):
            return None
        return self._read_segments(split_segments(controls_to_separator(text)), raw_input)


class GlyphSeparatedStrategy(_SegmentStrategy):
    """Segments separated by the glyph some firmware types instead of GS."""

    variant = EncodingVariant.GLYPH_SEPARATED

    def decode(self, text: str, raw_input: str) -> DecodedItem | None:
        if not has_separator_glyph(text):
            return None
        return self._read_segments(split_segments(glyph_to_separator(text)), raw_input)


# ------------------------------------------------------------------
# Parenthesized AIs (variant 3)
# ------------------------------------------------------------------


def _parse_parenthesized(text: str) -> dict[str, str]:
    """Read ``(AI)value`` pairs left to right.

    The AI is whatever sits between the parentheses; the value runs to
    the next ``(`` or the end.  Reading stops at the first malformed
    pair.  The first occurrence of an AI wins.
    """
    fields: dict[str, str] = {}
    pos = 0
    while pos < len(text) and text[pos] == "(":
        close = text.find(")", pos + 1)
        if close == -1:
            break
        ai = text[pos + 1 : close].strip()
        if not ai.isdigit():
            break
        end = text.find("(", close + 1)
        if end == -1:
            end = len(text)
        fields.setdefault(ai, strip_controls(text[close + 1 : end]))
        pos = end
    return fields


class ParenthesizedStrategy:
    """Human-readable ``(01)GTIN(10)LOT(21)SUB`` payloads.

    Requires AI ``01``, which becomes the reference.
    """

    variant = EncodingVariant.PARENTHESIZED

    def decode(self, text: str, raw_input: str) -> DecodedItem | None:
        if not text.startswith("("):
            return None
        fields = _parse_parenthesized(text)
        reference = fields.get(AI_GTIN)
        if not reference:
            return None
        return DecodedItem(
            reference=reference,
            lot=fields.get(AI_LOT),
            sub_lot=fields.get(AI_SERIAL),
            raw_input=raw_input,
            encoding=self.variant,
        )


# ------------------------------------------------------------------
# Concatenated fixed/variable fields (variant 4)
# ------------------------------------------------------------------


class ConcatenatedStrategy:
    """Flat ``01`` + GTIN payloads with trailing ``10``/``21`` fields.

    The GTIN is fixed length.  A lot has no length of its own: it runs
    to the next separator if the payload has one, otherwise to the first
    ``21`` after it, otherwise to the end.  Fields are read left to right,
    so a lot containing ``21`` needs a separator to survive intact.
    Whatever follows ``21`` is the sub-lot; a bare trailing ``21`` is
    only a terminator.  Date AIs (``11``, ``13``, ``15``, ``17``) are
    skipped.  Parsing stops at the first unknown AI and keeps what was
    read so far.
    """

    variant = EncodingVariant.CONCATENATED

    def decode(self, text: str, raw_input: str) -> DecodedItem | None:
        flat = controls_to_separator(text).lstrip(FIELD_SEPARATOR)
        gtin_end = len(AI_GTIN) + GTIN_LENGTH
        if not flat.startswith(AI_GTIN):
            return None
        gtin = flat[len(AI_GTIN) : gtin_end]
        if len(gtin) != GTIN_LENGTH or not gtin.isdigit():
            return None

        lot: str | None = None
        sub_lot: str | None = None
        pos = gtin_end
        while pos + 2 <= len(flat):
            if flat[pos] == FIELD_SEPARATOR:
                pos += 1
                continue
            ai = flat[pos : pos + 2]
            start = pos + 2
            if ai in FIXED_LENGTH_AIS:
                end = start + FIXED_LENGTH_AIS[ai]
                if end > len(flat) or not flat[start:end].isdigit():
                    break
                pos = end
            elif ai == AI_LOT:
                end = flat.find(FIELD_SEPARATOR, start)
                if end == -1:
                    end = flat.find(AI_SERIAL, start)
                if end == -1:
                    end = len(flat)
                lot = flat[start:end]
                pos = end
            elif ai == AI_SERIAL:
                end = flat.find(FIELD_SEPARATOR, start)
                if end == -1:
                    end = len(flat)
                sub_lot = flat[start:end]
                pos = end
            else:
                _logger.debug("Concatenated payload: stopping at unknown AI %s", ai)
                break

        return DecodedItem(
            reference=gtin,
            lot=lot,
            sub_lot=sub_lot,
            raw_input=raw_input,
            encoding=self.variant,
        )


def default_strategies(*, sub_lot_width: int) -> tuple[DecodeStrategy, ...]:
    """The four supported encodings in fallback order."""
    return (
        ControlSeparatedStrategy(sub_lot_width=sub_lot_width),
        GlyphSeparatedStrategy(sub_lot_width=sub_lot_width),
        ParenthesizedStrategy(),
        ConcatenatedStrategy(),
    )
