"""Tests for payload normalization and the decoding strategy chain."""

from __future__ import annotations

import pytest

from scanledger.decoding import (
    ConcatenatedStrategy,
    ControlSeparatedStrategy,
    GlyphSeparatedStrategy,
    Gs1Decoder,
    ParenthesizedStrategy,
    decode,
)
from scanledger.decoding.normalize import (
    controls_to_separator,
    normalize_payload,
    pad_sub_lot,
    repair_mojibake,
)
from scanledger.exceptions import DecoderRuntimeFault
from scanledger.models.item import DecodedItem, EncodingVariant, NotDecodable

# ------------------------------------------------------------------
# Normalization
# ------------------------------------------------------------------


class TestNormalize:
    def test_symbology_prefix_stripped(self) -> None:
        assert normalize_payload("  ]C102REF  ") == "02REF"

    def test_trim_keeps_group_separator(self) -> None:
        assert normalize_payload("\x1d02REF\x1d") == "\x1d02REF\x1d"

    def test_control_runs_collapse(self) -> None:
        assert controls_to_separator("02A\x1d\x1d\x1e10B") == "02A\x1d10B"

    def test_mojibake_repaired(self) -> None:
        assert repair_mojibake("02REFÃŠ10L") == "02REFÊ10L"

    def test_pad_sub_lot_numeric(self) -> None:
        assert pad_sub_lot("7", 5) == "00007"
        assert pad_sub_lot("123456", 5) == "123456"

    def test_pad_sub_lot_non_numeric_unchanged(self) -> None:
        assert pad_sub_lot("A7", 5) == "A7"

    def test_pad_sub_lot_blank_is_absent(self) -> None:
        assert pad_sub_lot("  ", 5) is None
        assert pad_sub_lot(None, 5) is None


# ------------------------------------------------------------------
# Individual strategies
# ------------------------------------------------------------------


class TestControlSeparated:
    def test_reference_lot_and_padded_sub_lot(self) -> None:
        result = decode("\x1d02REF100\x1d10L5\x1d04007\x1d21")
        assert isinstance(result, DecodedItem)
        assert result.reference == "REF100"
        assert result.lot == "L5"
        assert result.sub_lot == "00007"
        assert result.encoding == EncodingVariant.CONTROL_SEPARATED

    def test_raw_input_preserved(self) -> None:
        raw = "\x1d02REF100\x1d10L5"
        result = decode(raw)
        assert isinstance(result, DecodedItem)
        assert result.raw_input == raw

    def test_non_numeric_sub_lot_passes_through(self) -> None:
        result = decode("02REF\x1d04AB1")
        assert isinstance(result, DecodedItem)
        assert result.sub_lot == "AB1"

    def test_empty_sub_lot_is_absent(self) -> None:
        result = decode("02REF\x1d10L1\x1d04\x1d21")
        assert isinstance(result, DecodedItem)
        assert result.sub_lot is None

    def test_single_segment_without_separator(self) -> None:
        result = decode("]C102REF100")
        assert isinstance(result, DecodedItem)
        assert result.reference == "REF100"
        assert result.lot is None

    def test_missing_reference_not_matched(self) -> None:
        strategy = ControlSeparatedStrategy(sub_lot_width=5)
        assert strategy.decode("10LOT\x1d04001", "10LOT\x1d04001") is None

    def test_declines_glyph_payloads(self) -> None:
        strategy = ControlSeparatedStrategy(sub_lot_width=5)
        assert strategy.decode("02REFÊ10L", "02REFÊ10L") is None


class TestGlyphSeparated:
    def test_glyph_separator(self) -> None:
        result = decode("Ê02REF9Ê10LOTÊ0442")
        assert isinstance(result, DecodedItem)
        assert result.reference == "REF9"
        assert result.lot == "LOT"
        assert result.sub_lot == "00042"
        assert result.encoding == EncodingVariant.GLYPH_SEPARATED

    def test_mojibake_glyph_separator(self) -> None:
        result = decode("ÃŠ02REF9ÃŠ10LOT")
        assert isinstance(result, DecodedItem)
        assert result.reference == "REF9"
        assert result.lot == "LOT"

    def test_not_applicable_without_glyph(self) -> None:
        strategy = GlyphSeparatedStrategy(sub_lot_width=5)
        assert strategy.decode("02REF\x1d10L", "02REF\x1d10L") is None


class TestParenthesized:
    def test_gtin_lot_and_serial(self) -> None:
        result = decode("(01)12345678901234(10)LOTA(21)7")
        assert isinstance(result, DecodedItem)
        assert result.reference == "12345678901234"
        assert result.lot == "LOTA"
        assert result.sub_lot == "7"
        assert result.encoding == EncodingVariant.PARENTHESIZED

    def test_requires_ai_01(self) -> None:
        strategy = ParenthesizedStrategy()
        assert strategy.decode("(10)LOTA(21)7", "(10)LOTA(21)7") is None

    def test_unknown_ais_ignored(self) -> None:
        result = decode("(01)12345678901234(17)261231(10)B2")
        assert isinstance(result, DecodedItem)
        assert result.lot == "B2"
        assert result.sub_lot is None


class TestConcatenated:
    def test_gtin_only(self) -> None:
        result = decode("0112345678901234")
        assert isinstance(result, DecodedItem)
        assert result.reference == "12345678901234"
        assert result.lot is None
        assert result.encoding == EncodingVariant.CONCATENATED

    def test_lot_with_trailing_terminator(self) -> None:
        result = decode("011234567890123410LOTA21")
        assert isinstance(result, DecodedItem)
        assert result.lot == "LOTA"
        assert result.sub_lot is None

    def test_lot_and_sub_lot(self) -> None:
        result = decode("011234567890123410LOTA21XYZ")
        assert isinstance(result, DecodedItem)
        assert result.lot == "LOTA"
        assert result.sub_lot == "XYZ"

    def test_date_ai_skipped(self) -> None:
        result = decode("01123456789012341726123110B7")
        assert isinstance(result, DecodedItem)
        assert result.lot == "B7"

    def test_stops_at_unknown_ai(self) -> None:
        result = decode("011234567890123499JUNK")
        assert isinstance(result, DecodedItem)
        assert result.reference == "12345678901234"
        assert result.lot is None

    def test_lot_ends_at_separator(self) -> None:
        result = decode("0112345678901234\x1d10LOT21A\x1d21S1")
        assert isinstance(result, DecodedItem)
        assert result.lot == "LOT21A"
        assert result.sub_lot == "S1"

    def test_lot_ends_at_first_serial_ai(self) -> None:
        result = decode("011234567890123410L5212101")
        assert isinstance(result, DecodedItem)
        assert result.lot == "L5"
        assert result.sub_lot == "2101"

    def test_short_gtin_rejected(self) -> None:
        strategy = ConcatenatedStrategy()
        assert strategy.decode("01123456", "01123456") is None


# ------------------------------------------------------------------
# Chain
# ------------------------------------------------------------------


class TestDecoderChain:
    def test_plain_code_not_decodable(self) -> None:
        result = decode("PLAINCODE123")
        assert isinstance(result, NotDecodable)
        assert result.raw_input == "PLAINCODE123"

    def test_not_decodable_degrades_to_raw_reference(self) -> None:
        result = decode("PLAINCODE123")
        assert isinstance(result, NotDecodable)
        item = result.to_item()
        assert item.reference == "PLAINCODE123"
        assert item.lot is None
        assert item.sub_lot is None
        assert item.encoding == EncodingVariant.RAW

    def test_blank_payload_not_decodable(self) -> None:
        assert isinstance(decode("   "), NotDecodable)

    def test_default_order(self) -> None:
        variants = [strategy.variant for strategy in Gs1Decoder().strategies]
        assert variants == [
            EncodingVariant.CONTROL_SEPARATED,
            EncodingVariant.GLYPH_SEPARATED,
            EncodingVariant.PARENTHESIZED,
            EncodingVariant.CONCATENATED,
        ]

    def test_custom_sub_lot_width(self) -> None:
        result = Gs1Decoder(sub_lot_width=3).decode("02R\x1d047")
        assert isinstance(result, DecodedItem)
        assert result.sub_lot == "007"

    def test_strategy_exception_reported_as_fault(self) -> None:
        class _Exploding:
            variant = EncodingVariant.CONTROL_SEPARATED

            def decode(self, text: str, raw_input: str) -> DecodedItem | None:
                raise IndexError("boom")

        decoder = Gs1Decoder(strategies=[_Exploding()])
        with pytest.raises(DecoderRuntimeFault) as excinfo:
            decoder.decode("02REF")
        assert excinfo.value.strategy == "control_separated"
        assert isinstance(excinfo.value.__cause__, IndexError)
