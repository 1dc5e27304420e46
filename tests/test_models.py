"""Tests for pydantic models."""

from __future__ import annotations

from datetime import UTC, datetime

import pytest
from pydantic import ValidationError

from scanledger.export import EXPORT_COLUMNS, ExportRow, export_rows
from scanledger.models.item import DecodedItem, NotDecodable
from scanledger.models.line import InventoryLine
from scanledger.models.scan import ScanEvent
from scanledger.models.session import SessionContext, SessionState


class TestDecodedItem:
    def test_blank_lot_and_sub_lot_become_none(self) -> None:
        item = DecodedItem(reference="R", lot="", sub_lot="  ", raw_input="R")
        assert item.lot is None
        assert item.sub_lot is None

    def test_reference_required(self) -> None:
        with pytest.raises(ValidationError):
            DecodedItem(reference="  ", raw_input="x")

    def test_frozen(self) -> None:
        item = DecodedItem(reference="R", raw_input="R")
        with pytest.raises(ValidationError):
            item.reference = "S"  # type: ignore[misc]

    def test_not_decodable_variant_tag(self) -> None:
        assert NotDecodable(raw_input="X").kind == "not_decodable"
        assert DecodedItem(reference="R", raw_input="R").kind == "decoded"


class TestInventoryLine:
    def test_create_derives_key(self) -> None:
        line = InventoryLine.create(location="a1", reference="ref", lot="L1")
        assert line.key == "A1|REF|L1|"
        assert line.quantity == 1
        assert line.location == "a1"

    def test_incremented_is_a_copy(self) -> None:
        line = InventoryLine.create(location="A1", reference="R")
        now = datetime(2026, 6, 1, tzinfo=UTC)

        bumped = line.incremented(manual=True, now=now)

        assert line.quantity == 1
        assert bumped.quantity == 2
        assert bumped.id == line.id
        assert bumped.manual is True
        assert bumped.last_modified == now

    def test_quantity_must_be_positive(self) -> None:
        with pytest.raises(ValidationError):
            InventoryLine(key="A|R||", location="A", reference="R", quantity=0)


class TestScanEvent:
    def test_text_trimmed(self) -> None:
        assert ScanEvent(text="  A-01\r\n").text == "A-01"

    def test_blank_text_rejected(self) -> None:
        with pytest.raises(ValidationError):
            ScanEvent(text="   ")


class TestSessionContext:
    def test_reset(self) -> None:
        context = SessionContext(
            state=SessionState.FINISHED,
            current_location="A1",
            last_written_line_id="abc",
            last_scan="FIN",
        )

        context.reset()

        assert context == SessionContext()


class TestExportRow:
    def test_columns_and_blank_fields(self) -> None:
        line = InventoryLine.create(location="A1", reference="R", sub_lot="00007")
        (row,) = export_rows([line])

        record = row.as_record()

        assert tuple(record) == EXPORT_COLUMNS
        assert record["LOT"] == ""
        assert record["SUB-LOT"] == "00007"
        assert record["QUANTITY"] == 1

    def test_build_by_column_name(self) -> None:
        row = ExportRow.model_validate({"LOCATION": "A", "REFERENCE": "R", "QUANTITY": 3})
        assert row.quantity == 3
        assert row.lot == ""
