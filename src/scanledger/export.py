"""Export rows handed to the export collaborator.

The core only shapes rows; turning them into a spreadsheet or CSV file
is the sink's job.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from typing import Any, Protocol

from pydantic import Field

from scanledger.models._base import LedgerModel
from scanledger.models.line import InventoryLine

EXPORT_COLUMNS: tuple[str, ...] = ("LOCATION", "REFERENCE", "LOT", "SUB-LOT", "QUANTITY")


class ExportRow(LedgerModel):
    """One exported line. Absent lot/sub-lot export as empty strings."""

    location: str = Field(alias="LOCATION")
    reference: str = Field(alias="REFERENCE")
    lot: str = Field(default="", alias="LOT")
    sub_lot: str = Field(default="", alias="SUB-LOT")
    quantity: int = Field(alias="QUANTITY")

    @classmethod
    def from_line(cls, line: InventoryLine) -> ExportRow:
        return cls(
            location=line.location,
            reference=line.reference,
            lot=line.lot or "",
            sub_lot=line.sub_lot or "",
            quantity=line.quantity,
        )

    def as_record(self) -> dict[str, Any]:
        """Column-name keyed dict, in :data:`EXPORT_COLUMNS` order."""
        return self.model_dump(by_alias=True)


class ExportSink(Protocol):
    """Export collaborator."""

    def export_rows(self, rows: Sequence[ExportRow]) -> None: ...


def export_rows(lines: Iterable[InventoryLine]) -> list[ExportRow]:
    return [ExportRow.from_line(line) for line in lines]
