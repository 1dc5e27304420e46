"""Inventory lines and their lookup keys."""

from __future__ import annotations

from datetime import datetime
from uuid import uuid4

from pydantic import Field, PositiveInt, field_validator

from scanledger._constants import KEY_DELIMITER
from scanledger.models._base import LedgerModel, OptionalText, trim, utcnow

_KEY_ESCAPES = (("%", "%25"), (KEY_DELIMITER, "%7C"))


def _key_part(value: str | None, *, fold_case: bool) -> str:
    text = trim(value)
    if fold_case:
        text = text.upper()
    for char, escaped in _KEY_ESCAPES:
        text = text.replace(char, escaped)
    return text


def make_line_key(location: str, reference: str, lot: str | None = None, sub_lot: str | None = None) -> str:
    """Build the aggregation key for a line.

    Location and reference are case-folded; lot and sub-lot are kept as
    given.  ``%`` and the delimiter are percent-escaped inside each part,
    so the delimiter only ever separates fields.

    >>> make_line_key("a1", "ref", "L5", None)
    'A1|REF|L5|'
    """
    return KEY_DELIMITER.join(
        (
            _key_part(location, fold_case=True),
            _key_part(reference, fold_case=True),
            _key_part(lot, fold_case=False),
            _key_part(sub_lot, fold_case=False),
        )
    )


def new_line_id() -> str:
    return uuid4().hex


class InventoryLine(LedgerModel):
    """One aggregated row of the inventory, as held by the store."""

    id: str = Field(default_factory=new_line_id)
    key: str
    location: str
    reference: str
    lot: OptionalText = None
    sub_lot: OptionalText = None
    quantity: PositiveInt = 1
    manual: bool = False
    last_modified: datetime = Field(default_factory=utcnow)

    @field_validator("location", "reference")
    @classmethod
    def _require_text(cls, value: str) -> str:
        text = trim(value)
        if not text:
            raise ValueError("must be non-empty")
        return text

    @classmethod
    def create(
        cls,
        *,
        location: str,
        reference: str,
        lot: str | None = None,
        sub_lot: str | None = None,
        manual: bool = False,
        now: datetime | None = None,
    ) -> InventoryLine:
        """Build a fresh line with quantity 1 and its derived key."""
        return cls(
            key=make_line_key(location, reference, lot, sub_lot),
            location=location,
            reference=reference,
            lot=lot,
            sub_lot=sub_lot,
            manual=manual,
            last_modified=now or utcnow(),
        )

    def incremented(self, *, manual: bool, now: datetime | None = None) -> InventoryLine:
        """Return a copy with quantity + 1; the manual flag is sticky."""
        return self.model_copy(
            update={
                "quantity": self.quantity + 1,
                "manual": self.manual or manual,
                "last_modified": now or utcnow(),
            }
        )
