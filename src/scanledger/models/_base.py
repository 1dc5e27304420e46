"""Base model for scanledger data objects.

Every immutable record (decoded items, inventory lines, scan events)
inherits from :class:`LedgerModel`, which provides:

* ``frozen=True`` so a produced value cannot be edited in place;
  updates go through ``model_copy(update=...)``.
* ``extra="forbid"`` so a typo in a field name fails loudly.
* :data:`OptionalText`, an annotated type that turns blank strings
  into ``None``.  A lot or sub-lot that decodes to ``""`` is the same
  thing as one that is absent.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Annotated, Any

from pydantic import BaseModel, BeforeValidator, ConfigDict

# Python's str.strip() also eats the GS/RS/US control bytes (0x1c-0x1f),
# which are field separators in scanner payloads.  Trim only these.
_TRIM_CHARS = " \t\n\r\x0b\x0c\u00a0\ufeff"


def trim(value: str | None) -> str:
    """Strip surrounding whitespace but keep separator control bytes."""
    if not value:
        return ""
    return value.strip(_TRIM_CHARS)


def utcnow() -> datetime:
    return datetime.now(UTC)


def blank_to_none(value: Any) -> Any:
    """Return ``None`` for ``None`` or blank strings, else the trimmed string."""
    if value is None:
        return None
    if isinstance(value, str):
        return trim(value) or None
    return value


OptionalText = Annotated[str | None, BeforeValidator(blank_to_none)]
"""Annotated type that normalizes blank strings to ``None``."""


class LedgerModel(BaseModel):
    """Base for immutable scanledger records."""

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        populate_by_name=True,
    )
