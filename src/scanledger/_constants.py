"""Internal constants shared across the library."""

# ------------------------------------------------------------------
# Application identifiers
# ------------------------------------------------------------------

AI_GTIN = "01"
AI_REFERENCE = "02"
AI_SUB_LOT = "04"
AI_LOT = "10"
AI_SERIAL = "21"

#: Fixed-length date AIs that may appear between GTIN and lot in a
#: concatenated payload (YYMMDD, 6 digits).
FIXED_LENGTH_AIS: dict[str, int] = {"11": 6, "13": 6, "15": 6, "17": 6}

GTIN_LENGTH = 14

# ------------------------------------------------------------------
# Separators and scanner artefacts
# ------------------------------------------------------------------

#: Internal field separator used once a payload has been normalized.
FIELD_SEPARATOR = "\x1d"

#: Glyph some scanner firmware types instead of the GS control byte.
SEPARATOR_GLYPH = "\u00ca"  # Ê

#: UTF-8 bytes of the glyph decoded as Latin-1 / CP1252.
SEPARATOR_GLYPH_MOJIBAKE = "\u00c3\u0160"  # ÃŠ
MOJIBAKE_STRAY = "\u00c2"  # Â

# ------------------------------------------------------------------
# Ledger keys
# ------------------------------------------------------------------

KEY_DELIMITER = "|"

# ------------------------------------------------------------------
# Default command vocabulary
# ------------------------------------------------------------------

DEFAULT_IGNORED_PREFIX = "DEMO"
DEFAULT_FINISH_COMMANDS: tuple[str, ...] = ("FIN", "FIN DE INVENTARIO", "FINISH")
DEFAULT_CLOSE_LOCATION_COMMANDS: tuple[str, ...] = ("SIGUIENTE", "FIN UBI", "FIN UBICACION", "NEXT")
DEFAULT_LOCATION_PREFIXES: tuple[str, ...] = ("LOC:", "UBI:")
LOCATION_PREFIX_LENGTH = 4

DEFAULT_SUB_LOT_WIDTH = 5
