from __future__ import annotations

# ──────────────────────────────────────────────────────────────────────────────
# Reserved characters of the COPY text stream
# ──────────────────────────────────────────────────────────────────────────────
COLUMN_DELIMITER: str = "\x02"   # STX
ROW_DELIMITER: str    = "\n"     # COPY only accepts newline row terminators
QUOTE_CHARACTER: str  = "\x03"   # ETX
ESCAPE_CHARACTER: str = "\\"
NULL_TOKEN: str       = ""

# CSV COPY also refuses an unquoted carriage return
RESERVED_CHARACTERS: frozenset[str] = frozenset(
    (COLUMN_DELIMITER, ROW_DELIMITER, QUOTE_CHARACTER, "\r")
)

# ──────────────────────────────────────────────────────────────────────────────
# Connection defaults
# ──────────────────────────────────────────────────────────────────────────────
DEFAULT_HOST: str = "localhost:5432"
DEFAULT_PORT: int = 5432
DEFAULT_CAPACITY: int = 64 * 1024

ENCODING: str = "utf-8"
