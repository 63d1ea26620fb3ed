"""Text encoding of rows for ``COPY ... FROM STDIN`` in CSV mode.

Column, row and quote characters are control characters that ordinary
textual and numeric values never contain, so values are appended verbatim
without CSV quoting. The COPY command names the exact same characters so the
server splits the stream the way it was built. An unquoted empty value is
SQL NULL.
"""

from __future__ import annotations

import re
from typing import Sequence, cast

from psycopg import sql
from typing_extensions import LiteralString

from table_writer.constants import (
    COLUMN_DELIMITER,
    ESCAPE_CHARACTER,
    NULL_TOKEN,
    QUOTE_CHARACTER,
    RESERVED_CHARACTERS,
)

# an unquoted line holding only this ends the CSV stream early
END_OF_DATA = "\\."

_PLAIN_NAME = re.compile(r"[A-Za-z_][A-Za-z0-9_$]*\Z")
_NAME_PART = re.compile(r'"(?:[^"]|"")*"|[^.]+')


def Q(s: str) -> sql.SQL:
    """
    Cast a Python str into a LiteralString so that
    psycopg.sql.SQL(...) accepts it without type checker errors.
    """
    return sql.SQL(cast(LiteralString, s))


def _escape_literal(ch: str) -> str:
    """Render one character as a PostgreSQL ``E'\\xNN'`` literal."""
    return "E'\\x%02x'" % ord(ch)


def _fold(name: str) -> str:
    """Apply PostgreSQL identifier rules to one name part."""
    if len(name) >= 2 and name.startswith('"') and name.endswith('"'):
        # quoted: keep case, undouble embedded quotes
        return name[1:-1].replace('""', '"')
    if _PLAIN_NAME.match(name):
        return name.lower()
    return name


def identifier(name: str) -> sql.Identifier:
    """
    Render a possibly dotted name the way the server would read it unquoted.

    Plain names fold to lower case, ``"Quoted"`` parts keep their case, and
    ``schema.table`` becomes a qualified identifier.
    """
    return sql.Identifier(*(_fold(part) for part in _NAME_PART.findall(name)))


def build_copy_command(table: str, columns: Sequence[str]) -> sql.Composed:
    """Return the COPY statement used for every flush of ``table``."""
    opts = ", ".join(
        [
            "FORMAT csv",
            "NULL '%s'" % NULL_TOKEN,
            "DELIMITER " + _escape_literal(COLUMN_DELIMITER),
            "QUOTE " + _escape_literal(QUOTE_CHARACTER),
            "ESCAPE " + _escape_literal(ESCAPE_CHARACTER),
        ]
    )
    return sql.SQL("COPY {tbl} ({cols}) FROM STDIN WITH ({opts})").format(
        tbl=identifier(table),
        cols=sql.SQL(", ").join(identifier(c) for c in columns),
        opts=Q(opts),
    )


def needs_quoting(value: str) -> bool:
    """True if ``value`` must go through :func:`quote_value` to survive COPY."""
    if value in (NULL_TOKEN, END_OF_DATA):
        return True
    return any(ch in RESERVED_CHARACTERS for ch in value)


def quote_value(value: str) -> str:
    """
    Wrap ``value`` in the quote character, escaping embedded quote and
    escape characters. A quoted empty string is stored as ``''``, not NULL.
    """
    escaped = value.replace(ESCAPE_CHARACTER, ESCAPE_CHARACTER * 2).replace(
        QUOTE_CHARACTER, ESCAPE_CHARACTER + QUOTE_CHARACTER
    )
    return QUOTE_CHARACTER + escaped + QUOTE_CHARACTER
