from __future__ import annotations

from .buffer import RowBuffer
from .copying import CopySink, PsycopgCopySink, open_connection
from .cursor import ColumnCursor
from .encoding import build_copy_command, needs_quoting, quote_value
from .retry import retry_logic

__all__ = [
    "RowBuffer",
    "CopySink",
    "PsycopgCopySink",
    "open_connection",
    "ColumnCursor",
    "build_copy_command",
    "needs_quoting",
    "quote_value",
    "retry_logic",
]
