"""Column/row position of the writer."""

from __future__ import annotations


class ColumnCursor:
    """Tracks which column of the current row receives appended text."""

    __slots__ = ("_column", "_last")

    def __init__(self, column_count: int) -> None:
        if column_count < 1:
            raise ValueError("column_count must be >= 1")
        self._last = column_count - 1
        self._column = 0

    @property
    def column(self) -> int:
        return self._column

    @property
    def last_column(self) -> int:
        return self._last

    @property
    def first(self) -> bool:
        return self._column == 0

    @property
    def last(self) -> bool:
        return self._column == self._last

    def advance(self) -> bool:
        """Move past the current column.

        Returns ``True`` when this completed the row (the cursor is back at
        column 0), ``False`` when it only moved to the next column.
        """
        if self._column == self._last:
            self._column = 0
            return True
        self._column += 1
        return False

    def __repr__(self) -> str:
        return f"<ColumnCursor column={self._column}/{self._last}>"
