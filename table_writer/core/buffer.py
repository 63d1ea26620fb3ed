"""Two-region write buffer: complete rows followed by the partial row."""

from __future__ import annotations

from table_writer.constants import ENCODING


class RowBuffer:
    """
    Growable byte buffer with a watermark at the end of the last complete row.

    ``data[:watermark]`` holds zero or more complete, delimiter-terminated
    rows; ``data[watermark:]`` is the row still being written. The watermark
    only moves forward, at row boundaries, until :meth:`drop_complete`
    discards the complete region.
    """

    __slots__ = ("_data", "_watermark", "_rows")

    def __init__(self) -> None:
        self._data = bytearray()
        self._watermark = 0
        self._rows = 0

    def __len__(self) -> int:
        return len(self._data)

    @property
    def watermark(self) -> int:
        return self._watermark

    @property
    def complete_rows(self) -> int:
        """Number of complete rows below the watermark."""
        return self._rows

    @property
    def partial_size(self) -> int:
        return len(self._data) - self._watermark

    def append_text(self, text: str) -> None:
        self._data += text.encode(ENCODING)

    def end_row(self, row_delimiter: str) -> None:
        """Terminate the partial row and move the watermark past it."""
        self._data += row_delimiter.encode(ENCODING)
        self._watermark = len(self._data)
        self._rows += 1

    def complete(self) -> bytes:
        """Return a copy of the complete-row region."""
        return bytes(self._data[: self._watermark])

    def drop_complete(self) -> None:
        """Discard the complete-row region, keeping only the partial row."""
        if self._watermark == 0:
            return
        # compact: the partial tail moves into a fresh buffer
        self._data = self._data[self._watermark:]
        self._watermark = 0
        self._rows = 0

    def __bytes__(self) -> bytes:
        return bytes(self._data)

    def __repr__(self) -> str:
        return (
            f"<RowBuffer size={len(self._data)} watermark={self._watermark} "
            f"rows={self._rows}>"
        )
