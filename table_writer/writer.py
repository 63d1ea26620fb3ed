"""
Buffered row writer that appends to a PostgreSQL table through COPY.

A row is built by appending text to the current column and calling
:meth:`TableWriter.next` to move to the next column, or to the next row after
the last column. Complete rows are buffered and sent either when
:meth:`TableWriter.flush` is called or when the buffer grows past its
capacity. Only complete rows are ever sent, and each flush is one commit.
Note that the last column of a row is only complete once ``next()`` has
moved past it.

Example::

    with TableWriter(database="mydb", table="events",
                     columns=["id", "created_at"], capacity=64 * 1024) as w:
        w.append("1").next()
        w.append("2024-01-01 00:00:00")
        w.next()
        w.flush()
"""

from __future__ import annotations

import logging
from time import perf_counter
from types import TracebackType
from typing import Any, Iterable, Optional, Sequence, Type, cast

import psycopg

from table_writer.config import WriterConfig, parse_host, validate_settings
from table_writer.constants import COLUMN_DELIMITER, ROW_DELIMITER
from table_writer.core.buffer import RowBuffer
from table_writer.core.copying import CopySink, PsycopgCopySink, open_connection
from table_writer.core.cursor import ColumnCursor
from table_writer.core.encoding import build_copy_command, needs_quoting, quote_value
from table_writer.errors import (
    RowStateError,
    TableWriterError,
    TransportError,
    WriterClosedError,
)
from table_writer.telemetry.metrics import WriterMetrics

logger = logging.getLogger(__name__)


class TableWriter:
    """
    Appends rows to ``table`` column by column.

    Parameters
    ----------
    host:
        ``host[:port]`` of the server. Defaults to ``localhost:5432``.
    database:
        Database name.
    user, password:
        Passed through to the connection when given.
    table:
        Table to write to, optionally schema qualified (``schema.table``).
    columns:
        Names and order of the columns each row fills.
    capacity:
        Buffer size in bytes; once exceeded after ``next()`` the complete
        rows are flushed. ``0`` flushes after every row.
    sink:
        Copy transport to use instead of opening a connection.
    """

    def __init__(
        self,
        host: Optional[str] = None,
        database: Optional[str] = None,
        user: Optional[str] = None,
        password: Optional[str] = None,
        table: Optional[str] = None,
        columns: Optional[Sequence[str]] = None,
        capacity: Optional[int] = None,
        *,
        sink: Optional[CopySink] = None,
    ) -> None:
        validate_settings(database, table, columns, capacity)
        host_name, port = parse_host(host)

        self.table = cast(str, table)
        self.columns: tuple[str, ...] = tuple(cast(Sequence[str], columns))
        self.capacity = cast(int, capacity)
        self.metrics = WriterMetrics()

        self._command = build_copy_command(self.table, self.columns)
        self._cursor = ColumnCursor(len(self.columns))
        self._buffer = RowBuffer()
        self._closed = False

        if sink is None:
            sink = PsycopgCopySink(
                open_connection(host_name, port, database or "", user, password)
            )
        self._sink = sink
        logger.debug(
            "Writer for %s opened (%d columns, capacity %d bytes)",
            table,
            len(self.columns),
            capacity,
        )

    @classmethod
    def from_config(
        cls, config: WriterConfig, *, sink: Optional[CopySink] = None
    ) -> "TableWriter":
        return cls(
            host=config.host,
            database=config.database,
            user=config.user,
            password=config.password,
            table=config.table,
            columns=config.columns,
            capacity=config.capacity,
            sink=sink,
        )

    # ---------------------------------------------- #
    # Appending                                       #
    # ---------------------------------------------- #
    def append(
        self, value: str, start: Optional[int] = None, end: Optional[int] = None
    ) -> "TableWriter":
        """
        Append text to the current column value.

        With ``start``/``end`` only ``value[start:end]`` is appended; indices
        outside ``0..len(value)`` or ``start > end`` raise ``IndexError``. The text
        is written verbatim; see :func:`~table_writer.core.encoding.quote_value`
        for values that may contain reserved characters.
        """
        self._check_open()
        if start is not None or end is not None:
            lo = 0 if start is None else start
            hi = len(value) if end is None else end
            if not 0 <= lo <= hi <= len(value):
                raise IndexError(
                    f"append range [{lo}, {hi}) outside 0..{len(value)}"
                )
            value = value[lo:hi]
        self._buffer.append_text(value)
        return self

    def next(self) -> int:
        """
        Move to the next column, or to the first column of the next row.

        Returns the column number moved to; ``0`` means a row was completed.
        The buffer is flushed when it now exceeds its capacity, in which case
        a :class:`~table_writer.errors.TransportError` may be raised after
        the move has been recorded.
        """
        self._check_open()
        if self._cursor.advance():
            self._buffer.end_row(ROW_DELIMITER)
        else:
            self._buffer.append_text(COLUMN_DELIMITER)

        if self._buffer.watermark > 0 and len(self._buffer) > self.capacity:
            logger.debug(
                "Buffer at %d bytes exceeds capacity %d; flushing",
                len(self._buffer),
                self.capacity,
            )
            self.metrics.implicit_flushes += 1
            self.flush()

        return self._cursor.column

    def write_row(self, values: Sequence[Any]) -> None:
        """Append a complete row. ``None`` is NULL; other values use ``str()``."""
        if not self._cursor.first:
            raise RowStateError(
                f"cannot write a whole row at column {self._cursor.column}"
            )
        if len(values) != len(self.columns):
            raise ValueError(
                f"expected {len(self.columns)} values, got {len(values)}"
            )
        for value in values:
            if value is not None:
                text = str(value)
                self.append(quote_value(text) if needs_quoting(text) else text)
            self.next()

    def write_rows(self, rows: Iterable[Sequence[Any]]) -> int:
        count = 0
        for row in rows:
            self.write_row(row)
            count += 1
        return count

    # ---------------------------------------------- #
    # Position                                        #
    # ---------------------------------------------- #
    def first_column(self) -> bool:
        return self._cursor.first

    def last_column(self) -> bool:
        return self._cursor.last

    @property
    def column_no(self) -> int:
        return self._cursor.column

    def get_column_no(self) -> int:
        return self._cursor.column

    # ---------------------------------------------- #
    # Flushing                                        #
    # ---------------------------------------------- #
    def flush(self) -> int:
        """
        Send all complete rows in one COPY and commit them.

        Returns the number of rows committed. Does nothing while no row is
        complete. On failure the buffer is left as it was, so calling
        ``flush()`` again resends the same rows.
        """
        self._check_open()
        if self._buffer.watermark == 0:
            logger.debug("Flush of %s skipped: no complete rows", self.table)
            return 0

        rows = self._buffer.complete_rows
        payload = self._buffer.complete()
        start = perf_counter()
        try:
            self._sink.copy_in(self._command, payload)
        except TransportError as exc:
            self.metrics.record_error(exc)
            logger.error(
                "Flush of %d rows to %s failed (retryable=%s): %s",
                rows,
                self.table,
                exc.retryable,
                exc,
            )
            raise
        duration = perf_counter() - start
        self._buffer.drop_complete()

        p95 = self.metrics.flush_percentile(95)
        slow = self.metrics.observe_flush(rows, len(payload), duration)
        rps = rows / duration if duration > 0 else 0.0
        logger.info(
            "Flushed %d rows (%d bytes) to %s in %.3f s (%.2f rows/s)",
            rows,
            len(payload),
            self.table,
            duration,
            rps,
        )
        if slow:
            logger.warning(
                "Flush to %s took %.3f s, p95 so far %.3f s", self.table, duration, p95
            )
        return rows

    def is_empty(self) -> bool:
        return len(self._buffer) == 0

    @property
    def pending_rows(self) -> int:
        return self._buffer.complete_rows

    @property
    def buffered_bytes(self) -> int:
        return len(self._buffer)

    # ---------------------------------------------- #
    # Lifecycle                                       #
    # ---------------------------------------------- #
    def close(self) -> None:
        """
        Flush complete rows and close the connection.

        Any partial row is discarded. The connection is closed even if the
        flush fails.
        """
        if self._closed:
            return
        try:
            self.flush()
            partial = self._buffer.partial_size
            if partial:
                self.metrics.discarded_bytes += partial
                logger.warning(
                    "Discarding partial row (%d bytes) at close of %s",
                    partial,
                    self.table,
                )
        except BaseException:
            self._closed = True
            try:
                self._sink.close()
            except TableWriterError:
                # keep the flush failure as the one reported
                logger.exception("Closing connection of %s also failed", self.table)
            raise
        self._closed = True
        self._sink.close()

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def connection(self) -> Any:
        """The underlying database connection, for queries outside COPY."""
        return self._sink.connection

    def get_connection(self) -> Any:
        return self._sink.connection

    @property
    def command(self) -> str:
        """The COPY statement sent with every flush."""
        conn = self._sink.connection
        if isinstance(conn, psycopg.Connection) and not conn.closed:
            return self._command.as_string(conn)
        return self._command.as_string(None)

    def _check_open(self) -> None:
        if self._closed:
            raise WriterClosedError(f"writer for {self.table} is closed")

    def __enter__(self) -> "TableWriter":
        return self

    def __exit__(
        self,
        exc_type: Optional[Type[BaseException]],
        exc_val: Optional[BaseException],
        exc_tb: Optional[TracebackType],
    ) -> None:
        self.close()

    def __repr__(self) -> str:
        return (
            f"<TableWriter table={self.table!r} columns={len(self.columns)} "
            f"column_no={self._cursor.column} buffered={len(self._buffer)}"
            f"{' closed' if self._closed else ''}>"
        )
