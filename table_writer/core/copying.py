# table_writer/core/copying.py

from __future__ import annotations

import logging
from time import perf_counter
from typing import Any, Optional, Protocol, runtime_checkable

import psycopg
from psycopg import sql

from table_writer.errors import ConnectionFailedError, TransportError

logger = logging.getLogger(__name__)


@runtime_checkable
class CopySink(Protocol):
    """
    Bulk-load transport used by the writer.

    ``copy_in`` must either commit the whole payload or raise
    :class:`~table_writer.errors.TransportError` having committed nothing.
    """

    connection: Any

    def copy_in(self, command: sql.Composable, payload: bytes) -> None: ...
    def close(self) -> None: ...


def open_connection(
    host: str,
    port: int,
    database: str,
    user: Optional[str] = None,
    password: Optional[str] = None,
) -> psycopg.Connection:
    """Open a psycopg connection, mapping failures to ConnectionFailedError."""
    try:
        conn = psycopg.connect(
            host=host,
            port=port,
            dbname=database,
            user=user,
            password=password,
        )
    except psycopg.Error as exc:
        logger.error(
            "Could not connect to %s:%d/%s: %s", host, port, database, exc
        )
        raise ConnectionFailedError(str(exc)) from exc
    logger.debug("Connected to %s:%d/%s", host, port, database)
    return conn


class PsycopgCopySink:
    """
    Runs ``COPY ... FROM STDIN`` on a psycopg connection, one commit per call.
    """

    def __init__(self, connection: psycopg.Connection) -> None:
        self.connection = connection

    def copy_in(self, command: sql.Composable, payload: bytes) -> None:
        start = perf_counter()
        try:
            with self.connection.cursor() as cur, cur.copy(command) as copier:
                # single write for the whole prefix
                copier.write(payload)
            self.connection.commit()
        except psycopg.Error as exc:
            logger.exception("COPY of %d bytes failed", len(payload))
            self._rollback()
            raise TransportError(
                str(exc),
                retryable=isinstance(exc, psycopg.OperationalError),
            ) from exc
        logger.debug(
            "COPY sent %d bytes in %.3f s", len(payload), perf_counter() - start
        )

    def _rollback(self) -> None:
        if self.connection.closed:
            return
        try:
            self.connection.rollback()
        except psycopg.Error:
            logger.warning("Rollback after failed COPY also failed", exc_info=True)

    def close(self) -> None:
        try:
            self.connection.close()
        except psycopg.Error as exc:
            raise TransportError(str(exc)) from exc

    def __repr__(self) -> str:
        return f"<PsycopgCopySink connection={self.connection!r}>"
