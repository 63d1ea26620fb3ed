"""Error types raised by the table writer.

Every failure is a :class:`TableWriterError` tagged with an
:class:`ErrorKind`, so callers can decide whether to retry without looking
at messages. Connection and transport failures are also ``OSError``s.
"""

from __future__ import annotations

import enum


class ErrorKind(enum.Enum):
    CONFIGURATION = "configuration"
    CONNECTION = "connection"
    TRANSPORT = "transport"
    STATE = "state"


class TableWriterError(Exception):
    """Base class for all table writer failures."""

    kind: ErrorKind = ErrorKind.STATE
    retryable: bool = False

    def __init__(self, message: str, *, retryable: bool | None = None) -> None:
        super().__init__(message)
        if retryable is not None:
            self.retryable = retryable


class ConfigurationError(TableWriterError, ValueError):
    """Invalid construction parameters; fatal."""

    kind = ErrorKind.CONFIGURATION


class ConnectionFailedError(TableWriterError, OSError):
    """The database connection could not be opened."""

    kind = ErrorKind.CONNECTION
    retryable = True


class TransportError(TableWriterError, OSError):
    """COPY of buffered rows failed; the buffer is left untouched."""

    kind = ErrorKind.TRANSPORT
    retryable = True


class WriterClosedError(TableWriterError):
    """Operation attempted on a closed writer."""


class RowStateError(TableWriterError):
    """Whole-row operation attempted while a row is partially written."""
