"""Buffered, row-at-a-time bulk loading into PostgreSQL tables via COPY."""

from __future__ import annotations

from table_writer.config import WriterConfig, load_config
from table_writer.errors import (
    ConfigurationError,
    ConnectionFailedError,
    ErrorKind,
    RowStateError,
    TableWriterError,
    TransportError,
    WriterClosedError,
)
from table_writer.writer import TableWriter

__all__ = [
    "TableWriter",
    "WriterConfig",
    "load_config",
    "ErrorKind",
    "TableWriterError",
    "ConfigurationError",
    "ConnectionFailedError",
    "TransportError",
    "WriterClosedError",
    "RowStateError",
]
