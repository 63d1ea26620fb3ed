"""Command line interface for loading delimited text into a table."""

from __future__ import annotations

import argparse
import csv
import logging
import sys
from pathlib import Path
from typing import Iterator, List, Optional, Sequence, TextIO

from table_writer.config import load_config, split_columns
from table_writer.errors import TableWriterError
from table_writer.logging_setup import configure_logging
from table_writer.writer import TableWriter

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    """Return the argument parser for the command line interface."""
    p = argparse.ArgumentParser(
        description="Bulk load delimited text into a PostgreSQL table via COPY"
    )
    p.add_argument(
        "--log-level",
        default=None,
        help="Logging level (DEBUG, INFO, WARNING, ERROR). Defaults to $LOG_LEVEL or INFO.",
    )
    p.add_argument("--host", default=None, help="host[:port] (env TW_HOST)")
    p.add_argument("--database", default=None, help="Database name (env TW_DATABASE)")
    p.add_argument("--user", default=None, help="Database user (env TW_USER)")
    p.add_argument("--password", default=None, help="Password (env TW_PASSWORD)")
    p.add_argument("--table", default=None, help="Target table (env TW_TABLE)")
    p.add_argument(
        "--columns",
        default=None,
        help="Comma separated target columns (env TW_COLUMNS)",
    )
    p.add_argument(
        "--capacity",
        type=int,
        default=None,
        help="Buffer capacity in bytes (env TW_CAPACITY, default 65536)",
    )
    p.add_argument(
        "--delimiter", default=",", help="Input field delimiter (default: ',')"
    )
    p.add_argument(
        "--null",
        default="",
        help="Input value that means NULL (default: empty field)",
    )
    p.add_argument(
        "--header", action="store_true", help="Skip the first input line"
    )
    p.add_argument(
        "input",
        nargs="?",
        type=Path,
        default=None,
        help="Input file (default: stdin)",
    )
    return p


def read_rows(
    stream: TextIO, delimiter: str, null: str, header: bool
) -> Iterator[List[Optional[str]]]:
    """Yield input rows with the NULL token mapped to ``None``."""
    reader = csv.reader(stream, delimiter=delimiter)
    if header:
        next(reader, None)
    for row in reader:
        yield [None if v == null else v for v in row]


def load(writer: TableWriter, rows: Iterator[List[Optional[str]]]) -> int:
    """Write all ``rows`` and close the writer. Returns the row count."""
    with writer:
        count = writer.write_rows(rows)
    text, _ = writer.metrics.summary()
    logger.info("Loaded %d rows into %s\n%s", count, writer.table, text)
    return count


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(args.log_level)

    try:
        config = load_config(
            host=args.host,
            database=args.database,
            user=args.user,
            password=args.password,
            table=args.table,
            columns=split_columns(args.columns) if args.columns else None,
            capacity=args.capacity,
        )
        writer = TableWriter.from_config(config)
        if args.input is None:
            load(writer, read_rows(sys.stdin, args.delimiter, args.null, args.header))
        else:
            with args.input.open(newline="", encoding="utf-8") as fh:
                load(writer, read_rows(fh, args.delimiter, args.null, args.header))
    except TableWriterError as exc:
        logger.error("Load failed (%s): %s", exc.kind.value, exc)
        return 1
    except ValueError as exc:
        logger.error("Load failed: %s", exc)
        return 1
    return 0


def run() -> None:
    sys.exit(main())
