"""Entry point for invoking the table loader via the CLI."""

from __future__ import annotations

from table_writer.cli import run

if __name__ == "__main__":
    run()
