from __future__ import annotations

import logging

from table_writer.logging_setup import configure_logging


def test_psycopg_logger_quiet_unless_debug(monkeypatch) -> None:
    monkeypatch.setattr(logging, "basicConfig", lambda **kw: None)
    psycopg_logger = logging.getLogger("psycopg")
    monkeypatch.setattr(psycopg_logger, "level", logging.NOTSET)

    configure_logging("debug")
    assert psycopg_logger.level == logging.NOTSET

    monkeypatch.setenv("LOG_LEVEL", "info")
    configure_logging()
    assert psycopg_logger.level == logging.WARNING
