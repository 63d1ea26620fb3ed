from __future__ import annotations

import logging
import os

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s:%(lineno)d | %(message)s"


def configure_logging(level: str | None = None) -> None:
    """
    Configure root logging for the loader. Level comes from the argument or
    the LOG_LEVEL env var (default INFO). psycopg's own logger stays at
    WARNING unless DEBUG is requested.
    """
    if level is None:
        level = os.getenv("LOG_LEVEL", "INFO")
    level = level.upper()
    logging.basicConfig(level=level, format=LOG_FORMAT)
    if level != "DEBUG":
        logging.getLogger("psycopg").setLevel(logging.WARNING)
