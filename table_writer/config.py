"""Environment-based configuration for table writers."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Any, List, Optional, Tuple

from dotenv import find_dotenv, load_dotenv

from table_writer.constants import DEFAULT_CAPACITY, DEFAULT_HOST, DEFAULT_PORT
from table_writer.errors import ConfigurationError


@dataclass
class WriterConfig:
    """Connection and table settings for a :class:`~table_writer.TableWriter`."""
    database: str
    table: str
    columns: List[str] = field(default_factory=list)
    capacity: int = DEFAULT_CAPACITY

    host: Optional[str] = None   # "host[:port]"
    user: Optional[str] = None
    password: Optional[str] = None

    def validate(self) -> None:
        validate_settings(self.database, self.table, self.columns, self.capacity)
        parse_host(self.host)


def validate_settings(
    database: Optional[str],
    table: Optional[str],
    columns: Any,
    capacity: Any,
) -> None:
    """Raise :class:`ConfigurationError` for unusable writer settings."""
    if not database:
        raise ConfigurationError("database name is required")
    if not table:
        raise ConfigurationError("table name is required")
    if not columns or isinstance(columns, str):
        raise ConfigurationError("at least one column name is required")
    if any(not c for c in columns):
        raise ConfigurationError(f"empty column name in {list(columns)!r}")
    if not isinstance(capacity, int) or isinstance(capacity, bool) or capacity < 0:
        raise ConfigurationError(f"capacity must be an integer >= 0, got {capacity!r}")


def parse_host(host: Optional[str]) -> Tuple[str, int]:
    """Split ``host[:port]`` into its parts, defaulting to the local server."""
    if not host:
        host = DEFAULT_HOST
    name, sep, port = host.rpartition(":")
    if not sep:
        return host, DEFAULT_PORT
    if not port.isdigit():
        raise ConfigurationError(f"invalid port in host {host!r}")
    return name or "localhost", int(port)


def split_columns(value: str) -> List[str]:
    return [c.strip() for c in value.split(",") if c.strip()]


def load_config(**overrides: Any) -> WriterConfig:
    """Build a :class:`WriterConfig` from ``TW_*`` environment variables.

    A ``.env`` file found from the working directory upwards is honoured. Keyword ``overrides`` that are not ``None``
    take precedence over the environment. The result is validated.
    """
    load_dotenv(find_dotenv(usecwd=True))

    columns_env = os.getenv("TW_COLUMNS", "")
    capacity_env = os.getenv("TW_CAPACITY", str(DEFAULT_CAPACITY))
    try:
        capacity = int(capacity_env)
    except ValueError as exc:
        raise ConfigurationError(
            f"TW_CAPACITY is not an integer: {capacity_env!r}"
        ) from exc

    values: dict[str, Any] = {
        "host": os.getenv("TW_HOST") or None,
        "database": os.getenv("TW_DATABASE", ""),
        "user": os.getenv("TW_USER") or None,
        "password": os.getenv("TW_PASSWORD") or None,
        "table": os.getenv("TW_TABLE", ""),
        "columns": split_columns(columns_env),
        "capacity": capacity,
    }
    values.update({k: v for k, v in overrides.items() if v is not None})

    config = WriterConfig(**values)
    config.validate()
    return config
