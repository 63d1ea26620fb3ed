from __future__ import annotations

from typing import List, Optional

import pytest

from table_writer import TableWriter
from table_writer.constants import COLUMN_DELIMITER, ROW_DELIMITER


class FakeConnection:
    closed = False


class FakeSink:
    """Copy sink that records payloads instead of talking to a server."""

    def __init__(self) -> None:
        self.connection = FakeConnection()
        self.commands: List[object] = []
        self.payloads: List[bytes] = []
        self.fail_with: Optional[BaseException] = None
        self.close_calls = 0
        self.close_fails_with: Optional[BaseException] = None

    def copy_in(self, command, payload: bytes) -> None:
        if self.fail_with is not None:
            raise self.fail_with
        self.commands.append(command)
        self.payloads.append(payload)

    def close(self) -> None:
        self.close_calls += 1
        self.connection.closed = True
        if self.close_fails_with is not None:
            raise self.close_fails_with

    def rows(self) -> List[List[Optional[str]]]:
        """Decode committed payloads the way the server would (no quoting)."""
        out: List[List[Optional[str]]] = []
        for payload in self.payloads:
            text = payload.decode("utf-8")
            assert text.endswith(ROW_DELIMITER)
            for line in text[:-1].split(ROW_DELIMITER):
                out.append([v if v else None for v in line.split(COLUMN_DELIMITER)])
        return out


@pytest.fixture
def sink() -> FakeSink:
    return FakeSink()


@pytest.fixture
def writer(sink: FakeSink) -> TableWriter:
    return TableWriter(
        database="postgres",
        table="pgwriter",
        columns=["A", "B"],
        capacity=64 * 1024,
        sink=sink,
    )


ENV_VARS = (
    "TW_HOST", "TW_DATABASE", "TW_USER", "TW_PASSWORD",
    "TW_TABLE", "TW_COLUMNS", "TW_CAPACITY", "LOG_LEVEL",
)


@pytest.fixture
def clean_env(monkeypatch, tmp_path):
    """Empty TW_* environment in a directory without a .env file."""
    for name in ENV_VARS:
        # setenv first so values loaded from a .env are undone afterwards
        monkeypatch.setenv(name, "")
        monkeypatch.delenv(name)
    monkeypatch.chdir(tmp_path)
    return tmp_path
