from __future__ import annotations

import pytest

from table_writer.core.retry import retry_logic
from table_writer.errors import ConfigurationError, TransportError


def test_retries_retryable_errors_then_succeeds() -> None:
    calls = []
    sleeps = []

    def flaky() -> int:
        calls.append(1)
        if len(calls) < 3:
            raise TransportError("connection reset", retryable=True)
        return 7

    assert retry_logic(flaky, 3, 2.0, sleep=sleeps.append) == 7
    assert len(calls) == 3
    assert len(sleeps) == 2
    assert all(1 <= s <= 4.0 for s in sleeps)


def test_gives_up_after_max_retries() -> None:
    calls = []

    def always_fails() -> None:
        calls.append(1)
        raise TransportError("down", retryable=True)

    with pytest.raises(TransportError):
        retry_logic(always_fails, 2, 2.0, sleep=lambda s: None)
    assert len(calls) == 3


def test_non_retryable_errors_propagate_immediately() -> None:
    calls = []

    def bad_data() -> None:
        calls.append(1)
        raise TransportError("invalid input syntax", retryable=False)

    with pytest.raises(TransportError):
        retry_logic(bad_data, 5, 2.0, sleep=lambda s: None)
    assert len(calls) == 1

    with pytest.raises(ConfigurationError):
        retry_logic(lambda: (_ for _ in ()).throw(ConfigurationError("x")), 5, 2.0)


def test_passes_arguments_through() -> None:
    assert retry_logic(lambda a, b=0: a + b, 0, 2.0, 1, b=2) == 3
