from __future__ import annotations

import logging
import random
import time
from time import perf_counter
from typing import Any, Callable, TypeVar

from table_writer.errors import TableWriterError

logger = logging.getLogger(__name__)

T = TypeVar("T")


def retry_logic(
    func: Callable[..., T],
    max_retries: int,
    backoff_factor: float,
    *args: Any,
    sleep: Callable[[float], None] = time.sleep,
    **kwargs: Any
) -> T:
    """
    Call ``func`` and retry it on retryable :class:`TableWriterError`.

    Retrying a flush resends the same rows. If the server committed before
    the failure was reported, rows are inserted twice.
    """
    retries = 0

    while retries <= max_retries:
        try:
            attempt_start = perf_counter()
            result = func(*args, **kwargs)
            duration = perf_counter() - attempt_start
            logger.info(
                "Function %s succeeded in %.3f s on attempt %d/%d",
                getattr(func, "__name__", str(func)),
                duration,
                retries + 1,
                max_retries + 1,
            )
            return result

        except TableWriterError as exc:
            if not exc.retryable:
                raise
            retries += 1
            if retries > max_retries:
                logger.error(
                    "Function %s failed after %d retries",
                    getattr(func, "__name__", str(func)),
                    max_retries,
                )
                raise
            wait_time = random.uniform(1, max(1.0, backoff_factor ** retries))
            logger.warning(
                "Function %s encountered %s (%s), retrying in %.1f s (%d/%d)",
                getattr(func, "__name__", str(func)),
                type(exc).__name__,
                exc.kind.value,
                wait_time,
                retries,
                max_retries,
            )
            sleep(wait_time)

    raise AssertionError("unreachable")  # pragma: no cover
