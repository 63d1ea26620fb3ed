from __future__ import annotations

import math
from collections import Counter
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Tuple


def percentile(values: Iterable[float], p: float) -> float:
    """Linearly interpolated ``p``-th percentile; NaN for no values."""
    ordered = sorted(values)
    if not ordered:
        return float("nan")
    rank = (len(ordered) - 1) * (p / 100.0)
    lower = math.floor(rank)
    frac = rank - lower
    if frac == 0:
        return ordered[lower]
    return ordered[lower] + (ordered[lower + 1] - ordered[lower]) * frac


def spread(values: Iterable[float]) -> Dict[str, float]:
    """count/min/p50/p95/max of a series of flush observations."""
    vals = list(values)
    if not vals:
        nan = float("nan")
        return {"count": 0, "min": nan, "p50": nan, "p95": nan, "max": nan}
    return {
        "count": len(vals),
        "min": min(vals),
        "p50": percentile(vals, 50),
        "p95": percentile(vals, 95),
        "max": max(vals),
    }


# a flush slower than this multiple of the p95 so far is logged
SLOW_FLUSH_FACTOR = 3.0
SLOW_FLUSH_MIN_SAMPLES = 5


@dataclass
class WriterMetrics:
    """Counters for one writer. Not thread-safe; a writer has one caller."""

    flushes: int = 0
    rows_committed: int = 0
    bytes_committed: int = 0
    implicit_flushes: int = 0
    flush_failures: int = 0
    discarded_bytes: int = 0

    flush_seconds: List[float] = field(default_factory=list)
    copy_rows_per_sec: List[float] = field(default_factory=list)

    errors_by_type: Counter[str] = field(default_factory=Counter)

    def observe_flush(self, rows: int, nbytes: int, duration: float) -> bool:
        """Record a committed flush. Returns True if it was unusually slow."""
        slow = (
            len(self.flush_seconds) >= SLOW_FLUSH_MIN_SAMPLES
            and duration > SLOW_FLUSH_FACTOR * self.flush_percentile(95)
        )
        self.flushes += 1
        self.rows_committed += rows
        self.bytes_committed += nbytes
        self.flush_seconds.append(duration)
        if duration > 0:
            self.copy_rows_per_sec.append(rows / duration)
        return slow

    def flush_percentile(self, p: float) -> float:
        return percentile(self.flush_seconds, p)

    def record_error(self, exc: BaseException) -> None:
        self.flush_failures += 1
        self.errors_by_type[type(exc).__name__] += 1

    def summary(self) -> Tuple[str, Dict]:
        flush_stats = spread(self.flush_seconds)
        copy_rps_stats = spread(self.copy_rows_per_sec)
        res = {
            "flushes": self.flushes,
            "implicit_flushes": self.implicit_flushes,
            "rows_committed": self.rows_committed,
            "bytes_committed": self.bytes_committed,
            "flush_failures": self.flush_failures,
            "discarded_bytes": self.discarded_bytes,
            "flush_seconds": flush_stats,
            "copy_rows_per_sec": copy_rps_stats,
            "errors_by_type": dict(self.errors_by_type),
        }

        lines = []
        lines.append("===== WRITER SUMMARY =====")
        lines.append(f"Flushes    : total={res['flushes']}  implicit={res['implicit_flushes']}  "
                     f"failed={res['flush_failures']}")
        lines.append(f"Rows       : committed={res['rows_committed']:,}")
        lines.append(
            f"Committed  : {res['bytes_committed'] / (1024*1024):.2f} MiB")
        if flush_stats["count"]:
            lines.append("")
            lines.append("Flush seconds:")
            lines.append(
                f"  min={flush_stats['min']:.4f}  p50={flush_stats['p50']:.4f}  "
                f"p95={flush_stats['p95']:.4f}  max={flush_stats['max']:.4f}"
            )
        if copy_rps_stats["count"]:
            lines.append("COPY rows/sec:")
            lines.append(
                f"  p50={copy_rps_stats['p50']:.2f}  "
                f"p95={copy_rps_stats['p95']:.2f}  "
                f"max={copy_rps_stats['max']:.2f}"
            )
        if res["discarded_bytes"]:
            lines.append("")
            lines.append(
                f"Discarded partial row bytes at close: {res['discarded_bytes']}")
        if res["errors_by_type"]:
            lines.append("")
            lines.append("Errors by type:")
            for k, v in sorted(res["errors_by_type"].items(), key=lambda kv: kv[1], reverse=True):
                lines.append(f"  {k}: {v}")

        return "\n".join(lines), res
