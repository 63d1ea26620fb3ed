"""Counters and timing summaries for table writers."""

from __future__ import annotations

from .metrics import WriterMetrics, percentile, spread

__all__ = ["WriterMetrics", "percentile", "spread"]
