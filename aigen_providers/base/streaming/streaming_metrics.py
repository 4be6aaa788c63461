"""Streaming metrics data structures.

Counters and timings collected while one stream is consumed, reported by
:func:`aigen_providers.base.streaming.streaming_finalize.finalize_stream`.
"""
from __future__ import annotations

from dataclasses import dataclass
import time
from typing import Optional


@dataclass
class StreamMetrics:
    """Collected streaming metrics for a single call.

    ``emitted`` counts content/reasoning pushes to the sink. Times are
    monotonic milliseconds measured from :meth:`start`.
    """

    chunks: int = 0
    emitted: int = 0
    started_at: Optional[float] = None
    time_to_first_token_ms: Optional[float] = None
    total_duration_ms: Optional[float] = None

    def start(self) -> None:
        self.started_at = time.monotonic()

    def _elapsed_ms(self) -> Optional[float]:
        if self.started_at is None:
            return None
        return (time.monotonic() - self.started_at) * 1000.0

    def record_chunk(self) -> None:
        self.chunks += 1

    def record_emit(self) -> None:
        self.emitted += 1
        if self.time_to_first_token_ms is None:
            self.time_to_first_token_ms = self._elapsed_ms()

    def stop(self) -> None:
        self.total_duration_ms = self._elapsed_ms()


__all__ = ["StreamMetrics"]
