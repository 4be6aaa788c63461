"""Finalize stream helper.

Emits the single terminal ``stream.end`` / ``stream.error`` normalized log
event carrying the stream metrics and final token counts.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from ..errors import ProviderError
from ..logging import LogContext, normalized_log_event
from ..models import TokenCounts
from .streaming_metrics import StreamMetrics


def _error_fields(error: Optional[BaseException]) -> Dict[str, Any]:
    if error is None:
        return {}
    if isinstance(error, ProviderError):
        return error.log_fields()
    return {"error_code": error.__class__.__name__, "error": str(error)}


def finalize_stream(
    *,
    logger: logging.Logger,
    ctx: LogContext,
    metrics: StreamMetrics,
    tokens: Optional[TokenCounts] = None,
    finish_reason: Optional[str] = None,
    error: Optional[BaseException] = None,
) -> None:
    """Stop the metrics clock and log the terminal lifecycle event."""
    metrics.stop()
    normalized_log_event(
        logger,
        "stream.end" if error is None else "stream.error",
        ctx,
        phase="finalize",
        emitted=metrics.emitted > 0,
        tokens=tokens,
        level=logging.INFO if error is None else logging.WARNING,
        chunks=metrics.chunks,
        emitted_count=metrics.emitted,
        finish_reason=finish_reason,
        time_to_first_token_ms=metrics.time_to_first_token_ms,
        total_duration_ms=metrics.total_duration_ms,
        **_error_fields(error),
    )


__all__ = ["finalize_stream"]
