"""Per-call logging context.

One :class:`LogContext` is built per ``aigen`` call (and per stream run) and
flattened into every event payload so all events of a call share the same
``provider``/``model``/``schema`` keys.
"""
from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class LogContext:
    """Fields shared by every event of one call."""

    provider: Optional[str] = None
    model: Optional[str] = None
    schema: Optional[str] = None
    streaming: Optional[bool] = None
    extra: Dict[str, Any] = field(default_factory=dict)

    def bind(self, **fields: Any) -> "LogContext":
        """Return a copy with ``fields`` merged into ``extra``."""
        return replace(self, extra={**self.extra, **fields})

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "provider": self.provider,
            "model": self.model,
            "schema": self.schema,
            "streaming": self.streaming,
            **self.extra,
        }
        return {k: v for k, v in data.items() if v is not None}


__all__ = ["LogContext"]
