"""Incremental tool-call reassembly.

Tool call arguments stream as JSON fragments that only parse once complete.
:class:`ToolCallAccumulator` keeps one buffer per provider block index,
appends fragments in arrival order and parses each buffer once on
:meth:`ToolCallAccumulator.finalize`.
"""
from __future__ import annotations

from dataclasses import dataclass, field
import json
from typing import Any, Dict, Iterable, List, Optional

from ..logging import get_logger
from ..models import ToolCall, ToolCallDelta

_log = get_logger("aigen.tools")


def parse_arguments(raw: str) -> Dict[str, Any]:
    """Parse a complete argument buffer; empty or invalid JSON gives ``{}``."""
    if not raw or not raw.strip():
        return {}
    try:
        value = json.loads(raw)
    except ValueError:
        _log.debug("tool call arguments are not valid json: %r", raw[:200])
        return {}
    return value if isinstance(value, dict) else {}


@dataclass
class _PendingCall:
    id: Optional[str] = None
    name: Optional[str] = None
    parts: List[str] = field(default_factory=list)


class ToolCallAccumulator:
    """Per-index buffers for streamed tool calls, in first-seen order."""

    def __init__(self) -> None:
        self._calls: Dict[int, _PendingCall] = {}

    def __len__(self) -> int:
        return len(self._calls)

    def __bool__(self) -> bool:
        return bool(self._calls)

    def apply(self, delta: ToolCallDelta) -> None:
        pending = self._calls.setdefault(delta.index, _PendingCall())
        if delta.id:
            pending.id = delta.id
        if delta.name:
            pending.name = delta.name
        if delta.arguments:
            pending.parts.append(delta.arguments)

    def extend(self, deltas: Iterable[ToolCallDelta]) -> None:
        for delta in deltas:
            self.apply(delta)

    def raw_arguments(self, index: int) -> str:
        pending = self._calls.get(index)
        return "".join(pending.parts) if pending else ""

    def finalize(self) -> List[ToolCall]:
        """Return completed calls ordered by block index."""
        calls: List[ToolCall] = []
        for index in sorted(self._calls):
            pending = self._calls[index]
            raw = "".join(pending.parts)
            calls.append(
                ToolCall(
                    id=pending.id or f"call_{index}",
                    name=pending.name or "",
                    arguments=parse_arguments(raw),
                    raw_arguments=raw,
                )
            )
        return calls


__all__ = ["ToolCallAccumulator", "parse_arguments"]
