"""
Tool call DTOs.

``ToolCallDelta`` is one incremental fragment observed on a stream (any field
may be missing); ``ToolCall`` is the reassembled, final call with its
arguments parsed.
"""
from __future__ import annotations

from dataclasses import dataclass, field, asdict
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class ToolCallDelta:
    """Incremental tool call fragment keyed by its provider block index.

    Attributes:
        index: Provider-assigned block/tool index that fragments share.
        id: Call identifier, usually present only on the first fragment.
        name: Function name, usually present only on the first fragment.
        arguments: Partial JSON argument text to append in arrival order.
    """

    index: int
    id: Optional[str] = None
    name: Optional[str] = None
    arguments: str = ""


@dataclass
class ToolCall:
    """A complete function/tool call requested by the model."""

    id: str
    name: str
    arguments: Dict[str, Any] = field(default_factory=dict)
    raw_arguments: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


__all__ = ["ToolCallDelta", "ToolCall"]
