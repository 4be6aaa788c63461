"""
NormalizedResponse DTO.

The schema-independent result of one call. Buffered bodies are parsed into
this shape directly; streamed calls first rebuild the vendor body from the
retained chunks and then go through the very same parser, so both paths
produce structurally identical objects.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .token_counts import TokenCounts
from .tool_call import ToolCall


@dataclass
class NormalizedResponse:
    """Canonical response content.

    Attributes:
        content: Visible text (empty string when the model produced none).
        reasoning: Reasoning/thinking text when the schema exposes it.
        tool_calls: Tool calls in provider order, or ``None`` when absent.
        finish_reason: Vendor finish/stop reason string.
        tokens: Non-overlapping usage counts when reported.
        model: Model id echoed by the vendor.
        response_id: Vendor response/message id.
        status: Responses API status (``"completed"``, ``"incomplete"``...).
    """

    content: str = ""
    reasoning: Optional[str] = None
    tool_calls: Optional[List[ToolCall]] = None
    finish_reason: Optional[str] = None
    tokens: Optional[TokenCounts] = None
    model: Optional[str] = None
    response_id: Optional[str] = None
    status: Optional[str] = None
    extras: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "content": self.content,
            "reasoning": self.reasoning,
            "tool_calls": [t.to_dict() for t in self.tool_calls] if self.tool_calls else None,
            "finish_reason": self.finish_reason,
            "tokens": self.tokens.to_dict() if self.tokens else None,
            "model": self.model,
            "response_id": self.response_id,
            "status": self.status,
        }


__all__ = ["NormalizedResponse"]
