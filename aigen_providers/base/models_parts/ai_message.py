"""
AIMessage DTO returned by :func:`aigen_providers.aigen`.

Carries the normalized response plus call metadata (provider, model, cost,
elapsed seconds). The raw vendor body is kept for diagnostics and excluded
from ``to_dict``.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .normalized_response import NormalizedResponse
from .token_counts import TokenCounts
from .tool_call import ToolCall


@dataclass
class AIMessage:
    """Assistant message produced by one buffered or streamed call."""

    content: str
    provider: str
    model: str
    reasoning: Optional[str] = None
    tool_calls: Optional[List[ToolCall]] = None
    finish_reason: Optional[str] = None
    tokens: Optional[TokenCounts] = None
    cost: Optional[float] = None
    elapsed: float = -1.0
    status: Optional[str] = None
    response_id: Optional[str] = None
    raw: Optional[Any] = None
    extras: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_normalized(
        cls,
        resp: NormalizedResponse,
        *,
        provider: str,
        model: str,
        cost: Optional[float] = None,
        elapsed: float = -1.0,
        raw: Optional[Any] = None,
    ) -> "AIMessage":
        """Build a message from a :class:`NormalizedResponse` and call metadata."""
        return cls(
            content=resp.content,
            provider=provider,
            model=resp.model or model,
            reasoning=resp.reasoning,
            tool_calls=resp.tool_calls,
            finish_reason=resp.finish_reason,
            tokens=resp.tokens,
            cost=cost,
            elapsed=elapsed,
            status=resp.status,
            response_id=resp.response_id,
            raw=raw,
            extras=dict(resp.extras),
        )

    @property
    def needs_tool_execution(self) -> bool:
        return bool(self.tool_calls)

    def to_dict(self) -> Dict[str, Any]:
        """JSON-serializable view excluding the raw vendor body."""
        return {
            "content": self.content,
            "provider": self.provider,
            "model": self.model,
            "reasoning": self.reasoning,
            "tool_calls": [t.to_dict() for t in self.tool_calls] if self.tool_calls else None,
            "finish_reason": self.finish_reason,
            "tokens": self.tokens.to_dict() if self.tokens else None,
            "cost": self.cost,
            "elapsed": self.elapsed,
            "status": self.status,
            "response_id": self.response_id,
        }


__all__ = ["AIMessage"]
