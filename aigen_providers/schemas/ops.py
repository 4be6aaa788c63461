"""Schema variant types.

The set of wire protocols is closed: :class:`SchemaKind` names the four
variants and each schema module publishes one :class:`SchemaOps` record
holding its classifier, accumulator, parser and request-building functions.
Dispatch is a table lookup, never subclassing.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Sequence

from ..base.models import NormalizedResponse, TokenCounts, ToolCallDelta
from ..base.tokens import TokenPolicy
from ..base.streaming.sse import StreamChunk

JsonDict = Dict[str, Any]


class SchemaKind(str, Enum):
    CHAT_COMPLETION = "chat_completion"
    ANTHROPIC = "anthropic"
    GEMINI = "gemini"
    RESPONSES = "responses"


@dataclass(frozen=True)
class SchemaOps:
    """Per-protocol operations.

    Chunk classifiers (``is_start`` ... ``extract_stop_reason``) look at one
    :class:`StreamChunk`. ``build_response_body`` folds a retained chunk list
    into the vendor's non-streaming body, which ``parse_response`` turns into
    a :class:`NormalizedResponse`; buffered calls use ``parse_response``
    directly.

    ``is_done`` marks the chunk that finishes the response. ``stops_stream``
    decides when the driver stops reading; it defaults to ``is_done`` and is
    only set where trailing frames (usage) follow the finishing chunk.
    """

    kind: SchemaKind
    is_start: Callable[[StreamChunk], bool]
    is_done: Callable[[StreamChunk], bool]
    extract_content: Callable[[StreamChunk], Optional[str]]
    extract_reasoning: Callable[[StreamChunk], Optional[str]]
    extract_tool_deltas: Callable[[StreamChunk], List[ToolCallDelta]]
    extract_usage: Callable[[StreamChunk], Optional[TokenCounts]]
    extract_model: Callable[[StreamChunk], Optional[str]]
    extract_stop_reason: Callable[[StreamChunk], Optional[str]]
    build_response_body: Callable[[Sequence[StreamChunk]], Optional[JsonDict]]
    parse_response: Callable[[JsonDict], NormalizedResponse]
    extract_tokens: Callable[[JsonDict], Optional[TokenCounts]]
    build_payload: Callable[..., JsonDict]
    build_url: Callable[[str, str, bool], str]
    token_policy: TokenPolicy = TokenPolicy.ADDITIVE
    stops_stream: Optional[Callable[[StreamChunk], bool]] = None

    def should_stop(self, chunk: StreamChunk) -> bool:
        return (self.stops_stream or self.is_done)(chunk)


def as_dict(value: Any) -> JsonDict:
    """``value`` when it is a dict, else an empty dict."""
    return value if isinstance(value, dict) else {}


def as_list(value: Any) -> List[Any]:
    """``value`` when it is a list, else an empty list."""
    return value if isinstance(value, list) else []


def first(value: Any) -> JsonDict:
    """First element of a list as a dict (index 0 tie-break), else ``{}``."""
    items = as_list(value)
    return as_dict(items[0]) if items else {}


def text_or_none(value: Any) -> Optional[str]:
    return value if isinstance(value, str) else None


def join_url(base_url: str, path: str) -> str:
    return base_url.rstrip("/") + path


__all__ = [
    "SchemaKind",
    "SchemaOps",
    "JsonDict",
    "as_dict",
    "as_list",
    "first",
    "text_or_none",
    "join_url",
]
