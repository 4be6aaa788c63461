"""OpenAI Responses API protocol (``/responses``).

Streams are typed events (``response.created``,
``response.output_text.delta``, ``response.reasoning_summary_text.delta``,
``response.output_item.done`` ... ``response.completed``). The terminal
``response.completed`` event embeds the full response object, including
function calls and final usage, so reconstruction normally just returns it.

When a stream is cut before that event, :func:`build_response_body` falls back
to a best-effort reconstruction marked ``status: "incomplete"``: text deltas
are grouped by ``output_index`` and, when there are at least two groups,
index 0 is assumed to be a reasoning summary. That guess is not guaranteed by
the vendor.
"""
from __future__ import annotations

import json
import logging
from typing import Any, Dict, List, Optional, Sequence

from ..base.dto import MessageDTO
from ..base.dto.messages import split_system
from ..base.logging import get_logger, log_event
from ..base.models import NormalizedResponse, TokenCounts, ToolCall, ToolCallDelta
from ..base.streaming.sse import StreamChunk
from ..base.streaming.tool_calls import parse_arguments
from ..base.tokens import TokenPolicy, extract_responses_tokens
from .ops import JsonDict, SchemaKind, SchemaOps, as_dict, as_list, join_url, text_or_none

ENDPOINT = "/responses"
DEFAULT_REASONING: JsonDict = {"summary": "detailed"}

_log = get_logger("aigen.schemas.responses")


def _type(chunk: StreamChunk) -> Optional[str]:
    return chunk.get("type")


def is_start(chunk: StreamChunk) -> bool:
    return False


def is_done(chunk: StreamChunk) -> bool:
    return _type(chunk) == "response.completed"


def extract_content(chunk: StreamChunk) -> Optional[str]:
    if _type(chunk) == "response.output_text.delta":
        return text_or_none(chunk.get("delta"))
    return None


def extract_reasoning(chunk: StreamChunk) -> Optional[str]:
    if _type(chunk) == "response.reasoning_summary_text.delta":
        return text_or_none(chunk.get("delta"))
    return None


def extract_tool_deltas(chunk: StreamChunk) -> List[ToolCallDelta]:
    return []


def _embedded_response(chunk: StreamChunk) -> JsonDict:
    return as_dict(chunk.get("response"))


def extract_usage(chunk: StreamChunk) -> Optional[TokenCounts]:
    if _type(chunk) == "response.completed":
        return extract_responses_tokens(_embedded_response(chunk).get("usage"))
    return None


def extract_model(chunk: StreamChunk) -> Optional[str]:
    return text_or_none(_embedded_response(chunk).get("model"))


def extract_stop_reason(chunk: StreamChunk) -> Optional[str]:
    if _type(chunk) == "response.completed":
        return text_or_none(_embedded_response(chunk).get("status"))
    return None


def _fallback_body(chunks: Sequence[StreamChunk]) -> JsonDict:
    response: JsonDict = {"object": "response", "output": [], "status": "incomplete"}
    texts: Dict[int, List[str]] = {}
    metadata: JsonDict = {}
    for chunk in chunks:
        data = chunk.json
        if not isinstance(data, dict):
            continue
        kind = data.get("type")
        if kind == "response.created":
            created = as_dict(data.get("response"))
            for key in ("id", "model", "created_at"):
                if key in created and key not in metadata:
                    metadata[key] = created[key]
        if kind == "response.output_text.delta":
            index = data.get("output_index", 0)
            texts.setdefault(index if isinstance(index, int) else 0, []).append(data.get("delta") or "")
        if "item_id" in data and not metadata:
            for key in ("id", "model", "created_at"):
                if key in data:
                    metadata[key] = data[key]

    output: List[JsonDict] = []
    for index in sorted(texts):
        text = "".join(texts[index])
        if index == 0 and len(texts) > 1:
            output.append({"type": "reasoning", "summary": [{"type": "summary_text", "text": text}]})
        else:
            output.append(
                {
                    "type": "message",
                    "role": "assistant",
                    "content": [{"type": "output_text", "text": text}],
                }
            )
    response["output"] = output
    response.update(metadata)
    return response


def build_response_body(chunks: Sequence[StreamChunk]) -> Optional[JsonDict]:
    """Return the ``response.completed`` payload, or a best-effort rebuild."""
    if not chunks:
        return None
    for chunk in reversed(chunks):
        if _type(chunk) == "response.completed":
            embedded = chunk.get("response")
            if isinstance(embedded, dict):
                return embedded
    log_event(_log, "responses.fallback", level=logging.WARNING, chunks=len(chunks))
    return _fallback_body(chunks)


def extract_tokens(body: JsonDict) -> Optional[TokenCounts]:
    return extract_responses_tokens(as_dict(body).get("usage"))


def parse_response(body: JsonDict) -> NormalizedResponse:
    body = as_dict(body)
    content: List[str] = []
    reasoning: List[str] = []
    tool_calls: List[ToolCall] = []
    for raw in as_list(body.get("output")):
        item = as_dict(raw)
        kind = item.get("type")
        if kind == "message":
            for part in as_list(item.get("content")):
                part = as_dict(part)
                if part.get("type") == "output_text" and isinstance(part.get("text"), str):
                    content.append(part["text"])
        elif kind == "reasoning":
            for part in as_list(item.get("summary")) + as_list(item.get("content")):
                text = part.get("text") if isinstance(part, dict) else part
                if isinstance(text, str):
                    reasoning.append(text)
        elif kind == "function_call":
            raw_args = text_or_none(item.get("arguments")) or ""
            tool_calls.append(
                ToolCall(
                    id=item.get("call_id") or item.get("id") or f"call_{len(tool_calls)}",
                    name=item.get("name") or "",
                    arguments=parse_arguments(raw_args),
                    raw_arguments=raw_args,
                )
            )
    status = text_or_none(body.get("status"))
    return NormalizedResponse(
        content="".join(content),
        reasoning="\n".join(reasoning) or None,
        tool_calls=tool_calls or None,
        finish_reason=status,
        tokens=extract_tokens(body),
        model=text_or_none(body.get("model")),
        response_id=text_or_none(body.get("id")),
        status=status,
    )


def to_input_items(messages: Sequence[MessageDTO]) -> List[JsonDict]:
    items: List[JsonDict] = []
    for msg in messages:
        if msg.role == "tool":
            items.append({"type": "function_call_output", "call_id": msg.tool_call_id, "output": msg.content})
            continue
        if msg.content or not msg.tool_calls:
            items.append({"type": "message", "role": msg.role, "content": msg.content})
        for call in msg.tool_calls or []:
            items.append(
                {
                    "type": "function_call",
                    "call_id": call.id,
                    "name": call.name,
                    "arguments": json.dumps(call.arguments),
                }
            )
    return items


def build_payload(messages: Sequence[MessageDTO], model: str, stream: bool = False, **params: Any) -> JsonDict:
    """Build a Responses request.

    A ``detailed`` reasoning summary is requested by default (merged under any
    caller ``reasoning`` mapping); pass ``reasoning=None`` to omit it.
    """
    system, rest = split_system(list(messages))
    payload: JsonDict = {"model": model, "stream": stream, "input": to_input_items(rest)}
    if system is not None:
        payload["instructions"] = system
    reasoning = params.pop("reasoning", DEFAULT_REASONING)
    if reasoning is not None:
        payload["reasoning"] = {**DEFAULT_REASONING, **as_dict(reasoning)}
    payload.update(params)
    return payload


def build_url(base_url: str, model: str, stream: bool = False) -> str:
    return join_url(base_url, ENDPOINT)


OPS = SchemaOps(
    kind=SchemaKind.RESPONSES,
    is_start=is_start,
    is_done=is_done,
    extract_content=extract_content,
    extract_reasoning=extract_reasoning,
    extract_tool_deltas=extract_tool_deltas,
    extract_usage=extract_usage,
    extract_model=extract_model,
    extract_stop_reason=extract_stop_reason,
    build_response_body=build_response_body,
    parse_response=parse_response,
    extract_tokens=extract_tokens,
    build_payload=build_payload,
    build_url=build_url,
    token_policy=TokenPolicy.CUMULATIVE,
)

__all__ = [
    "OPS",
    "ENDPOINT",
    "is_start",
    "is_done",
    "extract_content",
    "extract_reasoning",
    "extract_tool_deltas",
    "extract_usage",
    "extract_model",
    "extract_stop_reason",
    "build_response_body",
    "parse_response",
    "extract_tokens",
    "build_payload",
    "build_url",
]
