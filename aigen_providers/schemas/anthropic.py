"""Anthropic messages protocol (``/v1/messages``).

Streams are typed SSE events::

    message_start -> content_block_start -> content_block_delta* ->
    content_block_stop -> ... -> message_delta -> message_stop

``message_start`` carries the message envelope and input usage,
``message_delta`` the stop reason and the running output usage. Usage values
are running totals, hence the cumulative token policy.
"""
from __future__ import annotations

import copy
import json
from typing import Any, Dict, List, Optional, Sequence

from ..base.constants import ANTHROPIC_DEFAULT_MAX_TOKENS
from ..base.dto import MessageDTO
from ..base.dto.messages import split_system
from ..base.models import NormalizedResponse, TokenCounts, ToolCall, ToolCallDelta
from ..base.streaming.sse import StreamChunk
from ..base.streaming.tool_calls import parse_arguments
from ..base.tokens import TokenPolicy, extract_anthropic_tokens
from .ops import JsonDict, SchemaKind, SchemaOps, as_dict, as_list, join_url, text_or_none

ENDPOINT = "/v1/messages"


def _type(chunk: StreamChunk) -> Optional[str]:
    return chunk.get("type")


def is_start(chunk: StreamChunk) -> bool:
    return _type(chunk) == "message_start"


def is_done(chunk: StreamChunk) -> bool:
    return chunk.event in ("message_stop", "error") or _type(chunk) == "message_stop"


def _block(chunk: StreamChunk) -> JsonDict:
    if _type(chunk) in ("content_block_start", "content_block_stop"):
        return as_dict(chunk.get("content_block"))
    return {}


def _delta(chunk: StreamChunk) -> JsonDict:
    return as_dict(chunk.get("delta")) if _type(chunk) == "content_block_delta" else {}


def extract_content(chunk: StreamChunk) -> Optional[str]:
    block = _block(chunk)
    if block.get("type") == "text":
        return text_or_none(block.get("text")) or None
    delta = _delta(chunk)
    if delta.get("type") == "text_delta":
        return text_or_none(delta.get("text"))
    return None


def extract_reasoning(chunk: StreamChunk) -> Optional[str]:
    block = _block(chunk)
    if block.get("type") == "thinking":
        return text_or_none(block.get("thinking")) or None
    delta = _delta(chunk)
    if delta.get("type") == "thinking_delta":
        return text_or_none(delta.get("thinking"))
    return None


def extract_tool_deltas(chunk: StreamChunk) -> List[ToolCallDelta]:
    index = chunk.get("index")
    if not isinstance(index, int):
        return []
    if _type(chunk) == "content_block_start":
        block = as_dict(chunk.get("content_block"))
        if block.get("type") == "tool_use":
            return [ToolCallDelta(index=index, id=text_or_none(block.get("id")), name=text_or_none(block.get("name")))]
        return []
    delta = _delta(chunk)
    if delta.get("type") == "input_json_delta":
        return [ToolCallDelta(index=index, arguments=text_or_none(delta.get("partial_json")) or "")]
    return []


def extract_usage(chunk: StreamChunk) -> Optional[TokenCounts]:
    kind = _type(chunk)
    if kind == "message_start":
        return extract_anthropic_tokens(as_dict(chunk.get("message")).get("usage"))
    if kind == "message_delta":
        return extract_anthropic_tokens(chunk.get("usage"))
    return None


def extract_model(chunk: StreamChunk) -> Optional[str]:
    if _type(chunk) == "message_start":
        return text_or_none(as_dict(chunk.get("message")).get("model"))
    return None


def extract_stop_reason(chunk: StreamChunk) -> Optional[str]:
    if _type(chunk) == "message_delta":
        return text_or_none(as_dict(chunk.get("delta")).get("stop_reason"))
    return None


def build_response_body(chunks: Sequence[StreamChunk]) -> Optional[JsonDict]:
    """Fold Anthropic events into a non-streaming ``message`` body.

    Content order: one ``thinking`` block (when any thinking arrived), one
    ``text`` block, then ``tool_use`` blocks by stream index with their input
    parsed from the concatenated ``input_json_delta`` fragments.
    """
    response: Optional[JsonDict] = None
    usage: Optional[JsonDict] = None
    text: List[str] = []
    thinking: List[str] = []
    signature: Optional[str] = None
    tools: Dict[int, JsonDict] = {}

    for chunk in chunks:
        data = chunk.json
        if not isinstance(data, dict):
            continue
        kind = data.get("type")
        if kind == "message_start" and isinstance(data.get("message"), dict):
            response = copy.deepcopy(data["message"])
            usage = dict(as_dict(response.get("usage")))
        elif kind == "message_delta":
            delta = as_dict(data.get("delta"))
            response = dict(delta) if response is None else {**response, **delta}
            if isinstance(data.get("usage"), dict):
                usage = {**(usage or {}), **data["usage"]}
        elif kind == "content_block_start":
            block = as_dict(data.get("content_block"))
            block_type = block.get("type")
            if block_type == "text":
                text.append(block.get("text") or "")
            elif block_type == "thinking":
                thinking.append(block.get("thinking") or "")
            elif block_type == "tool_use":
                tools[data.get("index", len(tools))] = {
                    "id": block.get("id"),
                    "name": block.get("name"),
                    "input": block.get("input"),
                    "parts": [],
                }
        elif kind == "content_block_delta":
            delta = as_dict(data.get("delta"))
            delta_type = delta.get("type")
            if delta_type == "text_delta":
                text.append(delta.get("text") or "")
            elif delta_type == "thinking_delta":
                thinking.append(delta.get("thinking") or "")
            elif delta_type == "signature_delta":
                signature = delta.get("signature") or signature
            elif delta_type == "input_json_delta":
                slot = tools.setdefault(data.get("index", -1), {"id": None, "name": None, "input": None, "parts": []})
                slot["parts"].append(delta.get("partial_json") or "")

    if response is None:
        return None
    content: List[JsonDict] = []
    if thinking:
        block: JsonDict = {"type": "thinking", "thinking": "".join(thinking)}
        if signature:
            block["signature"] = signature
        content.append(block)
    if text or not tools:
        content.append({"type": "text", "text": "".join(text)})
    for index in sorted(tools):
        slot = tools[index]
        raw = "".join(slot["parts"])
        tool_input = parse_arguments(raw) if raw else as_dict(slot["input"])
        content.append({"type": "tool_use", "id": slot["id"], "name": slot["name"], "input": tool_input})
    response["content"] = content
    if usage is not None:
        response["usage"] = usage
    return response


def extract_tokens(body: JsonDict) -> Optional[TokenCounts]:
    return extract_anthropic_tokens(as_dict(body).get("usage"))


def parse_response(body: JsonDict) -> NormalizedResponse:
    body = as_dict(body)
    text: List[str] = []
    thinking: List[str] = []
    tool_calls: List[ToolCall] = []
    for raw in as_list(body.get("content")):
        block = as_dict(raw)
        block_type = block.get("type")
        if block_type == "text":
            text.append(block.get("text") or "")
        elif block_type == "thinking":
            thinking.append(block.get("thinking") or "")
        elif block_type == "tool_use":
            arguments = as_dict(block.get("input"))
            tool_calls.append(
                ToolCall(
                    id=block.get("id") or f"call_{len(tool_calls)}",
                    name=block.get("name") or "",
                    arguments=arguments,
                    raw_arguments=json.dumps(arguments),
                )
            )
    return NormalizedResponse(
        content="".join(text),
        reasoning="".join(thinking) or None,
        tool_calls=tool_calls or None,
        finish_reason=text_or_none(body.get("stop_reason")),
        tokens=extract_tokens(body),
        model=text_or_none(body.get("model")),
        response_id=text_or_none(body.get("id")),
    )


def to_wire_messages(messages: Sequence[MessageDTO]) -> List[JsonDict]:
    wire: List[JsonDict] = []
    for msg in messages:
        if msg.role == "tool":
            wire.append(
                {
                    "role": "user",
                    "content": [{"type": "tool_result", "tool_use_id": msg.tool_call_id, "content": msg.content}],
                }
            )
        elif msg.tool_calls:
            blocks: List[JsonDict] = [{"type": "text", "text": msg.content}] if msg.content else []
            blocks.extend(
                {"type": "tool_use", "id": call.id, "name": call.name, "input": call.arguments}
                for call in msg.tool_calls
            )
            wire.append({"role": "assistant", "content": blocks})
        else:
            wire.append({"role": msg.role, "content": msg.content})
    return wire


def build_payload(messages: Sequence[MessageDTO], model: str, stream: bool = False, **params: Any) -> JsonDict:
    system, rest = split_system(list(messages))
    payload: JsonDict = {
        "model": model,
        "max_tokens": params.pop("max_tokens", ANTHROPIC_DEFAULT_MAX_TOKENS),
        "messages": to_wire_messages(rest),
    }
    if system is not None:
        payload["system"] = system
    if stream:
        payload["stream"] = True
    payload.update(params)
    return payload


def build_url(base_url: str, model: str, stream: bool = False) -> str:
    return join_url(base_url, ENDPOINT)


OPS = SchemaOps(
    kind=SchemaKind.ANTHROPIC,
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
