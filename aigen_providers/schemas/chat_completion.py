"""OpenAI-style chat completion protocol (``/chat/completions``).

Used by OpenAI and by the many vendors that clone its API (OpenRouter, Groq,
DeepSeek, Together, local servers). Streams are ``data:`` only SSE ending with
a literal ``[DONE]``; usage arrives in the last chunk when
``stream_options.include_usage`` is requested.
"""
from __future__ import annotations

import copy
import json
from typing import Any, Dict, List, Optional, Sequence

from ..base.constants import SSE_DONE_SENTINEL
from ..base.dto import MessageDTO
from ..base.models import NormalizedResponse, TokenCounts, ToolCall, ToolCallDelta
from ..base.streaming.sse import StreamChunk
from ..base.streaming.tool_calls import parse_arguments
from ..base.tokens import TokenPolicy, extract_chat_completion_tokens
from .ops import JsonDict, SchemaKind, SchemaOps, as_dict, as_list, first, join_url, text_or_none

ENDPOINT = "/chat/completions"


def _delta(chunk: StreamChunk) -> JsonDict:
    return as_dict(first(chunk.get("choices")).get("delta"))


def is_start(chunk: StreamChunk) -> bool:
    return "role" in _delta(chunk)


def is_done(chunk: StreamChunk) -> bool:
    if chunk.data.strip() == SSE_DONE_SENTINEL:
        return True
    return any(as_dict(c).get("finish_reason") is not None for c in as_list(chunk.get("choices")))


def stops_stream(chunk: StreamChunk) -> bool:
    """Only ``[DONE]`` ends the read loop: the usage frame follows the finish chunk."""
    return chunk.data.strip() == SSE_DONE_SENTINEL


def extract_content(chunk: StreamChunk) -> Optional[str]:
    return text_or_none(_delta(chunk).get("content"))


def extract_reasoning(chunk: StreamChunk) -> Optional[str]:
    delta = _delta(chunk)
    return text_or_none(delta.get("reasoning_content")) or text_or_none(delta.get("reasoning"))


def extract_tool_deltas(chunk: StreamChunk) -> List[ToolCallDelta]:
    deltas: List[ToolCallDelta] = []
    for pos, raw in enumerate(as_list(_delta(chunk).get("tool_calls"))):
        call = as_dict(raw)
        function = as_dict(call.get("function"))
        index = call.get("index")
        deltas.append(
            ToolCallDelta(
                index=index if isinstance(index, int) else pos,
                id=text_or_none(call.get("id")),
                name=text_or_none(function.get("name")),
                arguments=text_or_none(function.get("arguments")) or "",
            )
        )
    return deltas


def extract_usage(chunk: StreamChunk) -> Optional[TokenCounts]:
    return extract_chat_completion_tokens(chunk.get("usage"))


def extract_model(chunk: StreamChunk) -> Optional[str]:
    return text_or_none(chunk.get("model"))


def extract_stop_reason(chunk: StreamChunk) -> Optional[str]:
    return text_or_none(first(chunk.get("choices")).get("finish_reason"))


def _empty_choice(index: int) -> JsonDict:
    return {"index": index, "message": {"role": "assistant", "content": ""}, "finish_reason": None}


def build_response_body(chunks: Sequence[StreamChunk]) -> Optional[JsonDict]:
    """Fold chat completion chunks into a ``chat.completion`` body.

    The first chunk carrying ``choices`` is the envelope template; content and
    reasoning are concatenated per choice index, tool call fragments per
    ``(choice index, tool index)``, and the latest non-null ``usage`` wins.
    """
    response: Optional[JsonDict] = None
    usage: Optional[JsonDict] = None
    choices: Dict[int, JsonDict] = {}
    tools: Dict[int, Dict[int, JsonDict]] = {}

    for chunk in chunks:
        data = chunk.json
        if not isinstance(data, dict):
            continue
        if isinstance(data.get("usage"), dict):
            usage = copy.deepcopy(data["usage"])
        if "choices" not in data:
            continue
        if response is None:
            response = copy.deepcopy(data)
        for pos, raw_choice in enumerate(as_list(data.get("choices"))):
            choice = as_dict(raw_choice)
            index = choice.get("index", pos)
            out = choices.setdefault(index, _empty_choice(index))
            message = out["message"]
            if choice.get("finish_reason") is not None:
                out["finish_reason"] = choice["finish_reason"]
            delta = as_dict(choice.get("delta"))
            if isinstance(delta.get("role"), str):
                message["role"] = delta["role"]
            if isinstance(delta.get("content"), str):
                message["content"] += delta["content"]
            reasoning = text_or_none(delta.get("reasoning_content")) or text_or_none(delta.get("reasoning"))
            if reasoning:
                message["reasoning_content"] = message.get("reasoning_content", "") + reasoning
            if isinstance(delta.get("refusal"), str):
                message["refusal"] = (message.get("refusal") or "") + delta["refusal"]
            for tool_pos, raw_call in enumerate(as_list(delta.get("tool_calls"))):
                call = as_dict(raw_call)
                tool_index = call.get("index", tool_pos)
                slot = tools.setdefault(index, {}).setdefault(
                    tool_index, {"id": None, "type": "function", "function": {"name": None, "arguments": ""}}
                )
                if call.get("id"):
                    slot["id"] = call["id"]
                function = as_dict(call.get("function"))
                if function.get("name"):
                    slot["function"]["name"] = function["name"]
                if isinstance(function.get("arguments"), str):
                    slot["function"]["arguments"] += function["arguments"]

    if response is None:
        return None
    for index, calls in tools.items():
        message = choices.setdefault(index, _empty_choice(index))["message"]
        message["tool_calls"] = [calls[k] for k in sorted(calls)]
        if not message["content"]:
            message["content"] = None
    response["choices"] = [choices[k] for k in sorted(choices)]
    response["object"] = "chat.completion"
    if usage is not None:
        response["usage"] = usage
    return response


def extract_tokens(body: JsonDict) -> Optional[TokenCounts]:
    return extract_chat_completion_tokens(as_dict(body).get("usage"))


def _message_text(content: Any) -> str:
    if isinstance(content, str):
        return content
    parts = [as_dict(p).get("text") for p in as_list(content)]
    return "".join(p for p in parts if isinstance(p, str))


def parse_response(body: JsonDict) -> NormalizedResponse:
    body = as_dict(body)
    choice = first(body.get("choices"))
    message = as_dict(choice.get("message"))
    tool_calls = []
    for pos, raw_call in enumerate(as_list(message.get("tool_calls"))):
        call = as_dict(raw_call)
        function = as_dict(call.get("function"))
        raw_args = function.get("arguments")
        if isinstance(raw_args, dict):
            arguments, raw_args = raw_args, json.dumps(raw_args)
        else:
            raw_args = raw_args if isinstance(raw_args, str) else ""
            arguments = parse_arguments(raw_args)
        tool_calls.append(
            ToolCall(
                id=call.get("id") or f"call_{pos}",
                name=function.get("name") or "",
                arguments=arguments,
                raw_arguments=raw_args,
            )
        )
    reasoning = text_or_none(message.get("reasoning_content")) or text_or_none(message.get("reasoning"))
    return NormalizedResponse(
        content=_message_text(message.get("content")),
        reasoning=reasoning or None,
        tool_calls=tool_calls or None,
        finish_reason=text_or_none(choice.get("finish_reason")),
        tokens=extract_tokens(body),
        model=text_or_none(body.get("model")),
        response_id=text_or_none(body.get("id")),
    )


def to_wire_messages(messages: Sequence[MessageDTO]) -> List[JsonDict]:
    wire: List[JsonDict] = []
    for msg in messages:
        item: JsonDict = {"role": msg.role, "content": msg.content}
        if msg.name:
            item["name"] = msg.name
        if msg.role == "tool":
            item["tool_call_id"] = msg.tool_call_id
        if msg.tool_calls:
            item["content"] = msg.content or None
            item["tool_calls"] = [
                {
                    "id": call.id,
                    "type": "function",
                    "function": {"name": call.name, "arguments": json.dumps(call.arguments)},
                }
                for call in msg.tool_calls
            ]
        wire.append(item)
    return wire


def build_payload(messages: Sequence[MessageDTO], model: str, stream: bool = False, **params: Any) -> JsonDict:
    payload: JsonDict = {"model": model, "messages": to_wire_messages(messages)}
    if stream:
        payload["stream"] = True
        payload["stream_options"] = {"include_usage": True}
    payload.update(params)
    return payload


def build_url(base_url: str, model: str, stream: bool = False) -> str:
    return join_url(base_url, ENDPOINT)


OPS = SchemaOps(
    kind=SchemaKind.CHAT_COMPLETION,
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
    token_policy=TokenPolicy.ADDITIVE,
    stops_stream=stops_stream,
)

__all__ = [
    "OPS",
    "ENDPOINT",
    "is_start",
    "is_done",
    "stops_stream",
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
