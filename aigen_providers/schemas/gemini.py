"""Google Gemini ``generateContent`` protocol.

Streaming uses ``:streamGenerateContent?alt=sse``: every SSE message is a
full ``GenerateContentResponse`` whose candidate carries the newly generated
parts, and whose ``usageMetadata`` repeats running totals.

Function calls produced by the model are not mapped: ``functionCall`` parts
are ignored by the stream classifiers and by the buffered parser alike, so
streamed and buffered results stay identical. Tool history supplied by the
caller is still sent as ``functionCall``/``functionResponse`` parts.
"""
from __future__ import annotations

import copy
from typing import Any, List, Optional, Sequence

from ..base.dto import MessageDTO
from ..base.dto.messages import split_system
from ..base.models import NormalizedResponse, TokenCounts, ToolCallDelta
from ..base.streaming.sse import StreamChunk
from ..base.tokens import TokenPolicy, extract_gemini_tokens
from .ops import JsonDict, SchemaKind, SchemaOps, as_dict, as_list, first, join_url, text_or_none

ENDPOINT = "/models/{model}:generateContent"
GENERATION_CONFIG_KEYS = frozenset(
    {"temperature", "topP", "topK", "maxOutputTokens", "stopSequences", "candidateCount", "thinkingConfig"}
)


def _parts(candidate: JsonDict) -> List[JsonDict]:
    return [as_dict(p) for p in as_list(as_dict(candidate.get("content")).get("parts"))]


def is_start(chunk: StreamChunk) -> bool:
    return False


def is_done(chunk: StreamChunk) -> bool:
    candidates = chunk.get("candidates")
    if not isinstance(candidates, list):
        return False
    return not candidates or first(candidates).get("finishReason") is not None


def _joined_text(chunk: StreamChunk, thought: bool) -> Optional[str]:
    texts = [
        part["text"]
        for part in _parts(first(chunk.get("candidates")))
        if bool(part.get("thought")) is thought and isinstance(part.get("text"), str)
    ]
    return "".join(texts) if texts else None


def extract_content(chunk: StreamChunk) -> Optional[str]:
    return _joined_text(chunk, thought=False)


def extract_reasoning(chunk: StreamChunk) -> Optional[str]:
    return _joined_text(chunk, thought=True)


def extract_tool_deltas(chunk: StreamChunk) -> List[ToolCallDelta]:
    return []


def extract_usage(chunk: StreamChunk) -> Optional[TokenCounts]:
    return extract_gemini_tokens(chunk.get("usageMetadata"))


def extract_model(chunk: StreamChunk) -> Optional[str]:
    return text_or_none(chunk.get("modelVersion"))


def extract_stop_reason(chunk: StreamChunk) -> Optional[str]:
    return text_or_none(first(chunk.get("candidates")).get("finishReason"))


def build_response_body(chunks: Sequence[StreamChunk]) -> Optional[JsonDict]:
    """Fold Gemini stream responses into one ``GenerateContentResponse``.

    The first JSON chunk is the envelope, the latest candidate supplies the
    final state (finish reason, safety ratings), text parts are concatenated
    separately for thought and non-thought parts, and the last
    ``usageMetadata`` wins.
    """
    response: Optional[JsonDict] = None
    final_candidate: Optional[JsonDict] = None
    usage: Optional[JsonDict] = None
    content: List[str] = []
    reasoning: List[str] = []

    for chunk in chunks:
        data = chunk.json
        if not isinstance(data, dict):
            continue
        if response is None:
            response = copy.deepcopy(data)
        candidates = as_list(data.get("candidates"))
        if candidates:
            final_candidate = as_dict(candidates[0])
            for part in _parts(final_candidate):
                text = part.get("text")
                if not isinstance(text, str):
                    continue
                (reasoning if part.get("thought") else content).append(text)
        if isinstance(data.get("usageMetadata"), dict):
            usage = data["usageMetadata"]
        if isinstance(data.get("modelVersion"), str):
            response["modelVersion"] = data["modelVersion"]

    if response is None or final_candidate is None:
        return response
    candidate = copy.deepcopy(final_candidate)
    parts: List[JsonDict] = []
    if reasoning:
        parts.append({"text": "".join(reasoning), "thought": True})
    if content:
        parts.append({"text": "".join(content)})
    if parts:
        role = as_dict(candidate.get("content")).get("role", "model")
        candidate["content"] = {"parts": parts, "role": role}
    response["candidates"] = [candidate]
    if usage is not None:
        response["usageMetadata"] = copy.deepcopy(usage)
    return response


def extract_tokens(body: JsonDict) -> Optional[TokenCounts]:
    return extract_gemini_tokens(as_dict(body).get("usageMetadata"))


def parse_response(body: JsonDict) -> NormalizedResponse:
    body = as_dict(body)
    candidate = first(body.get("candidates"))
    content: List[str] = []
    reasoning: List[str] = []
    for part in _parts(candidate):
        text = part.get("text")
        if isinstance(text, str):
            (reasoning if part.get("thought") else content).append(text)
    return NormalizedResponse(
        content="".join(content),
        reasoning="".join(reasoning) or None,
        finish_reason=text_or_none(candidate.get("finishReason")),
        tokens=extract_tokens(body),
        model=text_or_none(body.get("modelVersion")),
        response_id=text_or_none(body.get("responseId")),
    )


def to_wire_contents(messages: Sequence[MessageDTO]) -> List[JsonDict]:
    contents: List[JsonDict] = []
    for msg in messages:
        if msg.role == "tool":
            name = msg.name or msg.tool_call_id
            part: JsonDict = {"functionResponse": {"name": name, "response": {"content": msg.content}}}
            contents.append({"role": "user", "parts": [part]})
            continue
        role = "model" if msg.role == "assistant" else "user"
        parts: List[JsonDict] = [{"text": msg.content}] if msg.content else []
        for call in msg.tool_calls or []:
            parts.append({"functionCall": {"name": call.name, "args": call.arguments}})
        contents.append({"role": role, "parts": parts})
    return contents


def build_payload(messages: Sequence[MessageDTO], model: str, stream: bool = False, **params: Any) -> JsonDict:
    system, rest = split_system(list(messages))
    payload: JsonDict = {"contents": to_wire_contents(rest)}
    if system is not None:
        payload["system_instruction"] = {"parts": [{"text": system}]}
    generation_config: JsonDict = dict(as_dict(params.pop("generationConfig", None)))
    for key, value in params.items():
        if key in GENERATION_CONFIG_KEYS:
            generation_config[key] = value
        else:
            payload[key] = value
    if generation_config:
        payload["generationConfig"] = generation_config
    return payload


def build_url(base_url: str, model: str, stream: bool = False) -> str:
    endpoint = ENDPOINT.format(model=model)
    if stream:
        endpoint = endpoint.replace("generateContent", "streamGenerateContent") + "?alt=sse"
    return join_url(base_url, endpoint)


OPS = SchemaOps(
    kind=SchemaKind.GEMINI,
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
