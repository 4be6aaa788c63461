"""Gemini schema: full-response chunks, thought parts and running usage."""
from __future__ import annotations

import json

from aigen_providers.base.dto import normalize_messages
from aigen_providers.base.models import TokenCounts
from aigen_providers.base.streaming.sse import parse_sse_message
from aigen_providers.base.tokens import TokenAccumulator, TokenPolicy
from aigen_providers.schemas import gemini as gm


def _chunk(parts, finish=None, usage=None):
    candidate = {"content": {"parts": parts, "role": "model"}, "index": 0}
    if finish:
        candidate["finishReason"] = finish
    obj = {"candidates": [candidate], "modelVersion": "gemini-x", "responseId": "r1"}
    if usage:
        obj["usageMetadata"] = usage
    return parse_sse_message("data: " + json.dumps(obj))


HELLO = [
    _chunk([{"text": "Hello"}], usage={"promptTokenCount": 5, "candidatesTokenCount": 1}),
    _chunk([{"text": " world"}], finish="STOP", usage={"promptTokenCount": 5, "candidatesTokenCount": 2}),
]


def test_classifiers():
    assert not gm.is_start(HELLO[0])  # nosec B101
    assert gm.extract_content(HELLO[0]) == "Hello"  # nosec B101
    assert not gm.is_done(HELLO[0])  # nosec B101
    assert gm.is_done(HELLO[1])  # nosec B101
    assert gm.extract_stop_reason(HELLO[1]) == "STOP"  # nosec B101
    assert gm.extract_model(HELLO[0]) == "gemini-x"  # nosec B101
    assert gm.extract_tool_deltas(HELLO[0]) == []  # nosec B101


def test_thought_parts_are_reasoning():
    chunk = _chunk([{"text": "pondering", "thought": True}, {"text": "answer"}])
    assert gm.extract_reasoning(chunk) == "pondering"  # nosec B101
    assert gm.extract_content(chunk) == "answer"  # nosec B101


def test_multi_part_chunk_emits_same_text_as_rebuilt_body():
    chunk = _chunk(
        [{"text": "a", "thought": True}, {"text": "Hel"}, {"text": "b", "thought": True}, {"text": "lo"}],
        finish="STOP",
    )
    assert gm.extract_content(chunk) == "Hello"  # nosec B101
    assert gm.extract_reasoning(chunk) == "ab"  # nosec B101
    result = gm.parse_response(gm.build_response_body([chunk]))
    assert result.content == gm.extract_content(chunk)  # nosec B101
    assert result.reasoning == gm.extract_reasoning(chunk)  # nosec B101


def test_running_usage_is_cumulative():
    acc = TokenAccumulator(gm.OPS.token_policy)
    for chunk in HELLO:
        acc.add(gm.extract_usage(chunk))
    assert gm.OPS.token_policy is TokenPolicy.CUMULATIVE  # nosec B101
    assert acc.total == TokenCounts(prompt_tokens=5, completion_tokens=2)  # nosec B101


def test_streamed_body_matches_buffered_parse():
    body = gm.build_response_body(HELLO)
    buffered = {
        "candidates": [{"content": {"parts": [{"text": "Hello world"}], "role": "model"}, "finishReason": "STOP"}],
        "usageMetadata": {"promptTokenCount": 5, "candidatesTokenCount": 2},
        "modelVersion": "gemini-x",
    }
    streamed = gm.parse_response(body)
    expected = gm.parse_response(buffered)
    assert streamed.content == expected.content == "Hello world"  # nosec B101
    assert streamed.finish_reason == expected.finish_reason == "STOP"  # nosec B101
    assert streamed.tokens == expected.tokens == TokenCounts(prompt_tokens=5, completion_tokens=2)  # nosec B101
    assert streamed.response_id == "r1"  # nosec B101


def test_usage_extraction_splits_cache_and_thoughts():
    usage = {"promptTokenCount": 50, "cachedContentTokenCount": 20, "candidatesTokenCount": 7, "thoughtsTokenCount": 3}
    assert gm.extract_tokens({"usageMetadata": usage}) == TokenCounts(  # nosec B101
        prompt_tokens=30, input_cache_read=20, completion_tokens=7, internal_reasoning=3
    )


def test_function_call_parts_are_not_mapped_in_either_path():
    chunk = _chunk([{"functionCall": {"name": "f", "args": {"a": 1}}}], finish="STOP")
    assert gm.extract_tool_deltas(chunk) == []  # nosec B101
    assert gm.parse_response(gm.build_response_body([chunk])).tool_calls is None  # nosec B101


def test_build_payload_and_urls():
    messages = normalize_messages("hi", sys_msg="be brief")
    payload = gm.build_payload(messages, "gemini-x", True, temperature=0.1, tools=[{"x": 1}])
    assert payload["system_instruction"] == {"parts": [{"text": "be brief"}]}  # nosec B101
    assert payload["contents"] == [{"role": "user", "parts": [{"text": "hi"}]}]  # nosec B101
    assert payload["generationConfig"] == {"temperature": 0.1}  # nosec B101
    assert payload["tools"] == [{"x": 1}]  # nosec B101
    base = "https://generativelanguage.googleapis.com/v1beta"
    assert gm.build_url(base, "gemini-x", False) == base + "/models/gemini-x:generateContent"  # nosec B101
    assert gm.build_url(base, "gemini-x", True) == base + "/models/gemini-x:streamGenerateContent?alt=sse"  # nosec B101
