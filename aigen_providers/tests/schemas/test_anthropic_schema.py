"""Anthropic schema: typed events, cumulative usage and tool_use reassembly."""
from __future__ import annotations

import json

from aigen_providers.base.dto import MessageDTO, ToolCallDTO, normalize_messages
from aigen_providers.base.models import TokenCounts
from aigen_providers.base.streaming.sse import parse_sse_message
from aigen_providers.base.tokens import TokenAccumulator, TokenPolicy
from aigen_providers.schemas import anthropic as an


def _event(name, obj):
    return parse_sse_message(f"event: {name}\ndata: {json.dumps({'type': name, **obj})}")


MESSAGE_START = _event(
    "message_start",
    {"message": {"id": "msg_1", "type": "message", "role": "assistant", "model": "claude-x", "content": [],
                 "stop_reason": None, "usage": {"input_tokens": 5, "output_tokens": 1}}},
)

HELLO = [
    MESSAGE_START,
    _event("content_block_start", {"index": 0, "content_block": {"type": "text", "text": ""}}),
    _event("content_block_delta", {"index": 0, "delta": {"type": "text_delta", "text": "Hello"}}),
    _event("content_block_delta", {"index": 0, "delta": {"type": "text_delta", "text": " world"}}),
    _event("content_block_stop", {"index": 0}),
    _event("message_delta", {"delta": {"stop_reason": "end_turn"}, "usage": {"output_tokens": 2}}),
    _event("message_stop", {}),
]


def test_classifiers():
    assert an.is_start(HELLO[0])  # nosec B101
    assert an.extract_model(HELLO[0]) == "claude-x"  # nosec B101
    assert an.extract_content(HELLO[2]) == "Hello"  # nosec B101
    assert an.extract_content(HELLO[1]) is None  # nosec B101
    assert an.extract_stop_reason(HELLO[5]) == "end_turn"  # nosec B101
    assert an.is_done(HELLO[6])  # nosec B101
    assert not an.is_done(HELLO[5])  # nosec B101


def test_thinking_is_reasoning_not_content():
    chunk = _event("content_block_delta", {"index": 0, "delta": {"type": "thinking_delta", "thinking": "hmm"}})
    assert an.extract_reasoning(chunk) == "hmm"  # nosec B101
    assert an.extract_content(chunk) is None  # nosec B101


def test_usage_readings_are_cumulative():
    acc = TokenAccumulator(an.OPS.token_policy)
    for chunk in HELLO:
        acc.add(an.extract_usage(chunk))
    assert an.OPS.token_policy is TokenPolicy.CUMULATIVE  # nosec B101
    assert acc.total == TokenCounts(prompt_tokens=5, completion_tokens=2)  # nosec B101


def test_output_tokens_replace_rather_than_add():
    acc = TokenAccumulator(TokenPolicy.CUMULATIVE)
    acc.add(an.extract_usage(_event("message_delta", {"delta": {}, "usage": {"output_tokens": 5}})))
    acc.add(an.extract_usage(_event("message_delta", {"delta": {}, "usage": {"output_tokens": 12}})))
    assert acc.total.completion_tokens == 12  # nosec B101


def test_streamed_body_matches_buffered_parse():
    body = an.build_response_body(HELLO)
    buffered = {
        "id": "msg_1",
        "model": "claude-x",
        "content": [{"type": "text", "text": "Hello world"}],
        "stop_reason": "end_turn",
        "usage": {"input_tokens": 5, "output_tokens": 2},
    }
    streamed = an.parse_response(body)
    expected = an.parse_response(buffered)
    assert streamed.content == expected.content == "Hello world"  # nosec B101
    assert streamed.finish_reason == expected.finish_reason == "end_turn"  # nosec B101
    assert streamed.tokens == expected.tokens == TokenCounts(prompt_tokens=5, completion_tokens=2)  # nosec B101


def test_tool_use_fragments_reassembled():
    chunks = [
        MESSAGE_START,
        _event("content_block_start", {"index": 1, "content_block": {"type": "tool_use", "id": "toolu_1",
                                                                     "name": "get_weather", "input": {}}}),
        _event("content_block_delta", {"index": 1, "delta": {"type": "input_json_delta", "partial_json": '{"city":'}}),
        _event("content_block_delta", {"index": 1, "delta": {"type": "input_json_delta", "partial_json": '"NYC"'}}),
        _event("content_block_delta", {"index": 1, "delta": {"type": "input_json_delta", "partial_json": "}"}}),
        _event("message_delta", {"delta": {"stop_reason": "tool_use"}, "usage": {"output_tokens": 9}}),
        _event("message_stop", {}),
    ]
    deltas = an.extract_tool_deltas(chunks[1])
    assert deltas[0].name == "get_weather"  # nosec B101
    assert an.extract_tool_deltas(chunks[2])[0].arguments == '{"city":'  # nosec B101
    body = an.build_response_body(chunks)
    assert [b["type"] for b in body["content"]] == ["tool_use"]  # nosec B101
    result = an.parse_response(body)
    assert result.tool_calls[0].arguments == {"city": "NYC"}  # nosec B101
    assert result.tool_calls[0].id == "toolu_1"  # nosec B101
    assert result.finish_reason == "tool_use"  # nosec B101


def test_thinking_block_precedes_text_with_signature():
    chunks = [
        MESSAGE_START,
        _event("content_block_delta", {"index": 0, "delta": {"type": "thinking_delta", "thinking": "plan"}}),
        _event("content_block_delta", {"index": 0, "delta": {"type": "signature_delta", "signature": "sig"}}),
        _event("content_block_delta", {"index": 1, "delta": {"type": "text_delta", "text": "answer"}}),
    ]
    body = an.build_response_body(chunks)
    assert body["content"][0] == {"type": "thinking", "thinking": "plan", "signature": "sig"}  # nosec B101
    result = an.parse_response(body)
    assert result.reasoning == "plan"  # nosec B101
    assert result.content == "answer"  # nosec B101


def test_build_payload_maps_system_and_tools():
    messages = normalize_messages(
        [
            {"role": "user", "content": "weather?"},
            MessageDTO(role="assistant", content="", tool_calls=[ToolCallDTO(id="t1", name="w", arguments={"c": 1})]),
            MessageDTO(role="tool", content="sunny", tool_call_id="t1"),
        ],
        sys_msg="be brief",
    )
    payload = an.build_payload(messages, "claude-x", True)
    assert payload["system"] == "be brief"  # nosec B101
    assert payload["max_tokens"] == 1000  # nosec B101
    assert payload["stream"] is True  # nosec B101
    assert payload["messages"][1]["content"][0]["type"] == "tool_use"  # nosec B101
    assert payload["messages"][2]["content"][0] == {"type": "tool_result", "tool_use_id": "t1", "content": "sunny"}  # nosec B101
    assert an.build_payload(messages, "claude-x", False, max_tokens=50)["max_tokens"] == 50  # nosec B101
    assert an.build_url("https://api.anthropic.com", "claude-x", True) == "https://api.anthropic.com/v1/messages"  # nosec B101
