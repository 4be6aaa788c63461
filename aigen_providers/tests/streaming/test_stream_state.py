"""StreamState reducer driven without a socket.

Covers:
- Per-chunk ordering: error check, done check, callback, append.
- ChatCompletion keeps reading past the finish chunk until ``[DONE]``.
- Error frames short-circuit before the callback and before retention.
- All chunks of one read are processed even after a terminal chunk.
- Start detection for schemas without a start marker.
- Finalize equivalence with the buffered parser.
"""
from __future__ import annotations

import json
from typing import List, Tuple

import pytest

from aigen_providers.base.errors import ErrorCode, ProviderError
from aigen_providers.base.models import TokenCounts
from aigen_providers.base.streaming import ChunkEvent, StreamCallback, StreamState
from aigen_providers.base.tokens import TokenPolicy
from aigen_providers.schemas import get_schema_ops


class _Recorder(StreamCallback):
    def __init__(self) -> None:
        self.events: List[Tuple[str, ChunkEvent]] = []
        self.configured = None
        self.finished = 0

    def configure(self, ops, *, endpoint=None, provider=None, model=None) -> None:
        self.configured = (ops.kind, provider, model)

    def on_chunk(self, chunk, event) -> None:
        self.events.append((chunk.data, event))

    def on_finish(self) -> None:
        self.finished += 1


def _data(obj) -> str:
    return "data: " + json.dumps(obj) + "\n\n"


def _cc(delta, finish=None):
    return _data({"id": "c1", "model": "gpt-x", "choices": [{"index": 0, "delta": delta, "finish_reason": finish}]})


CC_STREAM = (
    _cc({"role": "assistant", "content": ""})
    + _cc({"content": "Hello"})
    + _cc({"content": " world"})
    + _cc({}, finish="stop")
    + _data({"id": "c1", "model": "gpt-x", "choices": [], "usage": {"prompt_tokens": 5, "completion_tokens": 2}})
    + "data: [DONE]\n\n"
)


def test_callback_configured_with_call_context():
    cb = _Recorder()
    StreamState(get_schema_ops("chat_completion"), callback=cb, provider="openai", model="gpt-x")
    assert cb.configured[1:] == ("openai", "gpt-x")  # nosec B101


def test_full_stream_in_one_read_processes_every_chunk():
    cb = _Recorder()
    state = StreamState(get_schema_ops("chat_completion"), callback=cb, provider="openai")
    assert state.feed(CC_STREAM) is True  # nosec B101
    assert len(state.chunks) == 6  # nosec B101
    assert state.text == "Hello world"  # nosec B101
    assert state.running_tokens == TokenCounts(prompt_tokens=5, completion_tokens=2)  # nosec B101
    result = state.finalize()
    assert result.content == "Hello world"  # nosec B101
    assert result.finish_reason == "stop"  # nosec B101
    assert result.tokens == TokenCounts(prompt_tokens=5, completion_tokens=2)  # nosec B101
    assert state.model == "gpt-x"  # nosec B101


def test_done_flag_only_after_terminal_chunk():
    state = StreamState(get_schema_ops("chat_completion"))
    assert state.feed(_cc({"role": "assistant"}) + _cc({"content": "a"})) is False  # nosec B101
    assert state.feed(_cc({}, finish="stop")) is False  # nosec B101
    assert state.done  # nosec B101
    assert state.feed("data: [DONE]\n\n") is True  # nosec B101


def test_anthropic_stops_at_message_stop():
    state = StreamState(get_schema_ops("anthropic"))
    stop = 'event: message_stop\ndata: {"type": "message_stop"}\n\n'
    assert state.feed(stop) is True  # nosec B101
    assert state.done and state.stopped  # nosec B101


def test_every_split_point_gives_same_result():
    expected = StreamState(get_schema_ops("chat_completion"))
    expected.feed(CC_STREAM)
    for i in range(0, len(CC_STREAM) + 1, 7):
        state = StreamState(get_schema_ops("chat_completion"))
        state.feed(CC_STREAM[:i])
        state.feed(CC_STREAM[i:])
        state.flush()
        assert state.text == expected.text  # nosec B101
        assert [c.data for c in state.chunks] == [c.data for c in expected.chunks]  # nosec B101


def test_error_frame_short_circuits_before_callback_and_append():
    cb = _Recorder()
    state = StreamState(get_schema_ops("chat_completion"), callback=cb, provider="openai", model="gpt-x")
    text = _cc({"role": "assistant", "content": "hi"}) + _data({"error": {"message": "overloaded"}}) + _cc({"content": "never"})
    with pytest.raises(ProviderError) as info:
        state.feed(text)
    assert info.value.code is ErrorCode.STREAM_ERROR  # nosec B101
    assert len(state.chunks) == 1  # nosec B101
    assert len(cb.events) == 1  # nosec B101
    assert state.text == "hi"  # nosec B101


def test_anthropic_error_event_raises():
    state = StreamState(get_schema_ops("anthropic"))
    with pytest.raises(ProviderError):
        state.feed('event: error\ndata: {"type": "error", "error": {"type": "overloaded_error"}}\n\n')
    assert state.chunks == []  # nosec B101


def test_start_detected_by_marker_once():
    cb = _Recorder()
    state = StreamState(get_schema_ops("chat_completion"), callback=cb)
    state.feed(CC_STREAM)
    starts = [event.is_start for _, event in cb.events]
    assert starts == [True, False, False, False, False, False]  # nosec B101


def test_start_detected_by_first_content_without_marker():
    cb = _Recorder()
    state = StreamState(get_schema_ops("gemini"), callback=cb)
    state.feed(_data({"usageMetadata": {"promptTokenCount": 3}}))
    state.feed(_data({"candidates": [{"content": {"parts": [{"text": "Hi"}]}}]}))
    state.feed(_data({"candidates": [{"content": {"parts": [{"text": "!"}]}, "finishReason": "STOP"}]}))
    assert [event.is_start for _, event in cb.events] == [False, True, False]  # nosec B101
    assert state.done  # nosec B101


def test_events_carry_running_tokens():
    cb = _Recorder()
    state = StreamState(get_schema_ops("anthropic"), callback=cb)
    state.feed(
        'event: message_start\ndata: {"type": "message_start", "message": {"id": "m", "model": "c", "usage": {"input_tokens": 5, "output_tokens": 1}}}\n\n'
        'event: message_delta\ndata: {"type": "message_delta", "delta": {"stop_reason": "end_turn"}, "usage": {"output_tokens": 7}}\n\n'
    )
    last = cb.events[-1][1]
    assert last.usage == TokenCounts(completion_tokens=7)  # nosec B101
    assert last.tokens == TokenCounts(prompt_tokens=5, completion_tokens=7)  # nosec B101
    assert last.stop_reason == "end_turn"  # nosec B101


def test_token_policy_override():
    state = StreamState(get_schema_ops("chat_completion"), token_policy=TokenPolicy.HEURISTIC)
    assert state.tokens.policy is TokenPolicy.HEURISTIC  # nosec B101


def test_flush_handles_unterminated_final_message():
    state = StreamState(get_schema_ops("chat_completion"))
    state.feed(_cc({"role": "assistant", "content": "x"}) + "data: [DONE]")
    assert state.done is False  # nosec B101
    assert state.spillover == "data: [DONE]"  # nosec B101
    assert state.flush() is True  # nosec B101
    assert state.spillover == ""  # nosec B101


def test_finalize_without_body_uses_buffers():
    state = StreamState(get_schema_ops("chat_completion"))
    state.feed("data: not json\n\n")
    result = state.finalize()
    assert result.content == ""  # nosec B101
    assert result.tokens is None  # nosec B101
