"""Unit tests for streamed tool-call reassembly."""
from __future__ import annotations

from aigen_providers.base.models import ToolCallDelta
from aigen_providers.base.streaming.tool_calls import ToolCallAccumulator, parse_arguments


def test_fragments_concatenate_and_parse_once():
    acc = ToolCallAccumulator()
    acc.apply(ToolCallDelta(index=0, id="call_a", name="get_weather"))
    for part in ('{"city":', '"NYC"', "}"):
        acc.apply(ToolCallDelta(index=0, arguments=part))
    (call,) = acc.finalize()
    assert call.id == "call_a"  # nosec B101
    assert call.name == "get_weather"  # nosec B101
    assert call.arguments == {"city": "NYC"}  # nosec B101
    assert call.raw_arguments == '{"city":"NYC"}'  # nosec B101


def test_calls_ordered_by_index_and_default_ids():
    acc = ToolCallAccumulator()
    acc.extend(
        [
            ToolCallDelta(index=2, name="second", arguments="{}"),
            ToolCallDelta(index=0, name="first", arguments='{"a": 1}'),
        ]
    )
    calls = acc.finalize()
    assert [c.name for c in calls] == ["first", "second"]  # nosec B101
    assert calls[0].id == "call_0"  # nosec B101
    assert calls[1].id == "call_2"  # nosec B101
    assert len(acc) == 2  # nosec B101


def test_invalid_or_empty_arguments_parse_to_empty_dict():
    assert parse_arguments("") == {}  # nosec B101
    assert parse_arguments('{"a":') == {}  # nosec B101
    assert parse_arguments("[1, 2]") == {}  # nosec B101


def test_raw_arguments_and_empty_accumulator():
    acc = ToolCallAccumulator()
    assert not acc  # nosec B101
    assert acc.raw_arguments(0) == ""  # nosec B101
    acc.apply(ToolCallDelta(index=0, arguments='{"x"'))
    assert acc.raw_arguments(0) == '{"x"'  # nosec B101
    assert acc.finalize()[0].arguments == {}  # nosec B101
