"""Models and prompt message validation."""
from __future__ import annotations

import pytest
from pydantic import ValidationError

from aigen_providers.base.dto import MessageDTO, ToolCallDTO, normalize_messages
from aigen_providers.base.dto.messages import split_system
from aigen_providers.base.models import (
    AIMessage,
    NormalizedResponse,
    Pricing,
    ProviderEndpoint,
    TokenCounts,
    ToolCall,
)


def test_normalize_accepts_mixed_prompt_forms():
    messages = normalize_messages(
        ["hi", {"role": "assistant", "content": "hello"}, MessageDTO(role="user", content="again")],
        sys_msg="sys",
    )
    assert [m.role for m in messages] == ["system", "user", "assistant", "user"]  # nosec B101
    assert normalize_messages("solo")[0].content == "solo"  # nosec B101


def test_message_validation_rules():
    with pytest.raises(ValidationError):
        MessageDTO(role="tool", content="result")
    with pytest.raises(ValidationError):
        MessageDTO(role="user", content="x", tool_calls=[ToolCallDTO(id="1", name="f")])
    with pytest.raises(ValidationError):
        MessageDTO(role="user", content="   ")
    with pytest.raises(ValidationError):
        normalize_messages({"role": "robot", "content": "x"})
    assert MessageDTO(role="assistant", tool_calls=[ToolCallDTO(id="1", name="f")]).content == ""  # nosec B101


def test_split_system_joins_system_messages():
    system, rest = split_system(normalize_messages([{"role": "system", "content": "b"}, "q"], sys_msg="a"))
    assert system == "a\n\nb"  # nosec B101
    assert [m.role for m in rest] == ["user"]  # nosec B101
    assert split_system(normalize_messages("q"))[0] is None  # nosec B101


def test_ai_message_from_normalized():
    resp = NormalizedResponse(
        content="done",
        tool_calls=[ToolCall(id="c", name="f", arguments={"a": 1}, raw_arguments='{"a": 1}')],
        finish_reason="tool_calls",
        tokens=TokenCounts(prompt_tokens=1),
        model=None,
    )
    msg = AIMessage.from_normalized(resp, provider="openai", model="gpt-x", cost=0.1, elapsed=1.5, raw={"x": 1})
    assert msg.model == "gpt-x"  # nosec B101
    assert msg.needs_tool_execution  # nosec B101
    data = msg.to_dict()
    assert "raw" not in data  # nosec B101
    assert data["tool_calls"][0]["arguments"] == {"a": 1}  # nosec B101
    assert data["tokens"]["total_tokens"] == 1  # nosec B101


def test_endpoint_pricing_validation():
    endpoint = ProviderEndpoint.model_validate(
        {
            "name": "OpenAI | gpt-x",
            "model_name": "gpt-x",
            "provider_name": "OpenAI",
            "pricing": {"prompt": "0.000001", "completion": 0.000002, "unknown_field": "ignored"},
            "context_length": 128000,
        }
    )
    assert endpoint.pricing.prompt == "0.000001"  # nosec B101
    assert isinstance(endpoint.pricing, Pricing)  # nosec B101
    with pytest.raises(ValidationError):
        endpoint.pricing.prompt = "1"  # type: ignore[misc]
