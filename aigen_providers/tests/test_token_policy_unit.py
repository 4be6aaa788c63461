"""Unit tests for TokenCounts and the token accumulation policies."""
from __future__ import annotations

import pytest

from aigen_providers.base.models import TokenCounts
from aigen_providers.base.tokens import TokenAccumulator, TokenPolicy, combine_tokens


def test_total_is_sum_of_disjoint_fields():
    t = TokenCounts(
        prompt_tokens=1,
        input_cache_read=2,
        input_cache_write=3,
        completion_tokens=4,
        internal_reasoning=5,
        input_audio_cache=6,
    )
    assert t.total_tokens == 21  # nosec B101
    assert t.input_total == 12  # nosec B101
    assert t.output_total == 9  # nosec B101
    assert t.to_dict()["total_tokens"] == 21  # nosec B101


def test_addition_returns_new_object():
    a = TokenCounts(prompt_tokens=1)
    b = TokenCounts(completion_tokens=2)
    c = a + b
    assert c == TokenCounts(prompt_tokens=1, completion_tokens=2)  # nosec B101
    assert a == TokenCounts(prompt_tokens=1)  # nosec B101


def test_additive_policy_sums_every_reading():
    acc = TokenAccumulator(TokenPolicy.ADDITIVE)
    for _ in range(3):
        acc.add(TokenCounts(completion_tokens=1))
    assert acc.total.completion_tokens == 3  # nosec B101
    assert acc.readings == 3  # nosec B101


def test_cumulative_policy_keeps_latest_reading():
    acc = TokenAccumulator(TokenPolicy.CUMULATIVE)
    acc.add(TokenCounts(prompt_tokens=10, completion_tokens=5))
    acc.add(TokenCounts(prompt_tokens=10, completion_tokens=12))
    assert acc.total.completion_tokens == 12  # nosec B101
    assert acc.total.prompt_tokens == 10  # nosec B101


def test_cumulative_keeps_input_when_new_reading_has_none():
    acc = TokenAccumulator(TokenPolicy.CUMULATIVE)
    acc.add(TokenCounts(prompt_tokens=25, input_cache_read=3, completion_tokens=1))
    acc.add(TokenCounts(completion_tokens=15))
    assert acc.total == TokenCounts(prompt_tokens=25, input_cache_read=3, completion_tokens=15)  # nosec B101


def test_none_reading_is_ignored():
    acc = TokenAccumulator(TokenPolicy.ADDITIVE)
    assert acc.add(None) is None  # nosec B101
    acc.add(TokenCounts(completion_tokens=2))
    assert acc.add(None).completion_tokens == 2  # nosec B101
    assert acc.readings == 1  # nosec B101


def test_heuristic_resolves_cumulative_and_locks():
    acc = TokenAccumulator(TokenPolicy.HEURISTIC)
    assert acc.resolved_policy is None  # nosec B101
    acc.add(TokenCounts(completion_tokens=5))
    acc.add(TokenCounts(completion_tokens=8))
    assert acc.resolved_policy is TokenPolicy.CUMULATIVE  # nosec B101
    # a smaller later reading does not flip the decision
    acc.add(TokenCounts(completion_tokens=2))
    assert acc.resolved_policy is TokenPolicy.CUMULATIVE  # nosec B101
    assert acc.total.completion_tokens == 2  # nosec B101


def test_heuristic_resolves_additive_and_locks():
    acc = TokenAccumulator(TokenPolicy.HEURISTIC)
    acc.add(TokenCounts(completion_tokens=5))
    acc.add(TokenCounts(completion_tokens=1))
    assert acc.resolved_policy is TokenPolicy.ADDITIVE  # nosec B101
    acc.add(TokenCounts(completion_tokens=10))
    assert acc.resolved_policy is TokenPolicy.ADDITIVE  # nosec B101
    assert acc.total.completion_tokens == 16  # nosec B101


def test_policy_accepts_string_values():
    assert TokenAccumulator("cumulative").policy is TokenPolicy.CUMULATIVE  # nosec B101


def test_combine_rejects_unresolved_heuristic():
    with pytest.raises(ValueError):
        combine_tokens(TokenPolicy.HEURISTIC, TokenCounts(), TokenCounts())
