"""Token accumulation policy.

Vendors disagree on what a streamed usage reading means. Some send deltas
(each reading must be added), some repeat running totals (each reading
replaces the previous one). :class:`TokenPolicy` names the rule and
:class:`TokenAccumulator` applies it to the successive readings of one stream.

``HEURISTIC`` is for vendors whose behaviour is unknown: the mode is chosen
once, when the second reading arrives (a completion count greater than or
equal to the running one means cumulative, otherwise delta), and then kept
for the remainder of the stream.
"""
from __future__ import annotations

from enum import Enum
from typing import Optional

from ..models import TokenCounts


class TokenPolicy(str, Enum):
    ADDITIVE = "additive"
    CUMULATIVE = "cumulative"
    HEURISTIC = "heuristic"


def combine_tokens(policy: TokenPolicy, current: Optional[TokenCounts], new: TokenCounts) -> TokenCounts:
    """Combine one reading into ``current`` with a fixed (non heuristic) rule.

    Cumulative replacement keeps the input-side fields of ``current`` when
    ``new`` reports none (Anthropic ``message_delta`` only carries output).
    """
    if current is None:
        return new
    if policy is TokenPolicy.ADDITIVE:
        return current + new
    if policy is TokenPolicy.CUMULATIVE:
        if not new.has_input() and current.has_input():
            return new.with_input_from(current)
        return new
    raise ValueError(f"combine_tokens needs a resolved policy, got {policy!r}")


class TokenAccumulator:
    """Running token total for a single stream."""

    def __init__(self, policy: TokenPolicy = TokenPolicy.ADDITIVE) -> None:
        self.policy = TokenPolicy(policy)
        self._resolved: Optional[TokenPolicy] = None if self.policy is TokenPolicy.HEURISTIC else self.policy
        self._readings = 0
        self.total: Optional[TokenCounts] = None

    @property
    def resolved_policy(self) -> Optional[TokenPolicy]:
        """Effective rule; ``None`` while a heuristic policy is undecided."""
        return self._resolved

    @property
    def readings(self) -> int:
        return self._readings

    def add(self, reading: Optional[TokenCounts]) -> Optional[TokenCounts]:
        """Fold one usage reading in and return the new running total."""
        if reading is None:
            return self.total
        self._readings += 1
        if self.total is None:
            self.total = reading
            return self.total
        if self._resolved is None:
            cumulative = reading.completion_tokens >= self.total.completion_tokens
            self._resolved = TokenPolicy.CUMULATIVE if cumulative else TokenPolicy.ADDITIVE
        self.total = combine_tokens(self._resolved, self.total, reading)
        return self.total


__all__ = ["TokenPolicy", "TokenAccumulator", "combine_tokens"]
