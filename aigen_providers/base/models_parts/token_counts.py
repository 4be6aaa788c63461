"""
TokenCounts value object.

Every field counts a disjoint slice of the usage reported by a provider, so
``total_tokens`` is a plain sum and no field double-counts another:

* ``prompt_tokens`` - input tokens that were neither read from nor written to cache
* ``input_cache_read`` - input tokens served from the prompt cache
* ``input_cache_write`` - input tokens written to the prompt cache
* ``completion_tokens`` - visible output tokens (reasoning excluded)
* ``internal_reasoning`` - hidden reasoning/thinking output tokens
* ``input_audio_cache`` - cached audio input tokens

Instances are frozen; combining two readings always returns a new object.
"""
from __future__ import annotations

from dataclasses import dataclass, asdict, replace
from typing import Any, Dict

INPUT_FIELDS = ("prompt_tokens", "input_cache_read", "input_cache_write", "input_audio_cache")
OUTPUT_FIELDS = ("completion_tokens", "internal_reasoning")


@dataclass(frozen=True)
class TokenCounts:
    """Non-overlapping token usage counts for one request."""

    prompt_tokens: int = 0
    input_cache_read: int = 0
    input_cache_write: int = 0
    completion_tokens: int = 0
    internal_reasoning: int = 0
    input_audio_cache: int = 0

    @property
    def total_tokens(self) -> int:
        return (
            self.prompt_tokens
            + self.input_cache_read
            + self.input_cache_write
            + self.completion_tokens
            + self.internal_reasoning
            + self.input_audio_cache
        )

    @property
    def input_total(self) -> int:
        return sum(getattr(self, name) for name in INPUT_FIELDS)

    @property
    def output_total(self) -> int:
        return sum(getattr(self, name) for name in OUTPUT_FIELDS)

    def has_input(self) -> bool:
        """True when any input-side field is non-zero."""
        return self.input_total > 0

    def __add__(self, other: "TokenCounts") -> "TokenCounts":
        if not isinstance(other, TokenCounts):
            return NotImplemented
        return TokenCounts(
            prompt_tokens=self.prompt_tokens + other.prompt_tokens,
            input_cache_read=self.input_cache_read + other.input_cache_read,
            input_cache_write=self.input_cache_write + other.input_cache_write,
            completion_tokens=self.completion_tokens + other.completion_tokens,
            internal_reasoning=self.internal_reasoning + other.internal_reasoning,
            input_audio_cache=self.input_audio_cache + other.input_audio_cache,
        )

    def with_input_from(self, other: "TokenCounts") -> "TokenCounts":
        """Return a copy whose input-side fields are taken from ``other``."""
        return replace(self, **{name: getattr(other, name) for name in INPUT_FIELDS})

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["total_tokens"] = self.total_tokens
        return data


__all__ = ["TokenCounts", "INPUT_FIELDS", "OUTPUT_FIELDS"]
