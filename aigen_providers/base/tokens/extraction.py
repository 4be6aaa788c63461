"""Token usage extraction helpers.

Convert each vendor's ``usage`` mapping into a :class:`TokenCounts` whose
fields never overlap. Vendors report cache and reasoning tokens *inside* the
prompt/completion totals, so those slices are subtracted out here:

ChatCompletion
    ``prompt_tokens`` minus ``prompt_tokens_details.cached_tokens`` minus
    ``prompt_tokens_details.cache_write_tokens``; ``completion_tokens`` minus
    ``completion_tokens_details.reasoning_tokens``. Cached audio tokens
    cannot be told apart and stay at zero.
Anthropic
    ``input_tokens``, ``cache_read_input_tokens``,
    ``cache_creation_input_tokens`` and ``output_tokens`` are already disjoint.
Gemini
    ``promptTokenCount`` minus ``cachedContentTokenCount``;
    ``candidatesTokenCount``; ``thoughtsTokenCount``.
Responses
    ``input_tokens`` minus ``input_tokens_details.cached_tokens``;
    ``output_tokens`` minus ``output_tokens_details.reasoning_tokens``.

Failure Modes
-------------
Missing or non-numeric values count as zero. A missing or non-mapping usage
object yields ``None``. Subtractions clamp at zero. These helpers never raise.
"""

from __future__ import annotations

from typing import Any, Mapping, Optional

from ..models import TokenCounts


def _coerce_int(value: Any) -> int:
    """Coerce ``value`` to a non-negative ``int``; anything else becomes 0."""
    if value is None or isinstance(value, bool):
        return 0
    try:
        iv = int(value)
    except (TypeError, ValueError):
        return 0
    return iv if iv >= 0 else 0


def _details(usage: Mapping[str, Any], key: str) -> Mapping[str, Any]:
    details = usage.get(key)
    return details if isinstance(details, Mapping) else {}


def extract_chat_completion_tokens(usage: Any) -> Optional[TokenCounts]:
    """Map an OpenAI-style chat completion ``usage`` object."""
    if not isinstance(usage, Mapping):
        return None
    prompt_details = _details(usage, "prompt_tokens_details")
    completion_details = _details(usage, "completion_tokens_details")
    cached = _coerce_int(prompt_details.get("cached_tokens"))
    cache_write = _coerce_int(prompt_details.get("cache_write_tokens"))
    reasoning = _coerce_int(completion_details.get("reasoning_tokens"))
    prompt = _coerce_int(usage.get("prompt_tokens"))
    completion = _coerce_int(usage.get("completion_tokens"))
    return TokenCounts(
        prompt_tokens=max(prompt - cached - cache_write, 0),
        input_cache_read=cached,
        input_cache_write=cache_write,
        completion_tokens=max(completion - reasoning, 0),
        internal_reasoning=reasoning,
    )


def extract_anthropic_tokens(usage: Any) -> Optional[TokenCounts]:
    """Map an Anthropic ``usage`` object (fields are already disjoint)."""
    if not isinstance(usage, Mapping):
        return None
    return TokenCounts(
        prompt_tokens=_coerce_int(usage.get("input_tokens")),
        input_cache_read=_coerce_int(usage.get("cache_read_input_tokens")),
        input_cache_write=_coerce_int(usage.get("cache_creation_input_tokens")),
        completion_tokens=_coerce_int(usage.get("output_tokens")),
    )


def extract_gemini_tokens(usage: Any) -> Optional[TokenCounts]:
    """Map a Gemini ``usageMetadata`` object."""
    if not isinstance(usage, Mapping):
        return None
    cached = _coerce_int(usage.get("cachedContentTokenCount"))
    prompt = _coerce_int(usage.get("promptTokenCount"))
    return TokenCounts(
        prompt_tokens=max(prompt - cached, 0),
        input_cache_read=cached,
        completion_tokens=_coerce_int(usage.get("candidatesTokenCount")),
        internal_reasoning=_coerce_int(usage.get("thoughtsTokenCount")),
    )


def extract_responses_tokens(usage: Any) -> Optional[TokenCounts]:
    """Map an OpenAI Responses API ``usage`` object."""
    if not isinstance(usage, Mapping):
        return None
    cached = _coerce_int(_details(usage, "input_tokens_details").get("cached_tokens"))
    reasoning = _coerce_int(_details(usage, "output_tokens_details").get("reasoning_tokens"))
    return TokenCounts(
        prompt_tokens=max(_coerce_int(usage.get("input_tokens")) - cached, 0),
        input_cache_read=cached,
        completion_tokens=max(_coerce_int(usage.get("output_tokens")) - reasoning, 0),
        internal_reasoning=reasoning,
    )


__all__ = [
    "extract_chat_completion_tokens",
    "extract_anthropic_tokens",
    "extract_gemini_tokens",
    "extract_responses_tokens",
]
