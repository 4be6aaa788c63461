"""Cost/Token post-processor.

Applies per-token endpoint prices to the final, non-overlapping
:class:`TokenCounts` of a call. Price values come from catalogs as strings or
numbers and are parsed leniently; an unparseable value counts as free.

Cost = sum(field * price) over prompt, cache read, cache write, completion,
reasoning and cached audio, then multiplied by ``1 - discount`` when a
positive discount is set. A reasoning price missing from the table falls back
to the completion price.
"""
from __future__ import annotations

import logging
from typing import Any, Optional, Union

from .logging import get_logger, log_event
from .models import Pricing, ProviderEndpoint, TokenCounts

_log = get_logger("aigen.costs")


def parse_price(value: Any) -> float:
    """Return ``value`` as a float price; ``None`` and junk become 0.0."""
    if value is None or isinstance(value, bool):
        return 0.0
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value.strip())
        except ValueError:
            return 0.0
    return 0.0


def calculate_cost(
    pricing: Union[Pricing, ProviderEndpoint, None],
    tokens: Optional[TokenCounts],
) -> Optional[float]:
    """Return the USD cost of ``tokens`` under ``pricing``.

    Accepts a bare :class:`Pricing` or a :class:`ProviderEndpoint`. Returns
    ``None`` when tokens or pricing are missing or the computed cost is zero.
    An endpoint whose pricing yields zero is logged at WARNING since it
    usually means a stale or incomplete price table.
    """
    if tokens is None or pricing is None:
        return None
    endpoint: Optional[ProviderEndpoint] = None
    if isinstance(pricing, ProviderEndpoint):
        endpoint, pricing = pricing, pricing.pricing

    reasoning_price = pricing.internal_reasoning if pricing.internal_reasoning is not None else pricing.completion
    total = 0.0
    total += tokens.prompt_tokens * parse_price(pricing.prompt)
    total += tokens.input_cache_read * parse_price(pricing.input_cache_read)
    total += tokens.input_cache_write * parse_price(pricing.input_cache_write)
    total += tokens.completion_tokens * parse_price(pricing.completion)
    total += tokens.internal_reasoning * parse_price(reasoning_price)
    total += tokens.input_audio_cache * parse_price(pricing.input_audio_cache)

    discount = parse_price(pricing.discount)
    if discount > 0.0:
        total *= 1.0 - discount

    if total > 0.0:
        return total
    if endpoint is not None:
        log_event(
            _log,
            "cost.zero",
            level=logging.WARNING,
            provider=endpoint.provider_name or None,
            model=endpoint.model_name or None,
            tokens=tokens.to_dict(),
        )
    return None


def format_cost(cost: Optional[float]) -> str:
    """Human-readable cost with enough precision for sub-cent amounts."""
    if cost is None:
        return "-"
    return f"{cost:.6f}" if cost < 0.01 else f"{cost:.4f}"


__all__ = ["parse_price", "calculate_cost", "format_cost"]
