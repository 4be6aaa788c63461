"""aigen_providers.config.env
===========================

Provider credential environment variables.

The canonical variable of a provider comes from its registry entry
(``ProviderInfo.api_key_env_var``); ``ENV_ALIASES`` lists accepted
alternatives. Helpers never raise on unknown providers or unset variables;
callers decide what a missing key means.
"""

from __future__ import annotations

import os
from typing import Dict, Iterable, Optional, Tuple

ENV_ALIASES: Dict[str, Tuple[str, ...]] = {
    "google-ai-studio": ("GOOGLE_API_KEY", "GEMINI_API_KEY"),
    "moonshotai": ("MOONSHOT_API_KEY", "MOONSHOTAI_API_KEY"),
    "azure": ("AZURE_OPENAI_API_KEY", "AZURE_API_KEY"),
}


def is_placeholder(val: Optional[str]) -> bool:
    """True when ``val`` looks like a placeholder rather than a real credential.

    Matches (case-insensitive) ``placeholder``, ``changeme``, ``example`` or a
    ``test_`` prefix.
    """
    if val is None:
        return False
    v = str(val).strip().lower()
    return "placeholder" in v or "changeme" in v or "example" in v or v.startswith("test_")


def get_env_var_candidates(provider: str, canonical: Optional[str] = None) -> Iterable[str]:
    """Yield acceptable env var names for ``provider``, canonical first."""
    p = (provider or "").lower()
    seen = set()
    for name in (canonical, *ENV_ALIASES.get(p, ())):
        if name and name not in seen:
            seen.add(name)
            yield name


def resolve_provider_key(provider: str, canonical: Optional[str] = None) -> Tuple[Optional[str], Optional[str]]:
    """Return ``(value, env_var_used)`` for the first non-empty real key.

    Placeholder values are skipped. ``(None, None)`` when nothing is set.
    """
    for name in get_env_var_candidates(provider, canonical):
        val = os.environ.get(name)
        if val and not is_placeholder(val):
            return val, name
    return None, None


__all__ = [
    "ENV_ALIASES",
    "is_placeholder",
    "get_env_var_candidates",
    "resolve_provider_key",
]
