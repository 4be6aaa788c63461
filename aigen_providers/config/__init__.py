"""Unified configuration layer for providers.

Merge order (later wins):

1. Built-in defaults (registry base URL, default model)
2. Optional external config file (YAML or JSON) pointed to by ``AIGEN_CONFIG_FILE``
3. Environment variables (``<PROVIDER>_API_KEY``, ``<PROVIDER>_BASE_URL``,
   ``<PROVIDER>_MODEL``; the registry's canonical key variable and its aliases)
4. In-code overrides passed to :func:`get_provider_config`

External config file
--------------------
Parsed with ``yaml.safe_load`` (JSON is valid YAML). Structure example::

    openai:
      model: gpt-4o-mini
    ollama:
      base_url: http://gpu-box:11434/v1

Provider slugs with dashes map to env prefixes with underscores
(``google-ai-studio`` -> ``GOOGLE_AI_STUDIO_BASE_URL``).
"""
from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

import yaml

from ..base.logging import get_logger
from .defaults import (
    ANTHROPIC_DEFAULT_MODEL,
    DEEPSEEK_DEFAULT_MODEL,
    GEMINI_DEFAULT_MODEL,
    OLLAMA_DEFAULT_MODEL,
    OPENAI_DEFAULT_MODEL,
    OPENROUTER_DEFAULT_MODEL,
    XAI_DEFAULT_MODEL,
)
from .env import is_placeholder, resolve_provider_key
from .registry import (
    ProviderInfo,
    get_provider_info,
    list_providers,
    register_provider,
    remove_provider,
    reset_registry,
)

CONFIG_FILE_ENV = "AIGEN_CONFIG_FILE"

DEFAULT_MODELS: Dict[str, str] = {
    "openai": OPENAI_DEFAULT_MODEL,
    "anthropic": ANTHROPIC_DEFAULT_MODEL,
    "google-ai-studio": GEMINI_DEFAULT_MODEL,
    "openrouter": OPENROUTER_DEFAULT_MODEL,
    "deepseek": DEEPSEEK_DEFAULT_MODEL,
    "xai": XAI_DEFAULT_MODEL,
    "ollama": OLLAMA_DEFAULT_MODEL,
}

ENV_FIELD_MAP = {
    "model": "MODEL",
    "base_url": "BASE_URL",
}

_FILE_CACHE: Optional[Tuple[str, Dict[str, Any]]] = None
_log = get_logger("aigen.config")


def _env_prefix(provider: str) -> str:
    return provider.upper().replace("-", "_")


def _load_external_config() -> Dict[str, Any]:
    """Return the parsed config file, cached per path. Missing file -> ``{}``."""
    global _FILE_CACHE
    path = os.getenv(CONFIG_FILE_ENV)
    if not path:
        return {}
    if _FILE_CACHE is not None and _FILE_CACHE[0] == path:
        return _FILE_CACHE[1]
    p = Path(path)
    data: Any = {}
    if p.exists():
        data = yaml.safe_load(p.read_text(encoding="utf-8")) or {}
    if not isinstance(data, dict):
        _log.warning("config file %s is not a mapping; ignoring", path)
        data = {}
    _FILE_CACHE = (path, data)
    return data


def clear_config_cache() -> None:
    global _FILE_CACHE
    _FILE_CACHE = None


def _env_overrides(provider: str, info: Optional[ProviderInfo]) -> Dict[str, Any]:
    out: Dict[str, Any] = {}
    prefix = _env_prefix(provider)
    for field, suffix in ENV_FIELD_MAP.items():
        val = os.getenv(f"{prefix}_{suffix}")
        if val:
            out[field] = val
    canonical = info.api_key_env_var if info else None
    key, env_name = resolve_provider_key(provider, canonical)
    if key is None:
        key, env_name = resolve_provider_key(provider, f"{prefix}_API_KEY")
    if key is not None:
        out["api_key"] = key
        out["api_key_env"] = env_name
    return out


def get_provider_config(provider: str, overrides: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """Return merged configuration for a provider.

    Keys: ``base_url``, ``model`` (when a default exists), ``api_key`` and
    ``api_key_env`` (when a key was found), plus anything the config file or
    overrides add. Unknown providers still merge file/env/overrides.
    """
    name = (provider or "").lower().strip()
    info = get_provider_info(name)
    cfg: Dict[str, Any] = {}

    if info is not None:
        cfg["base_url"] = info.base_url
    if name in DEFAULT_MODELS:
        cfg["model"] = DEFAULT_MODELS[name]

    file_cfg = _load_external_config().get(name)
    if isinstance(file_cfg, dict):
        cfg |= {k: v for k, v in file_cfg.items() if not (k == "api_key" and is_placeholder(v))}

    cfg |= _env_overrides(name, info)

    if overrides:
        cfg |= {k: v for k, v in overrides.items() if v is not None}

    return cfg


def get_model(provider: str) -> Optional[str]:
    return get_provider_config(provider).get("model")


__all__ = [
    "CONFIG_FILE_ENV",
    "DEFAULT_MODELS",
    "ProviderInfo",
    "clear_config_cache",
    "get_model",
    "get_provider_config",
    "get_provider_info",
    "list_providers",
    "register_provider",
    "remove_provider",
    "reset_registry",
]
