"""Provider registry.

Maps a provider slug (``"openai"``, ``"anthropic"``, ...) onto a validated
:class:`ProviderInfo`: base URL, auth header style, API key env var, default
headers, wire schema and an optional model-name transform.

The registry is read-mostly. ``register_provider`` and ``remove_provider``
exist for local servers and tests; entries are validated by pydantic on
registration.
"""

from __future__ import annotations

import re
import threading
from typing import Callable, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from ..base.constants import ANTHROPIC_API_VERSION
from ..base.tokens import TokenPolicy
from ..schemas.ops import SchemaKind
from .defaults import (
    ANTHROPIC_DEFAULT_BASE_URL,
    AZURE_API_VERSION,
    AZURE_DEFAULT_BASE_URL,
    CEREBRAS_DEFAULT_BASE_URL,
    DEEPINFRA_DEFAULT_BASE_URL,
    DEEPSEEK_DEFAULT_BASE_URL,
    FIREWORKS_DEFAULT_BASE_URL,
    GEMINI_DEFAULT_BASE_URL,
    GROQ_DEFAULT_BASE_URL,
    MISTRAL_DEFAULT_BASE_URL,
    MOONSHOT_DEFAULT_BASE_URL,
    NVIDIA_DEFAULT_BASE_URL,
    OLLAMA_DEFAULT_BASE_URL,
    OPENAI_DEFAULT_BASE_URL,
    OPENROUTER_DEFAULT_BASE_URL,
    PERPLEXITY_DEFAULT_BASE_URL,
    SAMBANOVA_DEFAULT_BASE_URL,
    TOGETHER_DEFAULT_BASE_URL,
    XAI_DEFAULT_BASE_URL,
)

AuthHeaderFormat = Literal["Bearer", "x-api-key", "x-goog-api-key", "api-key", "none"]

_VERSION_DOT = re.compile(r"(\d+)\.(\d+)")


def anthropic_model_transform(model_id: str) -> str:
    """Anthropic ids use dashes in version numbers: ``4.5`` -> ``4-5``."""
    return _VERSION_DOT.sub(r"\1-\2", model_id)


def google_model_transform(model_id: str) -> str:
    return model_id[len("google/"):] if model_id.startswith("google/") else model_id


class ProviderInfo(BaseModel):
    """Static description of one provider.

    Attributes:
        name: Lowercase registry slug.
        base_url: API root; schema endpoints are appended to it.
        auth_header_format: How the API key is sent. ``"none"`` sends nothing
            (local servers).
        api_key_env_var: Canonical environment variable holding the key, or
            ``None`` when the provider needs no key.
        default_headers: Headers sent with every request.
        api_schema: Wire protocol spoken by the provider.
        token_policy: Override of the schema's default usage policy.
        model_transform: Optional provider-specific model id rewrite.
        notes: Free-form description.
    """

    model_config = ConfigDict(frozen=True, protected_namespaces=())

    name: str = Field(..., min_length=1)
    base_url: str = Field(..., min_length=1)
    auth_header_format: AuthHeaderFormat = "Bearer"
    api_key_env_var: Optional[str] = None
    default_headers: Dict[str, str] = Field(default_factory=dict)
    api_schema: SchemaKind = SchemaKind.CHAT_COMPLETION
    token_policy: Optional[TokenPolicy] = None
    model_transform: Optional[Callable[[str], str]] = None
    notes: str = ""

    def transform_model(self, model_id: str) -> str:
        return self.model_transform(model_id) if self.model_transform else model_id

    def auth_headers(self, api_key: Optional[str]) -> Dict[str, str]:
        """Return the auth header for ``api_key`` (empty when not applicable)."""
        if not api_key or self.auth_header_format == "none":
            return {}
        if self.auth_header_format == "Bearer":
            return {"Authorization": f"Bearer {api_key}"}
        return {self.auth_header_format: api_key}

    def build_headers(self, api_key: Optional[str]) -> Dict[str, str]:
        """Auth header, default headers and ``Content-Type`` for a JSON request."""
        headers = {"Content-Type": "application/json"}
        headers.update(self.auth_headers(api_key))
        headers.update(self.default_headers)
        return headers


def _openai_compatible(name: str, base_url: str, env_var: Optional[str], notes: str = "OpenAI-compatible API") -> ProviderInfo:
    return ProviderInfo(name=name, base_url=base_url, api_key_env_var=env_var, notes=notes)


_DEFAULT_PROVIDERS: List[ProviderInfo] = [
    _openai_compatible("openai", OPENAI_DEFAULT_BASE_URL, "OPENAI_API_KEY"),
    _openai_compatible("openrouter", OPENROUTER_DEFAULT_BASE_URL, "OPENROUTER_API_KEY"),
    _openai_compatible("mistral", MISTRAL_DEFAULT_BASE_URL, "MISTRAL_API_KEY"),
    _openai_compatible("fireworks", FIREWORKS_DEFAULT_BASE_URL, "FIREWORKS_API_KEY"),
    _openai_compatible("together", TOGETHER_DEFAULT_BASE_URL, "TOGETHER_API_KEY"),
    _openai_compatible("groq", GROQ_DEFAULT_BASE_URL, "GROQ_API_KEY"),
    _openai_compatible("deepseek", DEEPSEEK_DEFAULT_BASE_URL, "DEEPSEEK_API_KEY"),
    _openai_compatible("cerebras", CEREBRAS_DEFAULT_BASE_URL, "CEREBRAS_API_KEY"),
    _openai_compatible("sambanova", SAMBANOVA_DEFAULT_BASE_URL, "SAMBANOVA_API_KEY"),
    _openai_compatible("xai", XAI_DEFAULT_BASE_URL, "XAI_API_KEY"),
    _openai_compatible("moonshotai", MOONSHOT_DEFAULT_BASE_URL, "MOONSHOT_API_KEY"),
    _openai_compatible("deepinfra", DEEPINFRA_DEFAULT_BASE_URL, "DEEPINFRA_API_KEY"),
    _openai_compatible("nvidia", NVIDIA_DEFAULT_BASE_URL, "NVIDIA_API_KEY"),
    _openai_compatible("perplexity", PERPLEXITY_DEFAULT_BASE_URL, "PERPLEXITY_API_KEY"),
    ProviderInfo(
        name="ollama",
        base_url=OLLAMA_DEFAULT_BASE_URL,
        auth_header_format="none",
        notes="Local OpenAI-compatible server; no key",
    ),
    ProviderInfo(
        name="anthropic",
        base_url=ANTHROPIC_DEFAULT_BASE_URL,
        auth_header_format="x-api-key",
        api_key_env_var="ANTHROPIC_API_KEY",
        default_headers={"anthropic-version": ANTHROPIC_API_VERSION},
        api_schema=SchemaKind.ANTHROPIC,
        model_transform=anthropic_model_transform,
        notes="Anthropic messages API",
    ),
    ProviderInfo(
        name="google-ai-studio",
        base_url=GEMINI_DEFAULT_BASE_URL,
        auth_header_format="x-goog-api-key",
        api_key_env_var="GOOGLE_API_KEY",
        api_schema=SchemaKind.GEMINI,
        model_transform=google_model_transform,
        notes="Gemini generateContent API, not OpenAI-compatible",
    ),
    ProviderInfo(
        name="azure",
        base_url=AZURE_DEFAULT_BASE_URL,
        auth_header_format="api-key",
        api_key_env_var="AZURE_OPENAI_API_KEY",
        default_headers={"api-version": AZURE_API_VERSION},
        notes="Resource-specific host; override base_url",
    ),
]

_REGISTRY: Dict[str, ProviderInfo] = {p.name: p for p in _DEFAULT_PROVIDERS}
_LOCK = threading.RLock()


def register_provider(info: ProviderInfo) -> ProviderInfo:
    """Add or replace a provider entry. The slug is stored lowercase."""
    entry = info if info.name == info.name.lower() else info.model_copy(update={"name": info.name.lower()})
    with _LOCK:
        _REGISTRY[entry.name] = entry
    return entry


def remove_provider(name: str) -> Optional[ProviderInfo]:
    with _LOCK:
        return _REGISTRY.pop((name or "").lower(), None)


def list_providers() -> List[str]:
    return sorted(_REGISTRY)


def get_provider_info(name: str) -> Optional[ProviderInfo]:
    """Return the entry for ``name`` (case-insensitive) or ``None``."""
    return _REGISTRY.get((name or "").strip().lower())


def reset_registry() -> None:
    """Restore the built-in provider list."""
    with _LOCK:
        _REGISTRY.clear()
        _REGISTRY.update({p.name: p for p in _DEFAULT_PROVIDERS})


__all__ = [
    "AuthHeaderFormat",
    "ProviderInfo",
    "anthropic_model_transform",
    "google_model_transform",
    "register_provider",
    "remove_provider",
    "list_providers",
    "get_provider_info",
    "reset_registry",
]
