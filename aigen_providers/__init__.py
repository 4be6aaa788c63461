"""aigen_providers package

Multi-protocol LLM inference client with a streaming normalization engine.

Purpose:
    One call shape for ChatCompletion-style, Anthropic, Gemini and Responses
    API providers. Streamed and buffered calls return the same normalized
    :class:`AIMessage` (content, reasoning, tool calls, tokens, cost).

Public API (re-exported):
    - Version: ``__version__``
    - Calls: :func:`aigen`, :func:`aigen_raw`, :func:`parse_provider_model`
    - Schemas: :class:`SchemaKind`, :func:`get_schema_ops`
    - Streaming: :class:`HttpStreamCallback`, :class:`HttpStreamHooks`,
      :class:`StreamCallback`, :class:`RunInfo`
    - Models: :class:`AIMessage`, :class:`TokenCounts`, :class:`ToolCall`,
      :class:`Pricing`, :class:`ProviderEndpoint`
    - Exceptions: :class:`ProviderError`, :class:`ErrorCode`
    - Registry: :class:`ProviderInfo`, :func:`register_provider`,
      :func:`remove_provider`, :func:`list_providers`
"""

from .aigen import aigen, aigen_raw, parse_provider_model
from .base.costs import calculate_cost
from .base.errors import ErrorCode, ProviderError
from .base.models import AIMessage, Pricing, ProviderEndpoint, TokenCounts, ToolCall
from .base.streaming import HttpStreamCallback, HttpStreamHooks, RunInfo, StreamCallback
from .base.tokens import TokenPolicy
from .config.registry import ProviderInfo, list_providers, register_provider, remove_provider
from .schemas import SchemaKind, get_schema_ops

__version__ = "0.1.0"

__all__ = [
    "__version__",
    "aigen",
    "aigen_raw",
    "parse_provider_model",
    "calculate_cost",
    "ErrorCode",
    "ProviderError",
    "AIMessage",
    "Pricing",
    "ProviderEndpoint",
    "TokenCounts",
    "ToolCall",
    "HttpStreamCallback",
    "HttpStreamHooks",
    "RunInfo",
    "StreamCallback",
    "TokenPolicy",
    "ProviderInfo",
    "list_providers",
    "register_provider",
    "remove_provider",
    "SchemaKind",
    "get_schema_ops",
]
