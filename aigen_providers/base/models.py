"""
Provider-agnostic domain models (DTOs) public surface.

Re-exports the one-class-per-file implementations under
``aigen_providers.base.models_parts``.
"""

from .models_parts.token_counts import TokenCounts
from .models_parts.tool_call import ToolCall, ToolCallDelta
from .models_parts.normalized_response import NormalizedResponse
from .models_parts.ai_message import AIMessage
from .models_parts.pricing import Pricing, ProviderEndpoint

__all__ = [
    "TokenCounts",
    "ToolCall",
    "ToolCallDelta",
    "NormalizedResponse",
    "AIMessage",
    "Pricing",
    "ProviderEndpoint",
]
