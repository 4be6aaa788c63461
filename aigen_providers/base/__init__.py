"""
Base Package

Provider-agnostic building blocks shared by every schema:

- Models (DTOs): token counts, tool calls, normalized responses, pricing
- Errors: normalized error taxonomy and classification
- Logging: structured JSON events
- Transport: timeouts and pooled httpx clients
- Streaming: SSE framing, the stream reducer and the read loop
"""

from .costs import calculate_cost, parse_price
from .errors import ErrorCode, ProviderError, classify_exception
from .logging import LogContext, configure_logger, get_logger, log_event, normalized_log_event
from .models import (
    AIMessage,
    NormalizedResponse,
    Pricing,
    ProviderEndpoint,
    TokenCounts,
    ToolCall,
    ToolCallDelta,
)
from .timeouts import TimeoutConfig, get_timeout_config
from .tokens import TokenAccumulator, TokenPolicy

__all__ = [
    "calculate_cost",
    "parse_price",
    "ErrorCode",
    "ProviderError",
    "classify_exception",
    "LogContext",
    "configure_logger",
    "get_logger",
    "log_event",
    "normalized_log_event",
    "AIMessage",
    "NormalizedResponse",
    "Pricing",
    "ProviderEndpoint",
    "TokenCounts",
    "ToolCall",
    "ToolCallDelta",
    "TimeoutConfig",
    "get_timeout_config",
    "TokenAccumulator",
    "TokenPolicy",
]
