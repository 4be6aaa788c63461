"""Base shared constants for the aigen provider layer.

Central location for sentinel strings, wire markers and default numbers.

Security
--------
Only generic sentinel strings live here; no credentials are embedded.

# pragma: allowlist secret
"""
from __future__ import annotations

# Missing credential sentinel
MISSING_API_KEY_ERROR = "missing_api_key"  # pragma: allowlist secret - generic placeholder string

# Content type a streaming response must carry
SSE_CONTENT_TYPE = "text/event-stream"

# ChatCompletion stream terminator payload
SSE_DONE_SENTINEL = "[DONE]"

# Responses API event whose nested response.error is a stream failure
RESPONSE_FAILED_EVENT = "response.failed"

# Anthropic requires max_tokens on every request
ANTHROPIC_DEFAULT_MAX_TOKENS = 1000
ANTHROPIC_API_VERSION = "2023-06-01"

# Default HTTP timeouts (seconds)
DEFAULT_CONNECT_TIMEOUT = 10.0
DEFAULT_READ_TIMEOUT = 300.0
DEFAULT_HTTP_TIMEOUT = 60.0

# ANSI colors used by the terminal stream hooks
REASONING_COLOR = "\x1b[94m"
RESET_COLOR = "\x1b[0m"

__all__ = [
    "MISSING_API_KEY_ERROR",
    "SSE_CONTENT_TYPE",
    "SSE_DONE_SENTINEL",
    "RESPONSE_FAILED_EVENT",
    "ANTHROPIC_DEFAULT_MAX_TOKENS",
    "ANTHROPIC_API_VERSION",
    "DEFAULT_CONNECT_TIMEOUT",
    "DEFAULT_READ_TIMEOUT",
    "DEFAULT_HTTP_TIMEOUT",
    "REASONING_COLOR",
    "RESET_COLOR",
]
