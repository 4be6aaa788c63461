"""
Normalized provider error codes (taxonomy).

Values are lowercase snake_case and are a stable public contract for logging.
``PROTOCOL`` covers malformed response headers (wrong or missing content
type); ``STREAM_ERROR`` covers explicit error frames embedded in an otherwise
well-formed event stream.
"""
from __future__ import annotations

from enum import Enum


class ErrorCode(str, Enum):
    """Enumerated normalized error codes representing failure categories."""

    AUTH = "auth"
    RATE_LIMIT = "rate_limit"
    TIMEOUT = "timeout"
    TRANSIENT = "transient"
    VALIDATION = "validation"
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    SERVER_ERROR = "server_error"
    UNAVAILABLE = "unavailable"
    PROTOCOL = "protocol"
    STREAM_ERROR = "stream_error"
    INTERNAL = "internal"
    UNKNOWN = "unknown"


__all__ = ["ErrorCode"]
