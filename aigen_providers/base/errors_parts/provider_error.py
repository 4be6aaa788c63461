"""
ProviderError: the single exception type of a failed call.

Non-2xx statuses, bad stream headers, error frames and transport failures are
all raised as :class:`ProviderError`, so callers need one ``except`` clause
and log events get the same error fields everywhere.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional

from .error_code import ErrorCode


@dataclass
class ProviderError(Exception):
    """A failed call, classified by :class:`ErrorCode`.

    Attributes:
        code: Failure category.
        message: Human-readable description.
        provider: Registry slug of the provider (``"openai"``).
        model: Wire model id, when known.
        http_status: Upstream HTTP status, when a response was received.
        body: Upstream text (response body or error frame data).
        retryable: Whether retrying the same request may succeed.
        raw: Original exception, for diagnostics.
    """

    code: ErrorCode
    message: str
    provider: str
    model: Optional[str] = None
    http_status: Optional[int] = None
    body: Optional[str] = None
    retryable: bool = False
    raw: Optional[Exception] = None

    def log_fields(self) -> Dict[str, Any]:
        """Error keys added to ``chat.error``/``stream.error`` events."""
        return {
            "error_code": self.code.value,
            "error": self.message,
            "http_status": self.http_status,
            "retryable": self.retryable,
        }

    def __str__(self) -> str:  # pragma: no cover - trivial
        status = f" [{self.http_status}]" if self.http_status is not None else ""
        return f"{self.provider}:{self.model or '-'} {self.code.value}{status}: {self.message}"


__all__ = ["ProviderError"]
