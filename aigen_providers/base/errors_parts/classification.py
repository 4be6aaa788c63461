"""
Error classification helpers mapping exceptions to normalized ErrorCode values.

Transport exceptions raised by ``httpx`` and HTTP statuses returned by the
upstream API are both funnelled through here so the stream driver and the
buffered path report failures identically.
"""
from __future__ import annotations

import asyncio
from typing import Dict, Optional

import httpx

from .error_code import ErrorCode
from .provider_error import ProviderError


_HTTP_STATUS_MAP: Dict[int, ErrorCode] = {
    400: ErrorCode.VALIDATION,
    401: ErrorCode.AUTH,
    403: ErrorCode.AUTH,
    404: ErrorCode.NOT_FOUND,
    408: ErrorCode.TIMEOUT,
    409: ErrorCode.CONFLICT,
    422: ErrorCode.VALIDATION,
    429: ErrorCode.RATE_LIMIT,
    500: ErrorCode.SERVER_ERROR,
    502: ErrorCode.TRANSIENT,
    503: ErrorCode.UNAVAILABLE,
    504: ErrorCode.TIMEOUT,
    529: ErrorCode.UNAVAILABLE,
}

RETRYABLE_CODES = (ErrorCode.TRANSIENT, ErrorCode.RATE_LIMIT, ErrorCode.TIMEOUT, ErrorCode.UNAVAILABLE)


def _extract_status(exc: Exception) -> Optional[int]:
    """Attempt to extract an HTTP status code from an exception.

    Checks ``exc.status_code``, ``exc.status`` and ``exc.response.status_code``
    in that order. Returns ``None`` if no valid status can be found.
    """
    for attr in ("status_code", "status"):
        val = getattr(exc, attr, None)
        if isinstance(val, int) and 100 <= val < 600:
            return val
    resp = getattr(exc, "response", None)
    if resp is not None:
        sc = getattr(resp, "status_code", None)
        if isinstance(sc, int) and 100 <= sc < 600:
            return sc
    return None


def classify_status(status: int) -> ErrorCode:
    """Map an HTTP status to an :class:`ErrorCode`.

    Unlisted 5xx statuses are ``SERVER_ERROR``; anything else unlisted is
    ``UNKNOWN``.
    """
    if status in _HTTP_STATUS_MAP:
        return _HTTP_STATUS_MAP[status]
    if 500 <= status < 600:
        return ErrorCode.SERVER_ERROR
    return ErrorCode.UNKNOWN


def classify_exception(exc: BaseException) -> ErrorCode:
    """Classify an exception into a normalized :class:`ErrorCode`.

    Precedence:
        1. ProviderError passthrough.
        2. Timeout exceptions (stdlib, asyncio and httpx).
        3. Other httpx transport errors (``TRANSIENT``).
        4. HTTP status mapping.
        5. ``UNKNOWN`` fallback.
    """
    if isinstance(exc, ProviderError):
        return exc.code
    if isinstance(exc, (TimeoutError, asyncio.TimeoutError, httpx.TimeoutException)):
        return ErrorCode.TIMEOUT
    if isinstance(exc, httpx.TransportError):
        return ErrorCode.TRANSIENT
    status = _extract_status(exc)  # type: ignore[arg-type]
    if status is not None:
        return classify_status(status)
    return ErrorCode.UNKNOWN


def error_from_status(
    status: int,
    body: str,
    *,
    provider: str,
    model: Optional[str] = None,
) -> ProviderError:
    """Build the :class:`ProviderError` for a non-2xx upstream response."""
    code = classify_status(status)
    return ProviderError(
        code=code,
        message=f"HTTP {status}: {body[:500]}",
        provider=provider,
        model=model,
        http_status=status,
        body=body,
        retryable=code in RETRYABLE_CODES,
    )


def wrap_transport_error(exc: Exception, *, provider: str, model: Optional[str] = None) -> ProviderError:
    """Wrap an ``httpx`` exception into a :class:`ProviderError`."""
    code = classify_exception(exc)
    return ProviderError(
        code=code,
        message=f"{exc.__class__.__name__}: {exc}",
        provider=provider,
        model=model,
        http_status=_extract_status(exc),
        retryable=code in RETRYABLE_CODES,
        raw=exc,
    )


__all__ = [
    "error_from_status",
    "wrap_transport_error",
    "classify_exception",
    "classify_status",
    "RETRYABLE_CODES",
    "_extract_status",
    "_HTTP_STATUS_MAP",
]
