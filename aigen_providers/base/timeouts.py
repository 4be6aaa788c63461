"""Timeout configuration for the HTTP transport.

All timeout values used by the pooled clients and the stream driver come from
here. ``get_timeout_config()`` returns a cached :class:`TimeoutConfig`,
re-reading the environment only when one of the supported variables changes:

    AIGEN_TIMEOUT_CONNECT_SECONDS   socket connect timeout
    AIGEN_TIMEOUT_READ_SECONDS      idle timeout between streamed reads
    AIGEN_TIMEOUT_HTTP_SECONDS      overall budget for non-streaming calls

Invalid or non-positive values fall back to the defaults in
:mod:`aigen_providers.base.constants`.

Cancellation of an in-flight stream is done by closing the response; there
is no separate cancellation primitive.
"""
from __future__ import annotations

from dataclasses import dataclass
import os
from typing import Optional

import httpx

from .constants import DEFAULT_CONNECT_TIMEOUT, DEFAULT_HTTP_TIMEOUT, DEFAULT_READ_TIMEOUT


_ENV_VARS = (
    "AIGEN_TIMEOUT_CONNECT_SECONDS",
    "AIGEN_TIMEOUT_READ_SECONDS",
    "AIGEN_TIMEOUT_HTTP_SECONDS",
)


@dataclass(frozen=True)
class TimeoutConfig:
    """Normalized timeout values (seconds).

    Attributes:
        connect_timeout_seconds: Time allowed to establish the TCP/TLS session.
        read_timeout_seconds: Idle time allowed between two reads of a stream.
        http_timeout_seconds: Budget for a buffered request's read phase.
    """

    connect_timeout_seconds: float = DEFAULT_CONNECT_TIMEOUT
    read_timeout_seconds: float = DEFAULT_READ_TIMEOUT
    http_timeout_seconds: float = DEFAULT_HTTP_TIMEOUT

    def as_httpx(self, *, streaming: bool = False) -> httpx.Timeout:
        """Return an ``httpx.Timeout`` for a streaming or buffered call."""
        read = self.read_timeout_seconds if streaming else self.http_timeout_seconds
        return httpx.Timeout(read, connect=self.connect_timeout_seconds)


_CACHED: Optional[TimeoutConfig] = None
_ENV_GUARD: Optional[str] = None


def _parse_env_float(name: str, default: float) -> float:
    """Read ``name`` as a positive float, falling back to ``default``."""
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        val = float(raw)
    except ValueError:
        return default
    return val if val > 0 else default


def get_timeout_config() -> TimeoutConfig:
    """Return the process-cached :class:`TimeoutConfig`."""
    global _CACHED, _ENV_GUARD  # noqa: PLW0603 - module cache
    guard = "/".join(os.getenv(name, "") for name in _ENV_VARS)
    if _CACHED is not None and guard == _ENV_GUARD:
        return _CACHED
    _CACHED = TimeoutConfig(
        connect_timeout_seconds=_parse_env_float("AIGEN_TIMEOUT_CONNECT_SECONDS", DEFAULT_CONNECT_TIMEOUT),
        read_timeout_seconds=_parse_env_float("AIGEN_TIMEOUT_READ_SECONDS", DEFAULT_READ_TIMEOUT),
        http_timeout_seconds=_parse_env_float("AIGEN_TIMEOUT_HTTP_SECONDS", DEFAULT_HTTP_TIMEOUT),
    )
    _ENV_GUARD = guard
    return _CACHED


__all__ = ["TimeoutConfig", "get_timeout_config"]
