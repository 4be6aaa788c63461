"""Shared HTTP client pool.

Reusable ``httpx.Client`` instances keyed by ``(base_url, purpose)`` so that
repeated calls to the same provider share one connection pool. Timeouts come
from :func:`get_timeout_config`; a ``"stream"`` purpose gets the long idle
read timeout, every other purpose the buffered one.

All clients are closed at interpreter exit via ``atexit``; tests may call
:func:`close_all_clients` explicitly.
"""

from __future__ import annotations

import atexit
import threading
from typing import Dict, Optional, Tuple

import httpx

from ..logging import get_logger
from ..timeouts import get_timeout_config

_CLIENTS: Dict[Tuple[Optional[str], str], httpx.Client] = {}
_LOCK = threading.RLock()
_log = get_logger("aigen.http")


def get_httpx_client(base_url: Optional[str], purpose: str) -> httpx.Client:
    """Return a pooled ``httpx.Client`` for the given base URL and purpose.

    Parameters:
        base_url: API base URL bound to the client, or ``None`` for absolute
            request URLs.
        purpose: Short pool discriminator such as ``"chat"`` or ``"stream"``.
    """
    key = (base_url, purpose)
    client = _CLIENTS.get(key)
    if client is not None:
        return client

    with _LOCK:
        client = _CLIENTS.get(key)
        if client is not None:
            return client
        timeout = get_timeout_config().as_httpx(streaming=purpose == "stream")
        client = httpx.Client(base_url=base_url, timeout=timeout) if base_url else httpx.Client(timeout=timeout)
        _CLIENTS[key] = client
        return client


def close_all_clients() -> None:
    """Close and clear all pooled HTTP clients."""
    with _LOCK:
        for c in _CLIENTS.values():
            try:
                c.close()
            except httpx.HTTPError as exc:  # pragma: no cover - teardown
                _log.debug("client close failed: %s", exc)
        _CLIENTS.clear()


def _cleanup_at_exit() -> None:
    close_all_clients()


atexit.register(_cleanup_at_exit)

__all__ = ["get_httpx_client", "close_all_clients"]
