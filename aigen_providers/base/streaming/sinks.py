"""Polymorphic content sinks.

Streamed text goes to whatever the caller supplies as ``out``:

* ``None`` - discarded
* text streams (anything with ``write``, e.g. ``sys.stdout``, ``io.StringIO``)
* queues (``queue.Queue``, ``asyncio.Queue``; anything with ``put_nowait``)
* lists (``append``)
* plain callables receiving each text piece
"""
from __future__ import annotations

from typing import Any, Callable, Protocol, runtime_checkable


@runtime_checkable
class TextSink(Protocol):
    def write(self, text: str) -> Any: ...


@runtime_checkable
class QueueSink(Protocol):
    def put_nowait(self, item: Any) -> Any: ...


def print_content(out: Any, text: str) -> None:
    """Deliver one text piece to ``out``.

    Raises:
        TypeError: When ``out`` is none of the supported sink kinds.
    """
    if out is None or not text:
        return
    if isinstance(out, TextSink):
        out.write(text)
        flush: Callable[[], Any] | None = getattr(out, "flush", None)
        if callable(flush):
            flush()
    elif isinstance(out, QueueSink):
        out.put_nowait(text)
    elif isinstance(out, list):
        out.append(text)
    elif callable(out):
        out(text)
    else:
        raise TypeError(f"print_content is not implemented for sink {type(out).__name__}")


def is_terminal(out: Any) -> bool:
    """True when ``out`` is an interactive text stream."""
    isatty = getattr(out, "isatty", None)
    if not callable(isatty):
        return False
    try:
        return bool(isatty())
    except ValueError:  # closed stream
        return False


__all__ = ["TextSink", "QueueSink", "print_content", "is_terminal"]
