"""Server-Sent Events framing.

Two layers:

Frame splitter
    :func:`split_sse_messages` cuts text on the first ``\\n\\n`` or
    ``\\r\\n\\r\\n`` boundaries. Text after the last boundary is returned as
    *spillover* and must be prepended to the next read. Because a boundary
    found in a prefix is found at the same offset once more text arrives,
    feeding a stream in arbitrary pieces yields exactly the messages of a
    one-shot split.

Field parser
    :func:`parse_sse_message` turns one message into a :class:`StreamChunk`
    (``event``, ``data``, ``json``). Comment lines are skipped, ``data`` lines
    are joined with ``\\n``, the last ``event`` wins, one leading space of a
    value and a BOM on the first field name are stripped. Data wrapped in
    ``{}``/``[]`` is JSON decoded; a decode failure leaves ``json=None`` and
    is logged at DEBUG. Messages without ``data`` produce no chunk.

:class:`SSEDecoder` wraps both with the spillover bookkeeping for a live
stream, and :func:`raise_for_error_chunk` implements the hard-failure rule for
error frames: an ``error`` event, a non-null top-level ``error``, or a
Responses API ``response.failed`` event carrying ``response.error``.
"""
from __future__ import annotations

from dataclasses import dataclass
import json
import re
from typing import Any, List, Optional, Tuple

from ..constants import RESPONSE_FAILED_EVENT
from ..errors import ErrorCode, ProviderError
from ..logging import get_logger

_BOUNDARY = re.compile(r"\r\n\r\n|\n\n")
_BOM = "\ufeff"

_log = get_logger("aigen.sse")


@dataclass(frozen=True)
class StreamChunk:
    """One parsed SSE message.

    Attributes:
        event: Value of the last ``event:`` field, or ``None``.
        data: ``data:`` field values joined by ``\\n``.
        json: Decoded JSON payload, or ``None`` when data is not JSON.
    """

    event: Optional[str] = None
    data: str = ""
    json: Any = None

    def get(self, key: str, default: Any = None) -> Any:
        """Top-level JSON lookup that tolerates non-object payloads."""
        if isinstance(self.json, dict):
            return self.json.get(key, default)
        return default

    def __repr__(self) -> str:  # pragma: no cover - debugging aid
        preview = self.data if len(self.data) <= 10 else self.data[:10] + "..."
        keys = ", ".join(self.json.keys()) if isinstance(self.json, dict) else "-"
        return f"StreamChunk(event={self.event}, data={preview!r}, json keys={keys})"


def split_sse_messages(text: str) -> Tuple[List[str], str]:
    """Split ``text`` into complete messages and the trailing spillover."""
    messages: List[str] = []
    start = 0
    for match in _BOUNDARY.finditer(text):
        messages.append(text[start:match.start()])
        start = match.end()
    return messages, text[start:]


def _decode_json(raw: str) -> Any:
    stripped = raw.strip()
    if not stripped:
        return None
    if not (
        (stripped.startswith("{") and stripped.endswith("}"))
        or (stripped.startswith("[") and stripped.endswith("]"))
    ):
        return None
    try:
        return json.loads(stripped)
    except ValueError:
        _log.debug("sse json decode failed: %r", raw[:200])
        return None


def parse_sse_message(message: str) -> Optional[StreamChunk]:
    """Parse one complete SSE message; ``None`` when it carries no data."""
    if not message.strip():
        return None
    event: Optional[str] = None
    data_parts: List[str] = []
    first_field = True
    for line in message.split("\n"):
        line = line.rstrip("\r")
        if not line or line.startswith(":"):
            continue
        name, sep, value = line.partition(":")
        if not sep:
            _log.debug("sse line without field separator ignored: %r", line[:200])
            continue
        if first_field:
            name = name.lstrip(_BOM)
            first_field = False
        if value.startswith(" "):
            value = value[1:]
        if name == "data":
            data_parts.append(value)
        elif name == "event" and value:
            event = value
    if not data_parts:
        return None
    raw = "\n".join(data_parts)
    return StreamChunk(event=event, data=raw, json=_decode_json(raw))


def extract_chunks(blob: str, spillover: str = "") -> Tuple[List[StreamChunk], str]:
    """Parse every complete message of ``spillover + blob``.

    Returns the chunks and the new spillover to pass on the next call.
    """
    messages, rest = split_sse_messages(spillover + blob)
    chunks = [chunk for chunk in (parse_sse_message(m) for m in messages) if chunk is not None]
    if rest.strip():
        _log.debug("sse incomplete message carried over (%d chars)", len(rest))
    return chunks, rest


class SSEDecoder:
    """Incremental decoder holding the spillover between reads."""

    def __init__(self) -> None:
        self.spillover = ""

    def feed(self, text: str) -> List[StreamChunk]:
        chunks, self.spillover = extract_chunks(text, self.spillover)
        return chunks

    def flush(self) -> List[StreamChunk]:
        """Parse leftover text once as a final message (end of stream)."""
        rest, self.spillover = self.spillover, ""
        chunk = parse_sse_message(rest)
        return [chunk] if chunk is not None else []


def _format_error(payload: Any) -> str:
    if isinstance(payload, dict):
        return ", ".join(f"{str(k).title()}: {v}" for k, v in payload.items())
    return str(payload)


def _error_payload(payload: Any) -> Any:
    """The error object of ``payload``: top-level ``error``, or the nested
    ``response.error`` of a Responses API ``response.failed`` event."""
    if not isinstance(payload, dict):
        return None
    if payload.get("error") is not None:
        return payload["error"]
    if payload.get("type") == RESPONSE_FAILED_EVENT and isinstance(payload.get("response"), dict):
        return payload["response"].get("error")
    return None


def is_error_chunk(chunk: StreamChunk) -> bool:
    """True for an ``error`` event or a payload carrying a non-null error."""
    if chunk.event == "error":
        return True
    if not isinstance(chunk.json, dict):
        return False
    return chunk.json.get("type") == "error" or _error_payload(chunk.json) is not None


def raise_for_error_chunk(chunk: StreamChunk, *, provider: str = "unknown", model: Optional[str] = None) -> None:
    """Raise :class:`ProviderError` (``stream_error``) for an error frame."""
    if not is_error_chunk(chunk):
        return
    err = _error_payload(chunk.json)
    detail = _format_error(err) if err is not None else chunk.data
    raise ProviderError(
        code=ErrorCode.STREAM_ERROR,
        message=f"Error detected in streaming response: {detail}",
        provider=provider,
        model=model,
        body=chunk.data,
    )


__all__ = [
    "StreamChunk",
    "SSEDecoder",
    "split_sse_messages",
    "parse_sse_message",
    "extract_chunks",
    "is_error_chunk",
    "raise_for_error_chunk",
]
