"""Stream driver: the socket read loop.

``idle -> connected -> receiving -> done`` or ``receiving -> error``.

* Header validation: a non-2xx status is read fully and raised with its
  body; a missing, duplicated or non ``text/event-stream`` content type is
  a ``protocol`` error.
* Bytes are decoded incrementally as UTF-8 (multi-byte characters may span
  reads) and fed to :class:`StreamState`.
* The loop ends when a read produced a stop chunk (``SchemaOps.should_stop``)
  or the body is exhausted; at exhaustion any unterminated last message is
  parsed once.
* Every failure stops the loop and propagates as :class:`ProviderError`;
  no partial result is returned. Cancellation is closing the response.
"""
from __future__ import annotations

import codecs
from typing import Any, Dict, Mapping, Optional, Tuple

import httpx

from ..constants import SSE_CONTENT_TYPE
from ..errors import ErrorCode, ProviderError, error_from_status, wrap_transport_error
from ..logging import LogContext, get_logger, normalized_log_event
from ..models import NormalizedResponse
from .stream_state import StreamState
from .streaming_finalize import finalize_stream

_log = get_logger("aigen.stream")


def validate_stream_response(response: httpx.Response, *, provider: str, model: Optional[str] = None) -> None:
    """Raise unless ``response`` is a successful event stream."""
    if not response.is_success:
        response.read()
        raise error_from_status(response.status_code, response.text, provider=provider, model=model)
    content_types = response.headers.get_list("content-type")
    if len(content_types) != 1 or SSE_CONTENT_TYPE not in content_types[0].lower():
        response.read()
        received = ", ".join(content_types) or "none"
        raise ProviderError(
            code=ErrorCode.PROTOCOL,
            message=(
                f"expected a single {SSE_CONTENT_TYPE} content type, received {received}; "
                "check the model and that streaming is enabled"
            ),
            provider=provider,
            model=model,
            http_status=response.status_code,
            body=response.text,
        )


def read_stream(response: httpx.Response, state: StreamState) -> StreamState:
    """Consume an already validated streaming ``response`` into ``state``."""
    decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
    for raw in response.iter_bytes():
        if state.feed(decoder.decode(raw)):
            return state
    tail = decoder.decode(b"", final=True)
    if tail:
        state.feed(tail)
    state.flush()
    return state


def run_stream(
    client: httpx.Client,
    url: str,
    state: StreamState,
    *,
    payload: Mapping[str, Any],
    headers: Optional[Dict[str, str]] = None,
) -> Tuple[NormalizedResponse, Optional[Dict[str, Any]]]:
    """POST ``payload`` to ``url`` and drive the event stream to completion.

    Returns the normalized response and the vendor-shaped body rebuilt from
    the retained chunks (``None`` when no chunk could seed one).
    """
    ctx = LogContext(provider=state.provider, model=state.model, schema=state.ops.kind.value, streaming=True).bind(url=url)
    normalized_log_event(_log, "stream.start", ctx, phase="start", emitted=False, tokens=None)
    state.metrics.start()
    try:
        with client.stream("POST", url, json=dict(payload), headers=headers) as response:
            validate_stream_response(response, provider=state.provider, model=state.model)
            read_stream(response, state)
    except ProviderError as exc:
        finalize_stream(logger=_log, ctx=ctx, metrics=state.metrics, tokens=state.running_tokens, error=exc)
        raise
    except httpx.HTTPError as exc:
        err = wrap_transport_error(exc, provider=state.provider, model=state.model)
        finalize_stream(logger=_log, ctx=ctx, metrics=state.metrics, tokens=state.running_tokens, error=err)
        raise err from exc

    if state.callback is not None:
        state.callback.on_finish()
    body = state.build_body()
    result = state.finalize(body)
    finalize_stream(
        logger=_log,
        ctx=ctx,
        metrics=state.metrics,
        tokens=result.tokens,
        finish_reason=result.finish_reason,
    )
    return result, body


__all__ = ["validate_stream_response", "read_stream", "run_stream"]
