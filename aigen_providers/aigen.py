"""Call orchestration: the ``aigen`` entry point.

One call resolves ``"provider:model"`` through the registry, builds the
schema's payload from normalized messages and either

* posts it and parses the JSON body (buffered), or
* streams it through :func:`run_stream` when a ``stream_callback`` is given,
  rebuilding the same body shape from the retained chunks.

Both paths end in the schema's ``parse_response`` so the returned
:class:`AIMessage` has the same fields either way. Cost is computed from the
optional :class:`ProviderEndpoint` pricing.

Failure semantics: every transport, HTTP or protocol failure surfaces as
:class:`ProviderError`; a missing API key is an ``auth`` error raised before
any request is made. No retries.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple, Union

import httpx

from .base.constants import MISSING_API_KEY_ERROR
from .base.costs import calculate_cost
from .base.dto import normalize_messages
from .base.errors import ErrorCode, ProviderError, error_from_status, wrap_transport_error
from .base.http import get_httpx_client
from .base.logging import LogContext, get_logger, normalized_log_event
from .base.models import AIMessage, NormalizedResponse, ProviderEndpoint
from .base.streaming import HttpStreamCallback, StreamCallback, StreamState, run_stream
from .config import get_provider_config
from .config.registry import ProviderInfo, get_provider_info, list_providers
from .schemas import SchemaKind, SchemaOps, get_schema_ops

_log = get_logger("aigen.call")

StreamCallbackArg = Union[StreamCallback, bool, Any, None]


def parse_provider_model(provider_model: str) -> Tuple[ProviderInfo, str]:
    """Split ``"provider:model"`` into the registry entry and a wire model id.

    A redundant ``provider/`` prefix on the model id is stripped, then the
    provider's model transform is applied (``anthropic:claude-opus-4.1`` ->
    ``claude-opus-4-1``).

    Raises:
        ValueError: Missing ``:`` separator or unknown provider.
    """
    provider, sep, model_id = (provider_model or "").partition(":")
    if not sep or not provider or not model_id:
        raise ValueError(f"expected 'provider:model', got {provider_model!r}")
    name = provider.strip().lower()
    info = get_provider_info(name)
    if info is None:
        raise ValueError(f"unknown provider {provider!r}; available: {', '.join(list_providers())}")
    if model_id.lower().startswith(f"{name}/"):
        model_id = model_id[len(name) + 1:]
    return info, info.transform_model(model_id)


def _resolve_callback(stream_callback: StreamCallbackArg) -> Optional[StreamCallback]:
    """``None``/``False`` -> buffered; ``True`` -> stdout; a sink -> wrapped."""
    if stream_callback is None or stream_callback is False:
        return None
    if isinstance(stream_callback, StreamCallback):
        return stream_callback
    if stream_callback is True:
        return HttpStreamCallback()
    return HttpStreamCallback(out=stream_callback)


@dataclass
class _Call:
    info: ProviderInfo
    model: str
    ops: SchemaOps
    url: str
    headers: Dict[str, str]
    payload: Dict[str, Any]
    callback: Optional[StreamCallback]
    endpoint: Optional[ProviderEndpoint]
    client: httpx.Client

    @property
    def ctx(self) -> LogContext:
        return LogContext(
            provider=self.info.name,
            model=self.model,
            schema=self.ops.kind.value,
            streaming=self.callback is not None,
        )


def _prepare(
    prompt: Any,
    provider_model: str,
    *,
    schema: Union[SchemaKind, SchemaOps, str, None],
    api_key: Optional[str],
    sys_msg: Optional[str],
    stream_callback: StreamCallbackArg,
    endpoint: Optional[ProviderEndpoint],
    client: Optional[httpx.Client],
    base_url: Optional[str],
    params: Dict[str, Any],
) -> _Call:
    info, model = parse_provider_model(provider_model)
    cfg = get_provider_config(info.name, {"api_key": api_key, "base_url": base_url})
    key = cfg.get("api_key")
    if not key and info.auth_header_format != "none":
        raise ProviderError(
            code=ErrorCode.AUTH,
            message=f"{MISSING_API_KEY_ERROR}: set {info.api_key_env_var or info.name.upper() + '_API_KEY'} or pass api_key",
            provider=info.name,
            model=model,
        )

    ops = get_schema_ops(schema if schema is not None else info.api_schema)
    callback = _resolve_callback(stream_callback)
    streaming = callback is not None
    messages = normalize_messages(prompt, sys_msg)
    return _Call(
        info=info,
        model=model,
        ops=ops,
        url=ops.build_url(cfg["base_url"], model, streaming),
        headers=info.build_headers(key),
        payload=ops.build_payload(messages, model, streaming, **params),
        callback=callback,
        endpoint=endpoint,
        client=client or get_httpx_client(None, "stream" if streaming else "chat"),
    )


def _post_buffered(call: _Call) -> Dict[str, Any]:
    try:
        response = call.client.post(call.url, json=call.payload, headers=call.headers)
    except httpx.HTTPError as exc:
        raise wrap_transport_error(exc, provider=call.info.name, model=call.model) from exc
    if not response.is_success:
        raise error_from_status(response.status_code, response.text, provider=call.info.name, model=call.model)
    try:
        body = response.json()
    except ValueError as exc:
        raise ProviderError(
            code=ErrorCode.PROTOCOL,
            message=f"response body is not JSON: {exc}",
            provider=call.info.name,
            model=call.model,
            http_status=response.status_code,
            body=response.text,
        ) from exc
    if not isinstance(body, dict):
        raise ProviderError(
            code=ErrorCode.PROTOCOL,
            message="response body is not a JSON object",
            provider=call.info.name,
            model=call.model,
            http_status=response.status_code,
            body=response.text,
        )
    return body


def _execute(call: _Call) -> Tuple[NormalizedResponse, Optional[Dict[str, Any]]]:
    if call.callback is None:
        body = _post_buffered(call)
        return call.ops.parse_response(body), body
    state = StreamState(
        call.ops,
        callback=call.callback,
        endpoint=call.endpoint,
        provider=call.info.name,
        model=call.model,
        token_policy=call.info.token_policy,
    )
    return run_stream(call.client, call.url, state, payload=call.payload, headers=call.headers)


def _run(prompt: Any, provider_model: str, **kwargs: Any) -> Tuple[_Call, NormalizedResponse, Optional[Dict[str, Any]], float]:
    call = _prepare(prompt, provider_model, **kwargs)
    ctx = call.ctx
    normalized_log_event(
        _log,
        "chat.start",
        ctx,
        phase="start",
        emitted=None,
        tokens=None,
        url=call.url,
    )
    t0 = time.perf_counter()
    try:
        result, body = _execute(call)
    except ProviderError as exc:
        normalized_log_event(
            _log,
            "chat.error",
            ctx,
            phase="finalize",
            emitted=False,
            tokens=None,
            level=logging.WARNING,
            **exc.log_fields(),
        )
        raise
    elapsed = time.perf_counter() - t0
    return call, result, body, elapsed


def aigen(
    prompt: Any,
    provider_model: str,
    *,
    schema: Union[SchemaKind, SchemaOps, str, None] = None,
    api_key: Optional[str] = None,
    sys_msg: Optional[str] = None,
    stream_callback: StreamCallbackArg = None,
    endpoint: Optional[ProviderEndpoint] = None,
    client: Optional[httpx.Client] = None,
    base_url: Optional[str] = None,
    **params: Any,
) -> AIMessage:
    """Run one inference call and return a normalized :class:`AIMessage`.

    Parameters:
        prompt: ``str``, message mapping/DTO, or a list of them.
        provider_model: ``"provider:model"``, e.g. ``"openai:gpt-4o-mini"``.
        schema: Override of the provider's wire schema (e.g. ``"responses"``).
        api_key: Explicit key; otherwise resolved from config/env.
        sys_msg: System message prepended to the conversation.
        stream_callback: ``None`` for a buffered call; ``True`` streams to
            stdout; a :class:`StreamCallback` or any sink accepted by
            :func:`print_content` streams into it.
        endpoint: Pricing/limits used for cost and running meta lines.
        client: Injected ``httpx.Client``; defaults to the shared pool.
        base_url: Override of the provider base URL.
        **params: Extra request parameters (``temperature``, ``tools``, ...).
    """
    call, result, body, elapsed = _run(
        prompt,
        provider_model,
        schema=schema,
        api_key=api_key,
        sys_msg=sys_msg,
        stream_callback=stream_callback,
        endpoint=endpoint,
        client=client,
        base_url=base_url,
        params=params,
    )
    cost = calculate_cost(endpoint, result.tokens)
    msg = AIMessage.from_normalized(
        result,
        provider=call.info.name,
        model=call.model,
        cost=cost,
        elapsed=elapsed,
        raw=body,
    )
    normalized_log_event(
        _log,
        "chat.end",
        call.ctx,
        phase="finalize",
        emitted=call.callback is not None,
        tokens=result.tokens,
        finish_reason=result.finish_reason,
        cost=cost,
        elapsed=round(elapsed, 3),
    )
    return msg


def aigen_raw(
    prompt: Any,
    provider_model: str,
    *,
    schema: Union[SchemaKind, SchemaOps, str, None] = None,
    api_key: Optional[str] = None,
    sys_msg: Optional[str] = None,
    stream_callback: StreamCallbackArg = None,
    endpoint: Optional[ProviderEndpoint] = None,
    client: Optional[httpx.Client] = None,
    base_url: Optional[str] = None,
    **params: Any,
) -> Dict[str, Any]:
    """Like :func:`aigen` but return the vendor-shaped JSON body.

    For streamed calls this is the body rebuilt from the chunks (``{}`` when
    the stream carried nothing to rebuild from).
    """
    call, result, body, elapsed = _run(
        prompt,
        provider_model,
        schema=schema,
        api_key=api_key,
        sys_msg=sys_msg,
        stream_callback=stream_callback,
        endpoint=endpoint,
        client=client,
        base_url=base_url,
        params=params,
    )
    normalized_log_event(
        _log,
        "chat.end",
        call.ctx,
        phase="finalize",
        emitted=call.callback is not None,
        tokens=result.tokens,
        finish_reason=result.finish_reason,
        elapsed=round(elapsed, 3),
    )
    return body or {}


__all__ = ["aigen", "aigen_raw", "parse_provider_model"]
