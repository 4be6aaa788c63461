from __future__ import annotations

import types

import httpx

from aigen_providers.base.errors import (
    ErrorCode,
    ProviderError,
    classify_exception,
    classify_status,
    error_from_status,
    wrap_transport_error,
)


def test_classify_provider_error_passthrough():
    e = ProviderError(code=ErrorCode.AUTH, message="nope", provider="x")
    assert classify_exception(e) is ErrorCode.AUTH  # nosec B101 - assert is appropriate in unit tests


def test_classify_http_status_mapping():
    e1 = types.SimpleNamespace(status_code=404)
    assert classify_exception(e1) is ErrorCode.NOT_FOUND  # nosec B101
    e2 = types.SimpleNamespace(response=types.SimpleNamespace(status_code=503))
    assert classify_exception(e2) is ErrorCode.UNAVAILABLE  # nosec B101


def test_classify_status_table_and_fallbacks():
    assert classify_status(429) is ErrorCode.RATE_LIMIT  # nosec B101
    assert classify_status(529) is ErrorCode.UNAVAILABLE  # nosec B101
    assert classify_status(599) is ErrorCode.SERVER_ERROR  # nosec B101
    assert classify_status(418) is ErrorCode.UNKNOWN  # nosec B101


def test_classify_transport_errors():
    request = httpx.Request("POST", "https://api.test")
    assert classify_exception(httpx.ReadTimeout("slow", request=request)) is ErrorCode.TIMEOUT  # nosec B101
    assert classify_exception(httpx.ConnectError("refused", request=request)) is ErrorCode.TRANSIENT  # nosec B101
    assert classify_exception(TimeoutError()) is ErrorCode.TIMEOUT  # nosec B101
    assert classify_exception(Exception("random")) is ErrorCode.UNKNOWN  # nosec B101


def test_error_from_status_keeps_body_and_hint():
    err = error_from_status(503, "x" * 600, provider="openai", model="m")
    assert err.code is ErrorCode.UNAVAILABLE  # nosec B101
    assert err.retryable  # nosec B101
    assert err.http_status == 503  # nosec B101
    assert len(err.body) == 600  # nosec B101
    assert len(err.message) == len("HTTP 503: ") + 500  # nosec B101
    assert not error_from_status(401, "", provider="openai").retryable  # nosec B101


def test_wrap_transport_error():
    request = httpx.Request("POST", "https://api.test")
    exc = httpx.ReadTimeout("slow", request=request)
    err = wrap_transport_error(exc, provider="anthropic")
    assert err.code is ErrorCode.TIMEOUT  # nosec B101
    assert err.raw is exc  # nosec B101
    assert "ReadTimeout" in err.message  # nosec B101


def test_provider_error_str_includes_code_and_status():
    err = ProviderError(code=ErrorCode.PROTOCOL, message="bad content type", provider="p", http_status=200)
    assert str(err) == "p:- protocol [200]: bad content type"  # nosec B101


def test_provider_error_log_fields():
    err = error_from_status(503, "down", provider="p", model="m")
    assert err.log_fields() == {  # nosec B101
        "error_code": "unavailable",
        "error": "HTTP 503: down",
        "http_status": 503,
        "retryable": True,
    }
