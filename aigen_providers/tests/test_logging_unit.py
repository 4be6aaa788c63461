"""Focused tests for aigen_providers.base.logging.

Covers:
- _parse_level string parsing
- child logger naming under the shared ``aigen`` logger
- log_event / normalized_log_event payloads
- JsonFormatter key hoisting
- configure_logger rotating file handler
"""
from __future__ import annotations

import json
import logging

from aigen_providers.base.log_support import JsonFormatter, LogContext
from aigen_providers.base.logging import (
    REQUIRED_NORMALIZED_KEYS,
    _parse_level,  # type: ignore[attr-defined]
    configure_logger,
    get_logger,
    log_event,
    normalized_log_event,
)
from aigen_providers.base.models import TokenCounts


def test_parse_level_variants():
    assert _parse_level(None) == logging.INFO  # nosec B101
    assert _parse_level("debug") == logging.DEBUG  # nosec B101
    assert _parse_level("WARN") == logging.WARNING  # nosec B101
    assert _parse_level("unknown", default=logging.ERROR) == logging.ERROR  # nosec B101


def test_child_loggers_live_under_aigen():
    assert get_logger("stream").name == "aigen.stream"  # nosec B101
    assert get_logger("aigen.sse").name == "aigen.sse"  # nosec B101
    assert get_logger().propagate is False  # nosec B101


def test_log_event_drops_none_and_merges_context(aigen_logs):
    log_event(get_logger("aigen.test"), "demo", LogContext(provider="p", model=None), a=1, b=None)
    (payload,) = aigen_logs.events()
    assert payload["event"] == "demo"  # nosec B101
    assert payload["provider"] == "p"  # nosec B101
    assert payload["a"] == 1  # nosec B101
    assert "b" not in payload and "model" not in payload  # nosec B101


def test_normalized_log_event_emits_required_keys(aigen_logs):
    normalized_log_event(
        get_logger("aigen.test"),
        "stream.end",
        LogContext(provider="p", model="m", schema="anthropic"),
        phase="finalize",
        emitted=True,
        tokens=TokenCounts(prompt_tokens=2, completion_tokens=3),
        error_code=None,
        chunks=4,
    )
    (payload,) = aigen_logs.events()
    for key in REQUIRED_NORMALIZED_KEYS:
        assert key in payload  # nosec B101
    assert "error_code" not in payload  # nosec B101
    assert payload["tokens"]["total_tokens"] == 5  # nosec B101
    assert payload["schema"] == "anthropic"  # nosec B101
    assert payload["chunks"] == 4  # nosec B101


def test_normalized_log_event_keeps_canonical_keys(aigen_logs):
    normalized_log_event(get_logger("aigen.test"), "x", None, phase="start", emitted=None, tokens=None)
    (payload,) = aigen_logs.events()
    assert payload["emitted"] is None  # nosec B101
    assert payload["tokens"] is None  # nosec B101


def test_json_formatter_hoists_message_keys():
    record = logging.LogRecord("aigen.t", logging.INFO, __file__, 1, json.dumps({"event": "e", "n": 2}), None, None)
    record.request_id = "r1"
    out = json.loads(JsonFormatter().format(record))
    assert out["event"] == "e"  # nosec B101
    assert out["n"] == 2  # nosec B101
    assert out["level"] == "INFO"  # nosec B101
    assert out["request_id"] == "r1"  # nosec B101


def test_configure_logger_file_handler(tmp_path):
    path = tmp_path / "logs" / "aigen.log"
    logger = configure_logger(level="DEBUG", file_path=str(path))
    try:
        log_event(get_logger("aigen.file"), "to.file", x=1)
        for handler in logger.handlers:
            handler.flush()
        lines = path.read_text(encoding="utf-8").strip().splitlines()
        assert json.loads(lines[-1])["event"] == "to.file"  # nosec B101
    finally:
        configure_logger(level="INFO", file_path=None)


def test_context_bind_and_streaming_flag(aigen_logs):
    base = LogContext(provider="p", model="m", streaming=False)
    bound = base.bind(url="https://x/v1")
    assert base.extra == {}  # nosec B101
    log_event(get_logger("aigen.test"), "bound", bound)
    (payload,) = aigen_logs.events()
    assert payload["url"] == "https://x/v1"  # nosec B101
    assert payload["streaming"] is False  # nosec B101
