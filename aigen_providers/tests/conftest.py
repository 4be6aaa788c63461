"""Pytest configuration for the aigen_providers test suite.

Shared fixtures:
- ``aigen_logs``: captures every record reaching the shared ``aigen`` logger.
- ``clean_env``: removes provider credentials and aigen overrides so tests
  never depend on the developer's shell.
- Pooled HTTP clients and the provider registry are reset after each test.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, Iterator, List

import pytest

from aigen_providers.base.http import close_all_clients
from aigen_providers.base.logging import get_logger
from aigen_providers.config import clear_config_cache, reset_registry


class _ListHandler(logging.Handler):
    """Capture log records into a list for assertions."""

    def __init__(self) -> None:
        super().__init__(level=logging.DEBUG)
        self.records: List[logging.LogRecord] = []

    def emit(self, record: logging.LogRecord) -> None:
        self.records.append(record)

    def events(self) -> List[Dict[str, Any]]:
        """Decoded JSON payloads of structured event records."""
        out = []
        for record in self.records:
            try:
                payload = json.loads(record.getMessage())
            except ValueError:
                continue
            if isinstance(payload, dict) and "event" in payload:
                payload.setdefault("level", record.levelname)
                out.append(payload)
        return out


@pytest.fixture()
def aigen_logs() -> Iterator[_ListHandler]:
    logger = get_logger()
    handler = _ListHandler()
    previous = logger.level
    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG)
    try:
        yield handler
    finally:
        logger.removeHandler(handler)
        logger.setLevel(previous)


_ENV_PREFIXES = ("OPENAI_", "ANTHROPIC_", "GOOGLE_", "GEMINI_", "OLLAMA_", "AIGEN_", "GROQ_", "MOONSHOT")


@pytest.fixture()
def clean_env(monkeypatch: pytest.MonkeyPatch) -> pytest.MonkeyPatch:
    import os

    for name in list(os.environ):
        if name.startswith(_ENV_PREFIXES):
            monkeypatch.delenv(name, raising=False)
    clear_config_cache()
    return monkeypatch


@pytest.fixture(autouse=True)
def _reset_shared_state() -> Iterator[None]:
    yield
    close_all_clients()
    reset_registry()
    clear_config_cache()
