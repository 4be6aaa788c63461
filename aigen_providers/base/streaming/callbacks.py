"""Stream callbacks.

A callback receives every retained chunk of a stream together with a
:class:`ChunkEvent`, the classification :class:`StreamState` already computed
for it (content, reasoning, tool deltas, usage, running token total). Error
frames never reach a callback: they raise before dispatch.

``HttpStreamCallback``
    Writes visible text (and optionally reasoning) to a sink.
``HttpStreamHooks``
    Terminal-oriented callback with pluggable formatters and lifecycle hooks,
    run timing (:class:`RunInfo`) and running token/cost meta lines.
"""
from __future__ import annotations

from dataclasses import dataclass, field
import logging
import sys
import time
from typing import Any, Callable, List, Optional, TYPE_CHECKING

from ..constants import REASONING_COLOR, RESET_COLOR
from ..costs import calculate_cost, format_cost
from ..logging import get_logger
from ..models import ProviderEndpoint, TokenCounts, ToolCallDelta
from .sinks import is_terminal, print_content

if TYPE_CHECKING:  # pragma: no cover
    from ...schemas import SchemaOps
    from .sse import StreamChunk

_log = get_logger("aigen.stream")

TOOL_STOP_REASONS = frozenset({"tool_calls", "tool_use", "function_call"})


@dataclass(frozen=True)
class ChunkEvent:
    """Classification of one chunk, computed once by the stream reducer.

    Attributes:
        content: Visible text delta, or ``None``.
        reasoning: Reasoning/thinking text delta, or ``None``.
        tool_deltas: Tool-call fragments carried by the chunk.
        usage: Usage reading carried by this chunk alone.
        tokens: Running token total after folding ``usage`` in.
        model: Model id carried by the chunk.
        stop_reason: Finish/stop reason carried by the chunk.
        is_start: First chunk of the response.
        is_done: Terminal chunk of the response.
    """

    content: Optional[str] = None
    reasoning: Optional[str] = None
    tool_deltas: List[ToolCallDelta] = field(default_factory=list)
    usage: Optional[TokenCounts] = None
    tokens: Optional[TokenCounts] = None
    model: Optional[str] = None
    stop_reason: Optional[str] = None
    is_start: bool = False
    is_done: bool = False


class StreamCallback:
    """Base stream callback; subclasses override :meth:`on_chunk`."""

    def configure(
        self,
        ops: "SchemaOps",
        *,
        endpoint: Optional[ProviderEndpoint] = None,
        provider: Optional[str] = None,
        model: Optional[str] = None,
    ) -> None:
        """Bind call context before the first chunk arrives."""

    def on_chunk(self, chunk: "StreamChunk", event: ChunkEvent) -> None:
        raise NotImplementedError

    def on_finish(self) -> None:
        """Called once after the read loop ends without error."""


def _stdout() -> Any:
    return sys.stdout


@dataclass
class HttpStreamCallback(StreamCallback):
    """Write streamed text to ``out``.

    Attributes:
        out: Any sink accepted by :func:`print_content`.
        verbose: Log every chunk's raw data at DEBUG.
        include_reasoning: Also write reasoning deltas.
    """

    out: Any = field(default_factory=_stdout)
    verbose: bool = False
    include_reasoning: bool = False

    def on_chunk(self, chunk: "StreamChunk", event: ChunkEvent) -> None:
        if self.verbose:
            _log.debug("chunk data: %s", chunk.data)
        if self.include_reasoning and event.reasoning:
            print_content(self.out, event.reasoning)
        if event.content:
            print_content(self.out, event.content)

    def on_finish(self) -> None:
        if is_terminal(self.out):
            print_content(self.out, "\n")


@dataclass
class RunInfo:
    """Timing and stop metadata of one streamed run (``time.time()`` seconds)."""

    creation_time: float = field(default_factory=time.time)
    inference_start: Optional[float] = None
    last_message_time: Optional[float] = None
    stop_sequence: Optional[str] = None

    @property
    def total_elapsed(self) -> Optional[float]:
        if self.last_message_time is None:
            return None
        return self.last_message_time - self.creation_time

    @property
    def inference_elapsed(self) -> Optional[float]:
        if self.inference_start is None or self.last_message_time is None:
            return None
        return self.last_message_time - self.inference_start

    @property
    def needs_tool_execution(self) -> bool:
        return self.stop_sequence in TOOL_STOP_REASONS


def format_user_meta(tokens: TokenCounts, cost: Optional[float], elapsed: Optional[float] = None) -> str:
    return f"User tokens: {tokens.prompt_tokens}, Cost: ${format_cost(cost)}"


def format_ai_meta(tokens: TokenCounts, cost: Optional[float], elapsed: Optional[float] = None) -> str:
    elapsed_str = f", Time: {round(elapsed, 2)}s" if elapsed is not None else ""
    return f"AI tokens: {tokens.completion_tokens}, Cost: ${format_cost(cost)}{elapsed_str}"


def format_error_message(exc: BaseException) -> str:
    return f"Stream error: {exc}"


def _format_reasoning(text: str) -> str:
    return f"{REASONING_COLOR}{text}{RESET_COLOR}"


def _identity(text: str) -> str:
    return text


def _noop(*_args: Any) -> None:
    return None


@dataclass
class HttpStreamHooks(StreamCallback):
    """Callback with customizable formatters and lifecycle hooks.

    Any hook returning a string has that string written to ``out`` (``on_error``
    output goes to ``stderr``). Exceptions raised while formatting content are
    passed to ``on_error`` and re-raised only when ``throw_on_error`` is set.
    """

    out: Any = field(default_factory=_stdout)
    verbose: bool = False
    throw_on_error: bool = False
    content_formatter: Callable[[str], Any] = _identity
    reasoning_formatter: Callable[[str], Any] = _format_reasoning
    on_meta_usr: Callable[..., Any] = format_user_meta
    on_meta_ai: Callable[..., Any] = format_ai_meta
    on_error: Callable[[BaseException], Any] = format_error_message
    on_done: Callable[[], Any] = _noop
    on_start: Callable[[], Any] = _noop
    on_stop_sequence: Callable[[str], Any] = _noop
    run_info: RunInfo = field(default_factory=RunInfo)
    model: Optional[str] = None
    endpoint: Optional[ProviderEndpoint] = None
    total_tokens: Optional[TokenCounts] = None
    in_reasoning_mode: bool = False
    _done_fired: bool = field(default=False, repr=False)
    _mid_line: bool = field(default=False, repr=False)

    def configure(
        self,
        ops: "SchemaOps",
        *,
        endpoint: Optional[ProviderEndpoint] = None,
        provider: Optional[str] = None,
        model: Optional[str] = None,
    ) -> None:
        if endpoint is not None:
            self.endpoint = endpoint

    def _emit(self, msg: Any, *, newline: bool = True) -> None:
        if isinstance(msg, str):
            print_content(self.out, msg + "\n" if newline else msg)

    def _write_text(self, event: ChunkEvent) -> None:
        if event.reasoning:
            formatted = self.reasoning_formatter(event.reasoning)
            self.in_reasoning_mode = True
            self._emit(formatted, newline=False)
            self._mid_line = self._mid_line or isinstance(formatted, str)
        elif event.content:
            formatted = self.content_formatter(event.content)
            if self.in_reasoning_mode and isinstance(formatted, str):
                print_content(self.out, "\n\n")
                self.in_reasoning_mode = False
            self._emit(formatted, newline=False)
            self._mid_line = self._mid_line or isinstance(formatted, str)

    def _fire_done(self) -> None:
        if self._done_fired:
            return
        self._done_fired = True
        self._emit(self.on_done())

    def on_chunk(self, chunk: "StreamChunk", event: ChunkEvent) -> None:
        if self.verbose:
            _log.debug("chunk data: %s", chunk.data)
        if event.is_start:
            self.run_info.inference_start = time.time()
            self._emit(self.on_start())
        if self.model is None and event.model:
            self.model = event.model

        try:
            self._write_text(event)
        except Exception as exc:
            msg = self.on_error(exc)
            if isinstance(msg, str):
                print(msg, file=sys.stderr)
            _log.log(logging.WARNING if self.throw_on_error else logging.DEBUG, "stream hook failed: %s", exc)
            if self.throw_on_error:
                raise

        if event.stop_reason:
            self.run_info.stop_sequence = event.stop_reason
            self.on_stop_sequence(event.stop_reason)

        if event.usage is not None:
            self.total_tokens = event.tokens
            self.run_info.last_message_time = time.time()
            cost = calculate_cost(self.endpoint, self.total_tokens) if self.endpoint is not None else None
            elapsed = self.run_info.total_elapsed
            if event.usage.prompt_tokens > 0 and event.usage.completion_tokens == 0:
                msg = self.on_meta_usr(self.total_tokens, cost, elapsed)
            else:
                msg = self.on_meta_ai(self.total_tokens, cost, elapsed)
            if isinstance(msg, str):
                self._emit(("\n" if self._mid_line else "") + msg)
                self._mid_line = False

        if event.is_done:
            self._fire_done()

    def on_finish(self) -> None:
        self.in_reasoning_mode = False
        self._fire_done()


__all__ = [
    "ChunkEvent",
    "StreamCallback",
    "HttpStreamCallback",
    "HttpStreamHooks",
    "RunInfo",
    "format_user_meta",
    "format_ai_meta",
    "format_error_message",
    "TOOL_STOP_REASONS",
]
