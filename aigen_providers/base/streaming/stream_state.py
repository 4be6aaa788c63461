"""Per-request stream reducer.

:class:`StreamState` owns everything one in-flight stream mutates: the SSE
decoder and its spillover, the retained chunk list, the start/done/stop
flags, the running token accumulator, text/reasoning buffers, tool-call
buffers and metrics. It is fed decoded text and can be driven without a
socket, which is how the tests exercise it.

Per chunk, strictly in order:

1. error frame check (raises :class:`ProviderError`, nothing is appended)
2. termination check (sets a flag consulted only after this chunk is handled)
3. classification and callback dispatch
4. the chunk is appended to :attr:`StreamState.chunks`

``done`` follows the schema's ``is_done`` classifier; ``stopped`` follows
``SchemaOps.should_stop`` and is what ends the driver's read loop.

:meth:`StreamState.finalize` folds the retained chunks with the schema's
accumulator and parses the rebuilt body with the buffered parser, so the
result has exactly the shape of a non-streaming call.
"""
from __future__ import annotations

from typing import List, Optional, TYPE_CHECKING

from ..models import NormalizedResponse, ProviderEndpoint, TokenCounts
from ..tokens import TokenAccumulator, TokenPolicy
from .callbacks import ChunkEvent, StreamCallback
from .sse import SSEDecoder, StreamChunk, raise_for_error_chunk
from .streaming_metrics import StreamMetrics
from .tool_calls import ToolCallAccumulator

if TYPE_CHECKING:  # pragma: no cover
    from ...schemas import SchemaOps


class StreamState:
    """Mutable state of one streamed request; never shared across calls."""

    def __init__(
        self,
        ops: "SchemaOps",
        *,
        callback: Optional[StreamCallback] = None,
        endpoint: Optional[ProviderEndpoint] = None,
        provider: str = "unknown",
        model: Optional[str] = None,
        token_policy: Optional[TokenPolicy] = None,
    ) -> None:
        self.ops = ops
        self.callback = callback
        self.endpoint = endpoint
        self.provider = provider
        self.model = model
        self.decoder = SSEDecoder()
        self.chunks: List[StreamChunk] = []
        self.started = False
        self.done = False
        self.stopped = False
        self.tokens = TokenAccumulator(token_policy or ops.token_policy)
        self.tools = ToolCallAccumulator()
        self.metrics = StreamMetrics()
        self._text: List[str] = []
        self._reasoning: List[str] = []
        self.stop_reason: Optional[str] = None
        if callback is not None:
            callback.configure(ops, endpoint=endpoint, provider=provider, model=model)

    @property
    def spillover(self) -> str:
        return self.decoder.spillover

    @property
    def text(self) -> str:
        return "".join(self._text)

    @property
    def reasoning(self) -> str:
        return "".join(self._reasoning)

    def feed(self, text: str) -> bool:
        """Process every complete message in ``text``; return the stop flag.

        All chunks of one read are handled even when an earlier one is
        terminal, since trailing usage frames often share the read.
        """
        for chunk in self.decoder.feed(text):
            self.process(chunk)
        return self.stopped

    def flush(self) -> bool:
        """Handle an unterminated final message left at end of stream."""
        for chunk in self.decoder.flush():
            self.process(chunk)
        return self.stopped

    def process(self, chunk: StreamChunk) -> None:
        raise_for_error_chunk(chunk, provider=self.provider, model=self.model)
        is_done = self.ops.is_done(chunk)
        event = self._classify(chunk, is_done)
        if self.callback is not None:
            self.callback.on_chunk(chunk, event)
        self.chunks.append(chunk)
        self.metrics.record_chunk()
        if is_done:
            self.done = True
        if self.ops.should_stop(chunk):
            self.stopped = True

    def _classify(self, chunk: StreamChunk, is_done: bool) -> ChunkEvent:
        ops = self.ops
        content = ops.extract_content(chunk)
        reasoning = ops.extract_reasoning(chunk)
        tool_deltas = ops.extract_tool_deltas(chunk)
        usage = ops.extract_usage(chunk)
        tokens = self.tokens.add(usage)
        model = ops.extract_model(chunk)
        stop_reason = ops.extract_stop_reason(chunk)

        is_start = False
        if not self.started and (ops.is_start(chunk) or content or reasoning):
            self.started = is_start = True
        if content:
            self._text.append(content)
            self.metrics.record_emit()
        if reasoning:
            self._reasoning.append(reasoning)
            self.metrics.record_emit()
        self.tools.extend(tool_deltas)
        if model and self.model is None:
            self.model = model
        if stop_reason:
            self.stop_reason = stop_reason
        return ChunkEvent(
            content=content,
            reasoning=reasoning,
            tool_deltas=tool_deltas,
            usage=usage,
            tokens=tokens,
            model=model,
            stop_reason=stop_reason,
            is_start=is_start,
            is_done=is_done,
        )

    def build_body(self) -> Optional[dict]:
        """Vendor-shaped non-streaming body rebuilt from the retained chunks."""
        return self.ops.build_response_body(self.chunks)

    def finalize(self, body: Optional[dict] = None) -> NormalizedResponse:
        """Return the normalized result of the stream.

        Token counts come from the rebuilt body; the running accumulator is
        used when the body carries none.
        """
        if body is None:
            body = self.build_body()
        if body is not None:
            result = self.ops.parse_response(body)
        else:
            tool_calls = self.tools.finalize()
            result = NormalizedResponse(
                content=self.text,
                reasoning=self.reasoning or None,
                tool_calls=tool_calls or None,
                finish_reason=self.stop_reason,
                model=self.model,
            )
        if result.tokens is None:
            result.tokens = self.running_tokens
        return result

    @property
    def running_tokens(self) -> Optional[TokenCounts]:
        return self.tokens.total


__all__ = ["StreamState"]
