"""Streaming normalization engine.

SSE framing (:mod:`.sse`), the per-request reducer (:mod:`.stream_state`),
callbacks and sinks, and the httpx read loop (:mod:`.driver`).
"""

from .sse import (
    SSEDecoder,
    StreamChunk,
    extract_chunks,
    is_error_chunk,
    parse_sse_message,
    raise_for_error_chunk,
    split_sse_messages,
)
from .tool_calls import ToolCallAccumulator, parse_arguments
from .sinks import print_content
from .callbacks import (
    ChunkEvent,
    HttpStreamCallback,
    HttpStreamHooks,
    RunInfo,
    StreamCallback,
)
from .streaming_metrics import StreamMetrics
from .stream_state import StreamState
from .driver import read_stream, run_stream, validate_stream_response

__all__ = [
    "SSEDecoder",
    "StreamChunk",
    "extract_chunks",
    "is_error_chunk",
    "parse_sse_message",
    "raise_for_error_chunk",
    "split_sse_messages",
    "ToolCallAccumulator",
    "parse_arguments",
    "print_content",
    "ChunkEvent",
    "HttpStreamCallback",
    "HttpStreamHooks",
    "RunInfo",
    "StreamCallback",
    "StreamMetrics",
    "StreamState",
    "read_stream",
    "run_stream",
    "validate_stream_response",
]
