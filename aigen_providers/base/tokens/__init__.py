"""Token usage helpers package."""

from .extraction import (
    extract_chat_completion_tokens,
    extract_anthropic_tokens,
    extract_gemini_tokens,
    extract_responses_tokens,
)
from .accumulation import TokenPolicy, TokenAccumulator, combine_tokens

__all__ = [
    "extract_chat_completion_tokens",
    "extract_anthropic_tokens",
    "extract_gemini_tokens",
    "extract_responses_tokens",
    "TokenPolicy",
    "TokenAccumulator",
    "combine_tokens",
]
