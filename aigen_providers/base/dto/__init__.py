"""DTO validation package for prompt messages."""

from .messages import Role, MessageDTO, ToolCallDTO, normalize_messages

__all__ = ["Role", "MessageDTO", "ToolCallDTO", "normalize_messages"]
