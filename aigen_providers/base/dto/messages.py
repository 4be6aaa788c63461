"""
Pydantic DTOs for prompt messages.

Purpose
-------
Normalize whatever the caller hands to :func:`aigen_providers.aigen` (a plain
string, a role/content mapping, a ``MessageDTO`` or a list mixing those) into
one validated, provider-agnostic message list. The schema modules then map
that list onto their own wire formats.

External dependencies: Pydantic only. Validation either succeeds or raises a
``pydantic.ValidationError``.
"""

from __future__ import annotations

from typing import Any, Dict, List, Literal, Mapping, Optional

from pydantic import BaseModel, Field, model_validator

from ..logging import get_logger

Role = Literal["system", "user", "assistant", "tool"]

_log = get_logger("aigen.messages")


class ToolCallDTO(BaseModel):
    """A tool call previously requested by the assistant (for replaying history)."""

    id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    arguments: Dict[str, Any] = Field(default_factory=dict)


class MessageDTO(BaseModel):
    """A single chat message.

    Rules:
        - ``tool`` messages must carry ``tool_call_id``.
        - ``tool_calls`` is only valid on ``assistant`` messages.
        - Non-assistant messages need non-empty ``content``.
    """

    role: Role
    content: str = ""
    name: Optional[str] = None
    tool_call_id: Optional[str] = None
    tool_calls: Optional[List[ToolCallDTO]] = None

    @model_validator(mode="after")
    def _validate_role_fields(self) -> "MessageDTO":
        if self.role == "tool" and not self.tool_call_id:
            raise ValueError("tool message requires tool_call_id")
        if self.tool_calls and self.role != "assistant":
            raise ValueError("tool_calls only allowed on assistant messages")
        if self.role != "assistant" and not self.content.strip():
            raise ValueError(f"{self.role} message content must be non-empty")
        return self


def _coerce(item: Any) -> MessageDTO:
    if isinstance(item, MessageDTO):
        return item
    if isinstance(item, str):
        return MessageDTO(role="user", content=item)
    if isinstance(item, Mapping):
        return MessageDTO.model_validate(dict(item))
    return MessageDTO(role="user", content=str(item))


def normalize_messages(prompt: Any, sys_msg: Optional[str] = None) -> List[MessageDTO]:
    """Flatten ``prompt`` (+ optional system message) into validated messages.

    Accepted prompt forms: ``str``, ``MessageDTO``, a ``{"role", "content"}``
    mapping, or a list of any of these. Anything else is stringified into a
    user message. Consecutive messages with the same role are allowed but
    logged, since most vendors merge or reject them.
    """
    messages: List[MessageDTO] = []
    if sys_msg is not None:
        messages.append(MessageDTO(role="system", content=sys_msg))
    if isinstance(prompt, (list, tuple)):
        messages.extend(_coerce(item) for item in prompt)
    else:
        messages.append(_coerce(prompt))
    for idx in range(1, len(messages)):
        if messages[idx].role == messages[idx - 1].role and messages[idx].role != "tool":
            _log.debug("consecutive %s messages at index %d", messages[idx].role, idx)
    return messages


def split_system(messages: List[MessageDTO]) -> tuple[Optional[str], List[MessageDTO]]:
    """Separate system messages (joined by blank lines) from the conversation."""
    system = [m.content for m in messages if m.role == "system"]
    rest = [m for m in messages if m.role != "system"]
    return ("\n\n".join(system) if system else None), rest


__all__ = ["Role", "MessageDTO", "ToolCallDTO", "normalize_messages", "split_system"]
