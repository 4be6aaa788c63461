"""Wire protocol schemas.

``get_schema_ops`` maps a :class:`SchemaKind` (or its string value) onto the
operations record of that protocol.
"""
from __future__ import annotations

from typing import Dict, Union

from . import anthropic, chat_completion, gemini, responses
from .ops import SchemaKind, SchemaOps

SCHEMAS: Dict[SchemaKind, SchemaOps] = {
    SchemaKind.CHAT_COMPLETION: chat_completion.OPS,
    SchemaKind.ANTHROPIC: anthropic.OPS,
    SchemaKind.GEMINI: gemini.OPS,
    SchemaKind.RESPONSES: responses.OPS,
}


def get_schema_ops(schema: Union[SchemaKind, SchemaOps, str]) -> SchemaOps:
    """Return the operations for ``schema``.

    Raises:
        ValueError: For an unknown schema name.
    """
    if isinstance(schema, SchemaOps):
        return schema
    return SCHEMAS[SchemaKind(schema)]


__all__ = ["SchemaKind", "SchemaOps", "SCHEMAS", "get_schema_ops"]
