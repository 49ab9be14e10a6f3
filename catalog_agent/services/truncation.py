"""Bounding the size of tool results before they re-enter the conversation."""

import json
from collections.abc import Sequence
from typing import Any

from pydantic_core import to_jsonable_python

DEFAULT_MAX_LENGTH = 5000
SAMPLE_SIZE = 3
TRUNCATION_MARKER = "... [TRUNCATED]"


def serialize_tool_result(result: Any) -> str:
    """Serialize a tool result for a tool message.

    Strings are passed through unchanged; anything else is rendered as JSON.
    """
    if isinstance(result, str):
        return result
    return json.dumps(to_jsonable_python(result, fallback=str), ensure_ascii=False)


def truncate_tool_result(result: Any, max_length: int = DEFAULT_MAX_LENGTH) -> str:
    """Serialize a tool result, bounded to ``max_length`` characters.

    Oversized sequences are replaced by an envelope with the item count and a
    small sample so the model can narrow its query or paginate. Anything else
    is cut and marked as truncated.

    Args:
        result: Value returned by a tool handler
        max_length: Maximum length of the serialized output

    Returns:
        Serialized, possibly truncated, result
    """
    serialized = serialize_tool_result(result)
    if len(serialized) <= max_length:
        return serialized

    if isinstance(result, Sequence) and not isinstance(result, str | bytes | bytearray):
        total = len(result)
        envelope = {
            "truncated": True,
            "totalItems": total,
            "sample": to_jsonable_python(list(result[:SAMPLE_SIZE]), fallback=str),
            "message": f"Showing {min(SAMPLE_SIZE, total)} of {total} items. Use filters or pagination for more.",
        }
        return json.dumps(envelope, ensure_ascii=False)

    if max_length <= len(TRUNCATION_MARKER):
        return serialized[:max_length]
    return serialized[: max_length - len(TRUNCATION_MARKER)] + TRUNCATION_MARKER
