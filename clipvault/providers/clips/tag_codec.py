"""Codec for the ``ai_tags`` column.

Tags are held in memory as an ordered ``list[str]`` and stored as a JSON
array in a TEXT column.  Encoding keeps non-ASCII characters literal so
that substring search over the stored text matches what the user typed.
"""

from __future__ import annotations

import json
from collections.abc import Sequence

from clipvault.utils.errors import StorageReadError, ValidationError


def encode_tags(tags: Sequence[str]) -> str:
    """Serialize an ordered tag sequence for storage."""
    if isinstance(tags, str) or not all(isinstance(tag, str) for tag in tags):
        raise ValidationError("ai_tags must be a sequence of strings")
    return json.dumps(list(tags), ensure_ascii=False)


def decode_tags(raw: str | None) -> list[str]:
    """Deserialize a stored tag column back into an ordered list.

    Raises
    ------
    StorageReadError
        If the stored value is not a JSON array of strings.
    """
    if raw is None:
        raise StorageReadError("Stored ai_tags value is missing")
    try:
        tags = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise StorageReadError(f"Stored ai_tags value is not valid JSON: {exc}") from exc
    if not isinstance(tags, list) or not all(isinstance(tag, str) for tag in tags):
        raise StorageReadError("Stored ai_tags value is not an array of strings")
    return tags
