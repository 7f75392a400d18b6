"""Chat batch mapping adapter.

The game plugin posts chat lines as JSON arrays; this keeps the wire shape
out of the core pipeline.
"""

from __future__ import annotations

import json
from typing import Any, List

from core.models import RawChatMessage


def _field(entry: dict, *names: str) -> str:
    for name in names:
        value = entry.get(name)
        if value is not None:
            return str(value)
    return ""


def message_from_dict(entry: Any) -> RawChatMessage:
    """Build a RawChatMessage from one decoded chat object."""

    if not isinstance(entry, dict):
        raise ValueError(f"Chat entry must be an object, got {type(entry).__name__}")
    if entry.get("message") is None:
        raise ValueError("Chat entry has no message")
    return RawChatMessage(
        author=_field(entry, "author"),
        message=str(entry["message"]),
        clan_name=_field(entry, "clan_name", "clanName"),
        sender=_field(entry, "sender"),
        rank=_field(entry, "rank"),
    )


def parse_batch(payload: str) -> List[RawChatMessage]:
    """Parse one JSON array of chat objects."""

    decoded = json.loads(payload)
    if not isinstance(decoded, list):
        raise ValueError("Chat batch must be a JSON array")
    return [message_from_dict(entry) for entry in decoded]
