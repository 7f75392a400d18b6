"""Typed field extraction for classified broadcasts (core domain)."""

from __future__ import annotations

import re
from typing import Any, Optional

from core.classifier import BroadcastMatch, match_broadcast
from core.models import EVENT_TYPES, EventKind, ExtractedEvent, RawChatMessage
from core.templates import FieldGrammar, templates_for

_INTEGER = re.compile(r"\d{1,3}(?:,\d{3})+|\d+")
_DURATION = re.compile(r"(?:(?P<hours>\d+):)?(?P<minutes>\d{1,2}):(?P<seconds>\d{2})(?:\.(?P<fraction>\d{1,2}))?")


class MalformedBroadcast(ValueError):
    """A template matched but one of its captures broke the field grammar.

    This means the catalog and the game's wording have drifted apart; the raw
    text is kept so the offending line can be logged verbatim.
    """

    def __init__(self, message: str, field_name: str, value: str, template_name: str) -> None:
        super().__init__(
            f"Template {template_name} matched but {field_name}={value!r} is invalid: {message!r}"
        )
        self.message = message
        self.field_name = field_name
        self.value = value
        self.template_name = template_name


def parse_integer(value: str) -> int:
    """Parse a non-negative integer with optional thousands separators."""

    if not _INTEGER.fullmatch(value):
        raise ValueError(f"Not an integer: {value!r}")
    return int(value.replace(",", ""))


def parse_duration(value: str) -> float:
    """Parse ``H:MM:SS``, ``M:SS`` or either with hundredths into seconds."""

    match = _DURATION.fullmatch(value)
    if match is None:
        raise ValueError(f"Not a duration: {value!r}")
    hours = int(match.group("hours") or 0)
    minutes = int(match.group("minutes"))
    seconds = int(match.group("seconds"))
    if seconds >= 60 or (match.group("hours") is not None and minutes >= 60):
        raise ValueError(f"Not a duration: {value!r}")
    fraction = match.group("fraction")
    total = hours * 3600 + minutes * 60 + seconds
    if fraction:
        total += int(fraction) / (10 ** len(fraction))
    return float(total)


def extract_event(result: BroadcastMatch) -> ExtractedEvent:
    """Build the typed event for a classifier match, reusing its captures."""

    template = result.template
    values: dict[str, Any] = dict(template.constants)
    if template.player_from_sender:
        values["player"] = result.raw.sender

    for field_name, grammar in template.fields.items():
        captured: Optional[str] = result.match.group(field_name)
        if captured is None:
            # Optional capture; the variant default applies.
            continue
        try:
            if grammar is FieldGrammar.INTEGER:
                values[field_name] = parse_integer(captured)
            elif grammar is FieldGrammar.DURATION:
                values["seconds"] = parse_duration(captured)
                values[field_name] = captured
            else:
                values[field_name] = captured
        except ValueError as exc:
            raise MalformedBroadcast(result.raw.message, field_name, captured, template.name) from exc

    event_type = EVENT_TYPES[template.kind]
    return event_type(**values)


def extract(kind: EventKind, raw: RawChatMessage) -> ExtractedEvent:
    """Extract ``raw`` as an event of ``kind``.

    Only templates of that kind are consulted. Raises ValueError when the line
    is not a broadcast of that kind, and MalformedBroadcast when it is but a
    field fails its grammar.
    """

    result = match_broadcast(raw, templates_for(kind))
    if result is None:
        raise ValueError(f"Message is not a {kind.value} broadcast: {raw.message!r}")
    return extract_event(result)
