"""Broadcast classification against the template catalog (core domain)."""

from __future__ import annotations

from dataclasses import dataclass
import re
from typing import Iterable, Optional

from core.models import EventKind, RawChatMessage
from core.templates import TEMPLATES, BroadcastTemplate


@dataclass(frozen=True)
class BroadcastMatch:
    """Winning template plus its match state, handed on to the extractor."""

    template: BroadcastTemplate
    match: re.Match
    raw: RawChatMessage

    @property
    def kind(self) -> EventKind:
        return self.template.kind


def normalize_message(text: str) -> str:
    # The game client pads names with non-breaking spaces.
    return text.replace("\u00a0", " ").strip()


def match_broadcast(
    raw: RawChatMessage,
    templates: Iterable[BroadcastTemplate] = TEMPLATES,
) -> Optional[BroadcastMatch]:
    """Return the first template that fully matches the message, if any."""

    text = normalize_message(raw.message)
    if not text:
        return None
    for template in templates:
        match = template.pattern.fullmatch(text)
        if match is not None:
            return BroadcastMatch(template=template, match=match, raw=raw)
    return None


def classify(raw: RawChatMessage) -> EventKind:
    """Return the event kind of a chat line, or ``EventKind.UNRECOGNIZED``."""

    result = match_broadcast(raw)
    if result is None:
        return EventKind.UNRECOGNIZED
    return result.kind


def check_catalog(templates: Iterable[BroadcastTemplate] = TEMPLATES) -> None:
    """Verify the catalog is unambiguous.

    - Every declared field is a named group of the pattern and vice versa.
    - Every template has at least one sample line.
    - Every sample line is claimed by its own template, i.e. no earlier row
      shadows it.

    Raises ValueError describing the first problem found.
    """

    ordered = list(templates)
    names = [template.name for template in ordered]
    if len(set(names)) != len(names):
        raise ValueError("Duplicate template names in catalog")

    for template in ordered:
        if template.kind is EventKind.UNRECOGNIZED:
            raise ValueError(f"Template {template.name} produces Unrecognized")
        groups = set(template.pattern.groupindex)
        declared = set(template.fields)
        if groups != declared:
            raise ValueError(
                f"Template {template.name} declares {sorted(declared)} but captures {sorted(groups)}"
            )
        overlap = declared & set(template.constants)
        if overlap:
            raise ValueError(f"Template {template.name} both captures and fixes {sorted(overlap)}")
        if not template.samples:
            raise ValueError(f"Template {template.name} has no sample lines")
        for sample in template.samples:
            raw = RawChatMessage(author="", message=sample, clan_name="", sender="", rank="")
            winner = match_broadcast(raw, ordered)
            if winner is None:
                raise ValueError(f"Sample for {template.name} matches no template: {sample!r}")
            if winner.template is not template:
                raise ValueError(
                    f"Sample for {template.name} is shadowed by {winner.template.name}: {sample!r}"
                )
