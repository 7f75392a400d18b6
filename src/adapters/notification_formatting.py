"""Shared notification formatting helpers.

Keeping formatting here prevents drift between adapters and keeps messages
consistent regardless of delivery channel.
"""

from __future__ import annotations

import html

from core.models import BroadcastNotice, ChatRelayNotice

DIVIDER = "──────────────"


def _escape_md(value: str) -> str:
    for ch in r"*[`_":
        value = value.replace(ch, f"\\{ch}")
    return value


def _format_broadcast_markdown(notice: BroadcastNotice, destination_label: str) -> str:
    """Create the Markdown broadcast body used by log output."""

    lines = [
        f"**{_escape_md(notice.title)}**",
        f"**Clan:** {_escape_md(destination_label)}",
        DIVIDER,
        _escape_md(notice.body),
    ]
    if notice.item_value is not None:
        lines.extend(["", f"**Value:** {notice.item_value:,} gp"])
    if notice.icon_url:
        lines.extend(["", notice.icon_url])
    return "\n".join(lines)


def _format_broadcast_html(notice: BroadcastNotice, destination_label: str) -> str:
    """Create the HTML broadcast body used by the Bot API adapter."""

    parts = [
        f"<b>{html.escape(notice.title)}</b>",
        f"<i>{html.escape(destination_label)}</i>",
        DIVIDER,
        html.escape(notice.body),
    ]
    if notice.item_value is not None:
        parts.extend(["", f"<b>Value:</b> {notice.item_value:,} gp"])
    return "\n".join(parts)


def format_broadcast(notice: BroadcastNotice, destination_label: str, mode: str) -> str:
    """Return the broadcast notice formatted for the requested mode."""

    if mode == "markdown":
        return _format_broadcast_markdown(notice, destination_label)
    if mode == "html":
        return _format_broadcast_html(notice, destination_label)
    raise ValueError(f"Unsupported notification format: {mode}")


def format_chat(notice: ChatRelayNotice, mode: str) -> str:
    """Return a relayed clan chat line formatted for the requested mode."""

    if mode == "markdown":
        return f"**{_escape_md(notice.author)}:** {_escape_md(notice.body)}"
    if mode == "html":
        return f"<b>{html.escape(notice.author)}:</b> {html.escape(notice.body)}"
    raise ValueError(f"Unsupported notification format: {mode}")
