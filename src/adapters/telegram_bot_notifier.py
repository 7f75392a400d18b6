"""Telegram Bot API notification adapter.

Uses the Bot API for delivery so every destination can be a group the bot
was added to.
"""

from __future__ import annotations

import json
import urllib.error
import urllib.request

from adapters.notification_formatting import format_broadcast, format_chat
from core.models import BroadcastNotice, ChatRelayNotice, Destination

# Telegram rejects photo captions longer than this.
CAPTION_LIMIT = 1024


class TelegramBotNotifier:
    """Notifier adapter that sends messages via the Telegram Bot API."""

    def __init__(self, bot_token: str, timeout: float = 10.0) -> None:
        self._bot_token = bot_token
        self._timeout = timeout

    def _endpoint(self, method: str) -> str:
        # The Bot API endpoint is deterministic and derived from the token.
        return f"https://api.telegram.org/bot{self._bot_token}/{method}"

    def _post(self, method: str, payload: dict) -> None:
        data = json.dumps(payload).encode("utf-8")
        request = urllib.request.Request(self._endpoint(method), data=data, method="POST")
        request.add_header("Content-Type", "application/json")
        # Blocking HTTP call; notices are small and infrequent.
        try:
            with urllib.request.urlopen(request, timeout=self._timeout):
                pass
        except urllib.error.HTTPError as e:
            body = e.read().decode("utf-8", errors="replace")
            raise RuntimeError(f"Bot API error {e.code}: {body}") from e

    async def send_broadcast(self, destination: Destination, notice: BroadcastNotice) -> None:
        """Send a broadcast notice, as a photo with caption when it has an icon."""

        label = destination.clan_name or destination.name
        text = format_broadcast(notice, label, mode="html")
        if notice.icon_url and len(text) <= CAPTION_LIMIT:
            self._post(
                "sendPhoto",
                {
                    "chat_id": destination.broadcast_chat_id,
                    "photo": notice.icon_url,
                    "caption": text,
                    "parse_mode": "HTML",
                },
            )
            return
        self._post(
            "sendMessage",
            {
                "chat_id": destination.broadcast_chat_id,
                "text": text,
                "parse_mode": "HTML",
                "disable_web_page_preview": True,
            },
        )

    async def send_chat(self, destination: Destination, notice: ChatRelayNotice) -> None:
        """Relay a clan chat line to the destination's chat channel."""

        self._post(
            "sendMessage",
            {
                "chat_id": destination.clan_chat_chat_id,
                "text": format_chat(notice, mode="html"),
                "parse_mode": "HTML",
                "disable_web_page_preview": True,
                "disable_notification": True,
            },
        )
