"""Log-only notification adapter used for dry runs."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from adapters.notification_formatting import format_broadcast, format_chat
from core.models import BroadcastNotice, ChatRelayNotice, Destination


@dataclass
class LogNotifier:
    """Writes every notice to the log instead of delivering it."""

    logger_name: str = "clanrelay.notices"
    sent: list[BroadcastNotice] = field(default_factory=list)

    async def send_broadcast(self, destination: Destination, notice: BroadcastNotice) -> None:
        log = logging.getLogger(self.logger_name)
        self.sent.append(notice)
        label = destination.clan_name or destination.name
        log.info("[%s] %s", destination.name, format_broadcast(notice, label, mode="markdown"))

    async def send_chat(self, destination: Destination, notice: ChatRelayNotice) -> None:
        log = logging.getLogger(self.logger_name)
        log.info("[%s] %s", destination.name, format_chat(notice, mode="markdown"))
