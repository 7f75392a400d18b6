"""Core chat batch processing.

This module is integration-agnostic. It only relies on ports for storage and
notifications, enabling other ingestion frontends or delivery adapters without
changes here.
"""

from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import Iterable

from core.config import DedupConfig
from core.dedup import compute_fingerprint, normalize_for_fingerprint
from core.extractor import MalformedBroadcast
from core.formatter import format_chat_relay
from core.models import Destination, RawChatMessage
from core.pipeline import BroadcastPipeline
from core.ports import NotifierPort, StoragePort

LOGGER = logging.getLogger(__name__)


@dataclass
class BatchResult:
    """Counters for one processed batch."""

    received: int = 0
    skipped_clan: int = 0
    duplicates: int = 0
    relayed: int = 0
    broadcasts: int = 0
    malformed: int = 0
    failed_deliveries: int = 0


class ChatBatchProcessor:
    """Orchestrates dedup, chat relay, broadcast extraction and notifications."""

    def __init__(
        self,
        pipeline: BroadcastPipeline,
        storage: StoragePort,
        notifier: NotifierPort,
        dedup_config: DedupConfig,
    ) -> None:
        self._pipeline = pipeline
        self._storage = storage
        self._notifier = notifier
        self._dedup = dedup_config

    async def handle_batch(self, messages: Iterable[RawChatMessage], destination: Destination) -> BatchResult:
        """Process one batch of chat lines for one destination."""

        result = BatchResult()
        if self._dedup.mode != "off":
            self._storage.cleanup_seen(self._dedup.ttl_seconds)

        for raw in messages:
            result.received += 1
            await self._handle(raw, destination, result)

        LOGGER.info(
            "Batch for %s: received=%s duplicates=%s relayed=%s broadcasts=%s malformed=%s",
            destination.name,
            result.received,
            result.duplicates,
            result.relayed,
            result.broadcasts,
            result.malformed,
        )
        return result

    async def _handle(self, raw: RawChatMessage, destination: Destination, result: BatchResult) -> None:
        # A destination bound to a clan only sees that clan's chat.
        if destination.clan_name and raw.clan_name != destination.clan_name:
            result.skipped_clan += 1
            return

        if not raw.message.strip():
            return

        # Content-level dedup: every clan member's client submits the same line.
        normalized_text = normalize_for_fingerprint(raw.message)
        fingerprint = compute_fingerprint(destination.name, raw.clan_name, normalized_text, self._dedup.mode)
        if fingerprint:
            if self._storage.is_seen(fingerprint):
                LOGGER.debug("Dedup skip for %s (same message)", destination.name)
                result.duplicates += 1
                return
            self._storage.mark_seen(fingerprint)

        if destination.clan_chat_chat_id:
            try:
                await self._notifier.send_chat(destination, format_chat_relay(raw))
                result.relayed += 1
            except Exception:
                result.failed_deliveries += 1
                LOGGER.exception("Failed to relay chat line to %s", destination.name)

        if not destination.broadcast_chat_id:
            return

        try:
            notice = self._pipeline.process(raw, destination.policy)
        except MalformedBroadcast as exc:
            # A template matched but the wording drifted; keep the line for the catalog fix.
            result.malformed += 1
            LOGGER.error("Malformed broadcast (%s) in %s: %r", exc.template_name, raw.clan_name, raw.message)
            return

        if notice is None:
            return

        self._storage.save_notice(destination, raw, notice)
        try:
            await self._notifier.send_broadcast(destination, notice)
        except Exception:
            result.failed_deliveries += 1
            LOGGER.exception("Failed to deliver %s broadcast to %s", notice.kind.value, destination.name)
            return
        result.broadcasts += 1
        LOGGER.info("Broadcast sent to %s (%s): %s", destination.name, notice.kind.value, notice.title)
