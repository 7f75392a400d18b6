"""Ports (interfaces) used by the core pipeline.

Ports define the minimal contracts for price, storage and notification
adapters so that the core can be reused with different backends.
"""

from __future__ import annotations

from typing import Optional, Protocol

from core.models import BroadcastNotice, ChatRelayNotice, Destination, RawChatMessage
from core.price_catalog import PriceSnapshot


class PriceSourcePort(Protocol):
    """Fetches the full current item price mapping; raises on failure."""

    def fetch_snapshot(self) -> PriceSnapshot:
        ...


class SnapshotStorePort(Protocol):
    """Keeps the last good price snapshot across restarts."""

    def load_snapshot(self) -> Optional[PriceSnapshot]:
        ...

    def save_snapshot(self, snapshot: PriceSnapshot) -> None:
        ...


class StoragePort(Protocol):
    """Storage operations required by the batch processor."""

    def is_seen(self, fingerprint: str) -> bool:
        ...

    def mark_seen(self, fingerprint: str) -> None:
        ...

    def cleanup_seen(self, ttl_seconds: int) -> int:
        ...

    def save_notice(self, destination: Destination, raw: RawChatMessage, notice: BroadcastNotice) -> None:
        ...


class NotifierPort(Protocol):
    """Notification operations required by the batch processor."""

    async def send_broadcast(self, destination: Destination, notice: BroadcastNotice) -> None:
        ...

    async def send_chat(self, destination: Destination, notice: ChatRelayNotice) -> None:
        ...
