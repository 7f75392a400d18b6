"""Scheduled price catalog refresh.

The refresher owns the only write path into the price catalog. A failed fetch
is logged and retried on the next cycle; the last good snapshot stays active
for as long as fetches keep failing.
"""

from __future__ import annotations

import logging
import threading
from typing import Optional

from core.ports import PriceSourcePort, SnapshotStorePort
from core.price_catalog import PriceCatalog

LOGGER = logging.getLogger(__name__)


class PriceRefresher:
    """Keeps a PriceCatalog current from a price source on a fixed interval."""

    def __init__(
        self,
        catalog: PriceCatalog,
        source: PriceSourcePort,
        store: Optional[SnapshotStorePort],
        interval_seconds: float,
    ) -> None:
        self._catalog = catalog
        self._source = source
        self._store = store
        self._interval = interval_seconds
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None

    def load_persisted(self) -> bool:
        """Install the snapshot saved by a previous run, if there is one."""

        if self._store is None:
            return False
        snapshot = self._store.load_snapshot()
        if snapshot is None or not len(snapshot):
            LOGGER.info("No persisted price snapshot found")
            return False
        self._catalog.refresh(snapshot)
        LOGGER.info("Loaded persisted price snapshot from %s", snapshot.fetched_at)
        return True

    def refresh_once(self) -> bool:
        """Fetch, install and persist a snapshot. Returns False on failure."""

        if not self._catalog.refresh_from(self._source.fetch_snapshot):
            return False
        if self._store is not None:
            try:
                self._store.save_snapshot(self._catalog.snapshot)
            except Exception:
                # The in-memory catalog is already current; the next cycle retries the write.
                LOGGER.exception("Failed to persist price snapshot")
        return True

    def _run(self) -> None:
        LOGGER.info("Price refresher started (interval=%ss)", self._interval)
        while not self._stop_event.wait(self._interval):
            self.refresh_once()
        LOGGER.info("Price refresher stopped")

    def start(self) -> None:
        if self._thread is not None and self._thread.is_alive():
            return
        self._stop_event.clear()
        self._thread = threading.Thread(target=self._run, name="price-refresher", daemon=True)
        self._thread.start()

    def stop(self, timeout: Optional[float] = None) -> None:
        self._stop_event.set()
        if self._thread is not None:
            self._thread.join(timeout)
            self._thread = None
