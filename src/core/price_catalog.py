"""In-memory Grand Exchange price catalog (core domain).

The catalog holds one immutable ``PriceSnapshot`` at a time. Refreshes build a
complete new snapshot and swap the reference; readers grab ``catalog.snapshot``
once per call and never see a half-written mapping.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
import logging
import threading
from types import MappingProxyType
from typing import Callable, Mapping, Optional, Union

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class PriceSnapshot:
    """Read-only view of item prices at one point in time."""

    prices: Mapping[str, int] = field(default_factory=lambda: MappingProxyType({}))
    icons: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))
    fetched_at: Optional[datetime] = None

    def lookup(self, item_name: str) -> Optional[int]:
        """Exact-name price; None means no price is known (never zero)."""

        return self.prices.get(item_name)

    def icon_url(self, item_name: str) -> Optional[str]:
        return self.icons.get(item_name)

    def __len__(self) -> int:
        return len(self.prices)


EMPTY_SNAPSHOT = PriceSnapshot()


def build_snapshot(
    prices: Mapping[str, int],
    icons: Optional[Mapping[str, str]] = None,
    fetched_at: Optional[datetime] = None,
) -> PriceSnapshot:
    """Validate and freeze a complete price mapping.

    Raises ValueError for an empty mapping or any entry that is not a
    ``str -> int`` pair, so a broken fetch can never replace a good snapshot.
    """

    if not prices:
        raise ValueError("Refusing to build an empty price snapshot")
    frozen_prices: dict[str, int] = {}
    for name, price in prices.items():
        if not isinstance(name, str) or not name:
            raise ValueError(f"Invalid item name in price snapshot: {name!r}")
        if isinstance(price, bool) or not isinstance(price, int):
            raise ValueError(f"Invalid price for {name!r}: {price!r}")
        frozen_prices[name] = price
    frozen_icons = {name: url for name, url in (icons or {}).items() if url}
    return PriceSnapshot(
        prices=MappingProxyType(frozen_prices),
        icons=MappingProxyType(frozen_icons),
        fetched_at=fetched_at or datetime.now(timezone.utc),
    )


class PriceCatalog:
    """Atomically swappable holder of the current price snapshot."""

    def __init__(self, snapshot: Optional[PriceSnapshot] = None) -> None:
        self._snapshot = snapshot or EMPTY_SNAPSHOT
        self._write_lock = threading.Lock()

    @property
    def snapshot(self) -> PriceSnapshot:
        return self._snapshot

    @property
    def is_loaded(self) -> bool:
        return len(self._snapshot) > 0

    def lookup(self, item_name: str) -> Optional[int]:
        return self._snapshot.lookup(item_name)

    def icon_url(self, item_name: str) -> Optional[str]:
        return self._snapshot.icon_url(item_name)

    def refresh(self, snapshot: Union[PriceSnapshot, Mapping[str, int]]) -> PriceSnapshot:
        """Replace the whole catalog with ``snapshot``.

        Plain mappings are validated through ``build_snapshot``; on ValueError
        the current snapshot stays active.
        """

        if isinstance(snapshot, PriceSnapshot):
            new_snapshot = build_snapshot(snapshot.prices, snapshot.icons, snapshot.fetched_at)
        else:
            new_snapshot = build_snapshot(snapshot)
        with self._write_lock:
            self._snapshot = new_snapshot
        LOGGER.info("Price catalog replaced with %s items", len(new_snapshot))
        return new_snapshot

    def refresh_from(self, fetch: Callable[[], Union[PriceSnapshot, Mapping[str, int]]]) -> bool:
        """Fetch and install a snapshot; keep the last good one on any failure."""

        try:
            fetched = fetch()
            self.refresh(fetched)
        except Exception:
            LOGGER.warning(
                "Price refresh failed, keeping snapshot with %s items",
                len(self._snapshot),
                exc_info=True,
            )
            return False
        return True
