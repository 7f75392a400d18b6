"""OSRS wiki real-time prices adapter.

Builds complete price snapshots from the wiki's item mapping and latest
price endpoints. Implements the core PriceSourcePort.
"""

from __future__ import annotations

import json
import logging
import urllib.error
import urllib.request
from datetime import datetime, timezone
from typing import Any, Callable, Optional

from core.formatter import wiki_image
from core.price_catalog import PriceSnapshot, build_snapshot

LOGGER = logging.getLogger(__name__)

DEFAULT_MAPPING_URL = "https://prices.runescape.wiki/api/v1/osrs/mapping"
DEFAULT_LATEST_URL = "https://prices.runescape.wiki/api/v1/osrs/latest"

Opener = Callable[[urllib.request.Request, float], Any]


class PriceSourceError(RuntimeError):
    """The price source could not produce a complete snapshot."""


def _default_opener(request: urllib.request.Request, timeout: float) -> Any:
    return urllib.request.urlopen(request, timeout=timeout)


class WikiPriceSource:
    """Price source backed by prices.runescape.wiki."""

    def __init__(
        self,
        user_agent: str,
        mapping_url: str = DEFAULT_MAPPING_URL,
        latest_url: str = DEFAULT_LATEST_URL,
        timeout: float = 10.0,
        opener: Optional[Opener] = None,
    ) -> None:
        # The wiki rejects requests without a descriptive User-Agent.
        if not user_agent:
            raise ValueError("A descriptive user agent is required for the wiki price API")
        self._user_agent = user_agent
        self._mapping_url = mapping_url
        self._latest_url = latest_url
        self._timeout = timeout
        self._opener = opener or _default_opener

    def _get_json(self, url: str) -> Any:
        request = urllib.request.Request(url, method="GET")
        request.add_header("User-Agent", self._user_agent)
        request.add_header("Accept", "application/json")
        try:
            with self._opener(request, self._timeout) as resp:
                raw = resp.read().decode("utf-8")
        except urllib.error.HTTPError as exc:
            raise PriceSourceError(f"Price API error {exc.code} for {url}") from exc
        except urllib.error.URLError as exc:
            raise PriceSourceError(f"Price API unreachable at {url}: {exc.reason}") from exc
        try:
            return json.loads(raw)
        except ValueError as exc:
            raise PriceSourceError(f"Price API returned invalid JSON from {url}") from exc

    def fetch_snapshot(self) -> PriceSnapshot:
        """Fetch mapping and latest prices and merge them into one snapshot.

        Price preference per item: latest ``high``, then latest ``low``. Items
        without a market quote are left out; the mapping's store ``value`` is
        not a market price.
        """

        mapping = self._get_json(self._mapping_url)
        latest = self._get_json(self._latest_url)
        if not isinstance(mapping, list):
            raise PriceSourceError("Item mapping is not a list")
        if not isinstance(latest, dict):
            raise PriceSourceError("Latest prices payload is not an object")
        latest_data = latest.get("data")
        # An empty quote table means the feed is down, not that nothing trades.
        if not isinstance(latest_data, dict) or not latest_data:
            raise PriceSourceError("Latest prices payload has no data object")

        prices: dict[str, int] = {}
        icons: dict[str, str] = {}
        for item in mapping:
            if not isinstance(item, dict):
                continue
            name = item.get("name")
            item_id = item.get("id")
            if not name or item_id is None:
                continue
            quote = latest_data.get(str(item_id)) or {}
            price = _first_int(quote.get("high"), quote.get("low"))
            if price is None:
                continue
            prices[name] = price
            icon = item.get("icon")
            if icon:
                icons[name] = wiki_image(icon)

        if not prices:
            raise PriceSourceError("Price API returned no priced items")
        LOGGER.info("Fetched %s item prices from the wiki", len(prices))
        return build_snapshot(prices, icons, datetime.now(timezone.utc))


def _first_int(*values: Any) -> Optional[int]:
    for value in values:
        if isinstance(value, bool):
            continue
        if isinstance(value, int):
            return value
    return None
