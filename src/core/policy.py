"""Price enrichment and per-destination filtering (core domain)."""

from __future__ import annotations

import dataclasses
import logging
from typing import Optional

from core.models import ExtractedEvent, ItemDrop, PolicyContext, VALUE_BEARING_KINDS
from core.price_catalog import PriceSnapshot

LOGGER = logging.getLogger(__name__)


def enrich(event: ExtractedEvent, snapshot: PriceSnapshot) -> ExtractedEvent:
    """Attach market value and icon to value-bearing events.

    A missing price leaves ``item_value`` as None; it is never defaulted to
    zero, which would wrongly fail a minimum-value threshold.
    """

    if not isinstance(event, ItemDrop):
        return event
    price = snapshot.lookup(event.item_name)
    icon_url = snapshot.icon_url(event.item_name) or event.icon_url
    if price is None:
        return dataclasses.replace(event, icon_url=icon_url)
    return dataclasses.replace(event, item_value=price * event.quantity, icon_url=icon_url)


def apply_policy(
    event: ExtractedEvent,
    snapshot: PriceSnapshot,
    policy: PolicyContext,
) -> Optional[ExtractedEvent]:
    """Return the enriched event, or None when the destination should not see it.

    Rules, in order:
    - Kinds outside ``policy.allowed_kinds`` are dropped (None allows all).
    - Value-bearing events get ``item_value = price * quantity`` when the
      price is known.
    - With ``min_item_value`` set, a known value below it is dropped. An
      unknown value passes (fail-open) unless ``require_known_value`` is set.
    """

    if policy.allowed_kinds is not None and event.kind not in policy.allowed_kinds:
        LOGGER.debug("Dropping %s: kind not allowed", event.kind.value)
        return None

    enriched = enrich(event, snapshot)
    if policy.min_item_value is None or enriched.kind not in VALUE_BEARING_KINDS:
        return enriched

    item_value = enriched.item_value
    if item_value is None:
        if policy.require_known_value:
            LOGGER.debug("Dropping %s: no known price", enriched.item_name)
            return None
        return enriched

    if item_value < policy.min_item_value:
        LOGGER.debug(
            "Dropping %s: value %s below threshold %s",
            enriched.item_name,
            item_value,
            policy.min_item_value,
        )
        return None
    return enriched
