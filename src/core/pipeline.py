"""Broadcast extraction pipeline (core domain).

classify -> extract -> enrich & filter -> format, as one synchronous call. The
only shared state is the price catalog, read through one snapshot per call.
"""

from __future__ import annotations

import logging
from typing import Optional

from core.classifier import match_broadcast
from core.extractor import extract_event
from core.formatter import format_notice
from core.models import BroadcastNotice, PolicyContext, RawChatMessage
from core.policy import apply_policy
from core.price_catalog import PriceCatalog

LOGGER = logging.getLogger(__name__)


class BroadcastPipeline:
    """Turns one raw chat line into zero or one broadcast notice."""

    def __init__(self, catalog: PriceCatalog) -> None:
        self._catalog = catalog

    def process(self, raw: RawChatMessage, policy: PolicyContext) -> Optional[BroadcastNotice]:
        """Return the notice for ``raw`` under ``policy``, or None.

        Raises core.extractor.MalformedBroadcast when a template matched but a
        captured field failed its grammar.
        """

        result = match_broadcast(raw)
        if result is None:
            return None

        event = extract_event(result)
        enriched = apply_policy(event, self._catalog.snapshot, policy)
        if enriched is None:
            return None

        LOGGER.debug("Broadcast %s matched template %s", enriched.kind.value, result.template.name)
        return format_notice(enriched)
