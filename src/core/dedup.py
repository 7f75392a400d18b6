"""Deduplication helpers (core domain).

Several clan members run the game plugin, so the same chat line usually
arrives once per member within a few seconds. Fingerprints are always scoped
to a destination so one batch can be delivered to several destinations.
"""

from __future__ import annotations

import hashlib
import re
from typing import Optional

DEDUP_MODES = ("off", "per_destination", "per_clan")


def _collapse_whitespace(text: str) -> str:
    return re.sub(r"\s+", " ", text).strip()


def normalize_for_fingerprint(text: str) -> str:
    """Normalize text for deterministic fingerprinting."""

    return _collapse_whitespace(text)


def compute_fingerprint(destination_name: str, clan_name: str, normalized_text: str, mode: str) -> Optional[str]:
    """Return a fingerprint hash based on dedup mode."""

    if mode == "off":
        return None

    if mode == "per_destination":
        payload = f"{destination_name}\n{normalized_text}"
    elif mode == "per_clan":
        payload = f"{destination_name}\n{clan_name}\n{normalized_text}"
    else:
        raise ValueError(f"Unsupported dedup mode: {mode}")

    return hashlib.sha256(payload.encode("utf-8")).hexdigest()
