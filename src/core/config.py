"""Core configuration dataclasses.

We keep config parsing outside the core, but these dataclasses define the
shape the core expects so adapters and app layers can build safely.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class DedupConfig:
    """Deduplication settings for incoming chat batches."""

    mode: str
    ttl_seconds: int


@dataclass(frozen=True)
class PriceRefreshConfig:
    """Price source and refresh schedule consumed by the price adapters."""

    enabled: bool
    mapping_url: str
    latest_url: str
    user_agent: str
    refresh_seconds: int
    timeout_seconds: float
