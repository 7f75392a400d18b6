"""Static configuration for clanrelay.

All user-editable settings (destinations, dedup, prices, notifications,
logging) live in a single JSON file for quick edits without touching Python.
"""

import json
import os

from core.config import DedupConfig, PriceRefreshConfig
from core.dedup import DEDUP_MODES
from core.models import Destination, EventKind, PolicyContext

PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))

# CLANRELAY_CONFIG points at an alternative config file (tests, deployments).
CONFIG_PATH = os.getenv("CLANRELAY_CONFIG", os.path.join(PROJECT_ROOT, "config.json"))


def _load_json_config() -> dict:
    """Load config.json with a flat, user-friendly schema."""

    if not os.path.exists(CONFIG_PATH):
        raise FileNotFoundError(f"Config file not found: {CONFIG_PATH}")

    with open(CONFIG_PATH, "r", encoding="utf-8") as handle:
        return json.load(handle)


def _parse_policy(entry: dict) -> PolicyContext:
    raw_kinds = entry.get("allowed_kinds")
    allowed_kinds = None
    if raw_kinds is not None:
        allowed_kinds = frozenset(EventKind.parse(kind) for kind in raw_kinds)
    min_item_value = entry.get("min_item_value")
    return PolicyContext(
        allowed_kinds=allowed_kinds,
        min_item_value=int(min_item_value) if min_item_value is not None else None,
        require_known_value=bool(entry.get("require_known_value", False)),
    )


def _normalize_destinations(raw_destinations: list[dict]) -> list[Destination]:
    """Build enabled destinations; chat ids stay strings for the Bot API."""

    destinations: list[Destination] = []
    for entry in raw_destinations:
        name = entry.get("name")
        if not name:
            continue
        if not entry.get("enabled", True):
            continue
        broadcast_chat_id = entry.get("broadcast_chat_id")
        clan_chat_chat_id = entry.get("clan_chat_chat_id")
        destinations.append(
            Destination(
                name=name,
                clan_name=entry.get("clan_name") or None,
                broadcast_chat_id=str(broadcast_chat_id) if broadcast_chat_id is not None else None,
                clan_chat_chat_id=str(clan_chat_chat_id) if clan_chat_chat_id is not None else None,
                policy=_parse_policy(entry),
            )
        )
    return destinations


_CONFIG = _load_json_config()

# Expose the raw config for modules that need structured access.
CONFIG = _CONFIG

# Where to store the SQLite database (price snapshot, dedup, notice log).
DB_PATH = _CONFIG.get("db_path") or os.path.join(PROJECT_ROOT, "clanrelay.db")
if not os.path.isabs(DB_PATH):
    DB_PATH = os.path.join(PROJECT_ROOT, DB_PATH)

# Enabled destinations, each with its own filtering policy.
DESTINATIONS = _normalize_destinations(_CONFIG.get("destinations", []))

# Deduplication of chat lines submitted by several clan members.
# - mode: "off", "per_destination", or "per_clan"
# - ttl_seconds: how long a fingerprint suppresses repeats
_dedup = _CONFIG.get("dedup", {})
DEDUP = DedupConfig(
    mode=_dedup.get("mode", "per_destination"),
    ttl_seconds=int(_dedup.get("ttl_seconds", 10)),
)
if DEDUP.mode not in DEDUP_MODES:
    raise ValueError(f"dedup.mode must be one of {', '.join(DEDUP_MODES)}")

# Grand Exchange price source and refresh cadence.
_prices = _CONFIG.get("prices", {})
PRICES = PriceRefreshConfig(
    enabled=bool(_prices.get("enabled", True)),
    mapping_url=_prices.get("mapping_url", "https://prices.runescape.wiki/api/v1/osrs/mapping"),
    latest_url=_prices.get("latest_url", "https://prices.runescape.wiki/api/v1/osrs/latest"),
    user_agent=_prices.get("user_agent", "clanrelay - clan broadcast relay"),
    refresh_seconds=int(_prices.get("refresh_minutes", 60)) * 60,
    timeout_seconds=float(_prices.get("timeout_seconds", 10)),
)

# Notification method switches adapters without changing core logic.
_notifications = _CONFIG.get("notifications", {})
NOTIFICATION_METHOD = _notifications.get("notification_method", "log")

# Logging configuration (optional).
LOGGING = _CONFIG.get("logging", {})
