"""SQLite storage adapter.

Implements the core StoragePort and SnapshotStorePort using a simple SQLite
database.
"""

from __future__ import annotations

import sqlite3
from datetime import datetime, timedelta, timezone
from typing import Optional

from core.models import BroadcastNotice, Destination, RawChatMessage
from core.price_catalog import PriceSnapshot, build_snapshot


class SQLiteStorage:
    """Thin SQLite wrapper that satisfies the StoragePort contract."""

    def __init__(self, db_path: str) -> None:
        self._db_path = db_path

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self._db_path)
        conn.row_factory = sqlite3.Row
        return conn

    def init_db(self) -> None:
        """Create tables if they do not exist.

        Tables:
        - price_items: last good price snapshot, one row per item
        - price_meta: snapshot metadata (fetched_at)
        - seen: fingerprints for deduplication (content-level)
        - notices: append-only log of produced broadcast notices
        """

        with self._connect() as conn:
            # price_items is replaced wholesale on every successful refresh so a
            # restart comes back with the last complete snapshot.
            # Fields:
            # - item_name: exact item name as published by the game (PRIMARY KEY)
            # - price: market price in coins
            # - icon_url: wiki image for the item, if known
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS price_items (
                    item_name TEXT PRIMARY KEY,
                    price INTEGER NOT NULL,
                    icon_url TEXT
                )
                """
            )
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS price_meta (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL
                )
                """
            )
            # seen stores content fingerprints so a chat line submitted by
            # several clan members is only handled once.
            # Fields:
            # - fingerprint: SHA-256 hash of normalized content (PRIMARY KEY)
            # - first_seen: timestamp of first observation for TTL cleanup
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS seen (
                    fingerprint TEXT PRIMARY KEY,
                    first_seen TIMESTAMP NOT NULL
                )
                """
            )
            # notices is an append-only log for auditing.
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS notices (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    destination TEXT NOT NULL,
                    clan_name TEXT,
                    kind TEXT NOT NULL,
                    title TEXT NOT NULL,
                    body TEXT NOT NULL,
                    item_value INTEGER,
                    icon_url TEXT,
                    raw_message TEXT NOT NULL,
                    created_at TIMESTAMP NOT NULL
                )
                """
            )

    def load_snapshot(self) -> Optional[PriceSnapshot]:
        """Return the persisted price snapshot, or None if nothing was saved."""

        with self._connect() as conn:
            rows = conn.execute("SELECT item_name, price, icon_url FROM price_items").fetchall()
            meta = conn.execute("SELECT value FROM price_meta WHERE key = 'fetched_at'").fetchone()
        if not rows:
            return None
        prices = {row["item_name"]: int(row["price"]) for row in rows}
        icons = {row["item_name"]: row["icon_url"] for row in rows if row["icon_url"]}
        fetched_at = datetime.fromisoformat(meta["value"]) if meta else None
        return build_snapshot(prices, icons, fetched_at)

    def save_snapshot(self, snapshot: PriceSnapshot) -> None:
        """Replace the persisted snapshot in a single transaction."""

        fetched_at = snapshot.fetched_at or datetime.now(timezone.utc)
        with self._connect() as conn:
            conn.execute("DELETE FROM price_items")
            conn.executemany(
                "INSERT INTO price_items (item_name, price, icon_url) VALUES (?, ?, ?)",
                [
                    (name, price, snapshot.icon_url(name))
                    for name, price in snapshot.prices.items()
                ],
            )
            conn.execute(
                """
                INSERT INTO price_meta (key, value) VALUES ('fetched_at', ?)
                ON CONFLICT(key) DO UPDATE SET value = excluded.value
                """,
                (fetched_at.isoformat(),),
            )

    def is_seen(self, fingerprint: str) -> bool:
        """Check if a fingerprint has already been recorded."""

        with self._connect() as conn:
            row = conn.execute(
                "SELECT 1 FROM seen WHERE fingerprint = ?",
                (fingerprint,),
            ).fetchone()
        return row is not None

    def mark_seen(self, fingerprint: str) -> None:
        """Insert a fingerprint if it does not exist."""

        now = datetime.now(timezone.utc)
        with self._connect() as conn:
            conn.execute(
                """
                INSERT OR IGNORE INTO seen (fingerprint, first_seen)
                VALUES (?, ?)
                """,
                (fingerprint, now.isoformat()),
            )

    def cleanup_seen(self, ttl_seconds: int) -> int:
        """Delete old fingerprints and return the number removed."""

        cutoff = datetime.now(timezone.utc) - timedelta(seconds=ttl_seconds)
        with self._connect() as conn:
            cur = conn.execute(
                "DELETE FROM seen WHERE first_seen < ?",
                (cutoff.isoformat(),),
            )
            return cur.rowcount

    def save_notice(self, destination: Destination, raw: RawChatMessage, notice: BroadcastNotice) -> None:
        """Persist a notice to the append-only notices table."""

        created_at = datetime.now(timezone.utc)
        with self._connect() as conn:
            conn.execute(
                """
                INSERT INTO notices (
                    destination,
                    clan_name,
                    kind,
                    title,
                    body,
                    item_value,
                    icon_url,
                    raw_message,
                    created_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    destination.name,
                    raw.clan_name,
                    notice.kind.value,
                    notice.title,
                    notice.body,
                    notice.item_value,
                    notice.icon_url,
                    raw.message,
                    created_at.isoformat(),
                ),
            )

    def count_notices(self, destination_name: Optional[str] = None) -> int:
        """Return how many notices were logged, optionally for one destination."""

        with self._connect() as conn:
            if destination_name is None:
                row = conn.execute("SELECT COUNT(*) AS total FROM notices").fetchone()
            else:
                row = conn.execute(
                    "SELECT COUNT(*) AS total FROM notices WHERE destination = ?",
                    (destination_name,),
                ).fetchone()
        return int(row["total"])
