"""Application entry point for the clanrelay broadcast relay."""

from __future__ import annotations

import argparse
import asyncio
import dataclasses
import logging
import os
import re
import sys
from logging.handlers import RotatingFileHandler
from typing import Iterable, Optional

from art import tprint
from dotenv import load_dotenv

import settings
from adapters.chat_batch import parse_batch
from adapters.log_notifier import LogNotifier
from adapters.sqlite_storage import SQLiteStorage
from adapters.telegram_bot_notifier import TelegramBotNotifier
from adapters.wiki_prices import WikiPriceSource
from core.classifier import match_broadcast
from core.extractor import MalformedBroadcast, extract_event
from core.models import RawChatMessage
from core.pipeline import BroadcastPipeline
from core.price_catalog import PriceCatalog
from core.processor import ChatBatchProcessor
from core.refresh import PriceRefresher

NAME = "CLANRELAY"
FONT = "tarty-1"


def _print_banner() -> None:
    tprint(NAME, FONT, space=1)


# Bot API URLs embed the token; HTTP errors from the notifier can echo them.
_BOT_URL_TOKEN = re.compile(r"(api\.telegram\.org/bot)[^/\s]+")


class _RedactingFormatter(logging.Formatter):
    """Masks configured secret values and Bot API tokens in every log line."""

    def __init__(self, secrets: list[str], fmt: str, datefmt: Optional[str] = None) -> None:
        super().__init__(fmt=fmt, datefmt=datefmt)
        self._secrets = [secret for secret in secrets if secret]

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        for secret in self._secrets:
            message = message.replace(secret, "***")
        return _BOT_URL_TOKEN.sub(r"\1***", message)


def _collect_redaction_values(config: dict) -> list[str]:
    redact_cfg = config.get("redact", {}) if config else {}
    if not redact_cfg.get("enabled", False):
        return []
    values = []
    for name in redact_cfg.get("patterns", []):
        value = os.getenv(name)
        if value:
            values.append(value)
    return sorted(set(values), key=len, reverse=True)


def _configure_logging(verbose: bool = False) -> None:
    config = settings.LOGGING or {}
    if not config.get("enabled", False) and not verbose:
        return

    # --verbose wins over the configured level so template misses show up.
    level_name = "DEBUG" if verbose else str(config.get("level", "INFO")).upper()
    level = getattr(logging, level_name, logging.INFO)

    # The price refresher logs from its own thread.
    fmt = "%(asctime)s %(levelname)s [%(threadName)s] %(name)s: %(message)s"
    datefmt = "%Y-%m-%d %H:%M:%S"
    formatter = _RedactingFormatter(_collect_redaction_values(config), fmt=fmt, datefmt=datefmt)

    handlers: list[logging.Handler] = []

    if config.get("console", True) or verbose:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setLevel(level)
        console_handler.setFormatter(formatter)
        handlers.append(console_handler)

    # Malformed broadcasts are logged with their raw text, so the file doubles
    # as the list of chat lines the template catalog still needs to learn.
    file_cfg = config.get("file", {})
    if file_cfg.get("enabled", False):
        path = file_cfg.get("path", "logs/clanrelay.log")
        if not os.path.isabs(path):
            path = os.path.join(settings.PROJECT_ROOT, path)
        os.makedirs(os.path.dirname(path), exist_ok=True)

        file_handler = RotatingFileHandler(
            path,
            maxBytes=int(file_cfg.get("max_bytes", 2 * 1024 * 1024)),
            backupCount=int(file_cfg.get("backup_count", 3)),
            encoding="utf-8",
        )
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        handlers.append(file_handler)

    if not handlers:
        return

    logging.basicConfig(level=level, handlers=handlers)


def _build_notifier(dry_run: bool):
    # Dry runs always log; otherwise notification_method picks the adapter.
    if dry_run or settings.NOTIFICATION_METHOD == "log":
        return LogNotifier()
    if settings.NOTIFICATION_METHOD == "bot":
        bot_token = os.getenv("BOT_API")
        if not bot_token:
            raise RuntimeError("BOT_API is required when notification_method=bot")
        return TelegramBotNotifier(bot_token=bot_token)
    raise RuntimeError("notification_method must be 'bot' or 'log'")


def _build_refresher(catalog: PriceCatalog, storage: SQLiteStorage) -> Optional[PriceRefresher]:
    if not settings.PRICES.enabled:
        return None
    source = WikiPriceSource(
        user_agent=settings.PRICES.user_agent,
        mapping_url=settings.PRICES.mapping_url,
        latest_url=settings.PRICES.latest_url,
        timeout=settings.PRICES.timeout_seconds,
    )
    return PriceRefresher(
        catalog=catalog,
        source=source,
        store=storage,
        interval_seconds=settings.PRICES.refresh_seconds,
    )


def _build_storage() -> SQLiteStorage:
    storage = SQLiteStorage(settings.DB_PATH)
    storage.init_db()
    return storage


def _build_processor(catalog: PriceCatalog, storage: SQLiteStorage, dry_run: bool) -> ChatBatchProcessor:
    logger = logging.getLogger(__name__)
    notifier = _build_notifier(dry_run)
    logger.info("Selected notification method - %s", "log" if dry_run else settings.NOTIFICATION_METHOD)
    return ChatBatchProcessor(
        pipeline=BroadcastPipeline(catalog),
        storage=storage,
        notifier=notifier,
        dedup_config=settings.DEDUP,
    )


def _warn_if_unpriced(catalog: PriceCatalog) -> None:
    if not catalog.is_loaded:
        logging.getLogger(__name__).warning(
            "No item prices loaded; drops pass value thresholds unpriced until a refresh succeeds"
        )


async def _process_batches(processor: ChatBatchProcessor, batches: Iterable[list[RawChatMessage]]) -> None:
    for batch in batches:
        for destination in settings.DESTINATIONS:
            await processor.handle_batch(batch, destination)


def _read_stdin_batches() -> Iterable[list[RawChatMessage]]:
    logger = logging.getLogger(__name__)
    for line in sys.stdin:
        if not line.strip():
            continue
        try:
            yield parse_batch(line)
        except ValueError:
            logger.exception("Skipping unreadable chat batch")


def _run(verbose: bool) -> None:
    _print_banner()
    load_dotenv()
    _configure_logging(verbose)
    logger = logging.getLogger(__name__)

    logger.info("Starting clanrelay")
    if not settings.DESTINATIONS:
        raise RuntimeError("No enabled destinations in config")
    logger.info("%s destinations are loaded", len(settings.DESTINATIONS))

    storage = _build_storage()
    catalog = PriceCatalog()
    refresher = _build_refresher(catalog, storage)
    if refresher is not None:
        # Start from the last good snapshot, then fetch a fresh one.
        refresher.load_persisted()
        refresher.refresh_once()
        refresher.start()
    _warn_if_unpriced(catalog)

    processor = _build_processor(catalog, storage, dry_run=False)
    logger.info("Reading chat batches from stdin...")
    try:
        asyncio.run(_process_batches(processor, _read_stdin_batches()))
    finally:
        if refresher is not None:
            refresher.stop(timeout=5)
    logger.info("Input closed, shutting down")


def _process_file(path: str, dry_run: bool, verbose: bool) -> None:
    load_dotenv()
    _configure_logging(verbose)

    storage = _build_storage()
    catalog = PriceCatalog()
    refresher = _build_refresher(catalog, storage)
    if refresher is not None and not refresher.load_persisted():
        refresher.refresh_once()
    _warn_if_unpriced(catalog)

    with open(path, "r", encoding="utf-8") as handle:
        batch = parse_batch(handle.read())

    processor = _build_processor(catalog, storage, dry_run=dry_run)
    before = storage.count_notices()
    asyncio.run(_process_batches(processor, [batch]))
    print(f"{storage.count_notices() - before} notices produced from {len(batch)} chat lines.")


def _refresh_prices(verbose: bool) -> int:
    load_dotenv()
    _configure_logging(verbose)

    storage = _build_storage()
    catalog = PriceCatalog()
    refresher = _build_refresher(catalog, storage)
    if refresher is None:
        print("Price refresh is disabled in config.")
        return 1
    if not refresher.refresh_once():
        print("Price refresh failed; the stored snapshot was kept.")
        return 1
    print(f"Stored {len(catalog.snapshot)} item prices.")
    return 0


def _classify(text: str, sender: str) -> int:
    raw = RawChatMessage(author="", message=text, clan_name="", sender=sender, rank="")
    result = match_broadcast(raw)
    if result is None:
        print("Unrecognized")
        return 0
    try:
        event = extract_event(result)
    except MalformedBroadcast as exc:
        print(f"{result.kind.value} (template {result.template.name}) is malformed: {exc}")
        return 1
    print(f"{result.kind.value} (template {result.template.name})")
    for key, value in dataclasses.asdict(event).items():
        print(f"  {key}: {value}")
    return 0


def main(argv: Optional[list[str]] = None) -> None:
    parser = argparse.ArgumentParser(prog="clanrelay")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log at DEBUG level to stderr")
    subparsers = parser.add_subparsers(dest="command")

    subparsers.add_parser("run", help="Relay chat batches read from stdin (one JSON array per line)")
    process_parser = subparsers.add_parser("process", help="Process one JSON chat batch file")
    process_parser.add_argument("path")
    process_parser.add_argument("--dry-run", action="store_true", help="Log notices instead of sending them")
    subparsers.add_parser("prices", help="Refresh and store the price catalog once")
    classify_parser = subparsers.add_parser("classify", help="Show how a chat line is classified")
    classify_parser.add_argument("text")
    classify_parser.add_argument("--sender", default="", help="Sender for personal game messages")

    args = parser.parse_args(argv)
    if args.command == "process":
        _process_file(args.path, args.dry_run, args.verbose)
        return
    if args.command == "prices":
        sys.exit(_refresh_prices(args.verbose))
    if args.command == "classify":
        sys.exit(_classify(args.text, args.sender))
    _run(args.verbose)


if __name__ == "__main__":
    main()
