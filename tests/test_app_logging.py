from __future__ import annotations

import logging

from app import _RedactingFormatter, _collect_redaction_values


def _format(formatter: logging.Formatter, message: str) -> str:
    record = logging.LogRecord("clanrelay", logging.ERROR, __file__, 1, message, None, None)
    return formatter.format(record)


def test_bot_token_in_api_url_is_masked() -> None:
    formatter = _RedactingFormatter([], fmt="%(message)s")
    line = _format(formatter, "POST https://api.telegram.org/bot123456:ABC-def/sendPhoto failed")
    assert line == "POST https://api.telegram.org/bot***/sendPhoto failed"


def test_configured_secrets_are_masked(monkeypatch) -> None:
    monkeypatch.delenv("UNSET_VALUE", raising=False)
    monkeypatch.setenv("BOT_API", "123456:ABC-def")
    secrets = _collect_redaction_values({"redact": {"enabled": True, "patterns": ["BOT_API", "UNSET_VALUE"]}})
    formatter = _RedactingFormatter(secrets, fmt="%(message)s")
    assert _format(formatter, "token is 123456:ABC-def") == "token is ***"


def test_redaction_disabled_collects_nothing(monkeypatch) -> None:
    monkeypatch.setenv("BOT_API", "123456:ABC-def")
    assert _collect_redaction_values({"redact": {"enabled": False, "patterns": ["BOT_API"]}}) == []
