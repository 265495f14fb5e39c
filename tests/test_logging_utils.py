"""Tests for secret redaction in log output."""

from __future__ import annotations

import logging
import sys
from pathlib import Path

sys.path.append(str(Path(__file__).resolve().parents[1]))

from shared.logging_utils import RedactingFormatter, _collect_secrets, configure_logging


def _record(message: str) -> logging.LogRecord:
    return logging.LogRecord("test", logging.INFO, __file__, 1, message, None, None)


def test_redacting_formatter_masks_secrets() -> None:
    formatter = RedactingFormatter(logging.Formatter("%(message)s"), secrets=["123:ABC"])

    assert formatter.format(_record("GET /bot123:ABC/getMe")) == "GET /bot[REDACTED]/getMe"


def test_collect_secrets_reads_sensitive_env(monkeypatch) -> None:
    monkeypatch.setenv("TELEGRAM_BOT_TOKEN", "tok-value")
    monkeypatch.setenv("HARMLESS_SETTING", "visible")

    secrets = _collect_secrets(["extra-secret", None, ""])

    assert "tok-value" in secrets
    assert "extra-secret" in secrets
    assert "visible" not in secrets
    assert "" not in secrets


def test_configure_logging_wraps_root_handlers(monkeypatch) -> None:
    root_logger = logging.getLogger()
    handler = logging.StreamHandler()
    monkeypatch.setattr(root_logger, "handlers", [handler])
    level = root_logger.level

    try:
        configure_logging(level="DEBUG", extra_values=["hide-me"])
    finally:
        root_logger.setLevel(level)

    assert isinstance(handler.formatter, RedactingFormatter)
    assert "hide-me" in handler.formatter.secrets
    assert logging.getLogger("httpx").level == logging.WARNING
