import logging
import os
from typing import Iterable, Optional, Sequence, Set

_REDACTED_PLACEHOLDER = "[REDACTED]"
_SENSITIVE_KEY_PARTS = ("TOKEN", "SECRET", "KEY", "PASS")
DEFAULT_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
# httpx logs every Bot API URL, and those URLs embed the bot token
NOISY_LOGGERS = ("httpx", "httpcore")


def _collect_secrets(extra_values: Optional[Iterable[Optional[str]]] = None) -> Sequence[str]:
    secrets: Set[str] = {
        value
        for name, value in os.environ.items()
        if value and any(part in name.upper() for part in _SENSITIVE_KEY_PARTS)
    }
    secrets.update(value for value in extra_values or () if isinstance(value, str) and value)
    # longest first so a secret containing another one is masked whole
    return tuple(sorted(secrets, key=len, reverse=True))


class RedactingFormatter(logging.Formatter):
    """Delegate to another formatter and mask secrets in what it produces."""

    def __init__(
        self,
        base_formatter: Optional[logging.Formatter] = None,
        secrets: Optional[Sequence[str]] = None,
        placeholder: str = _REDACTED_PLACEHOLDER,
    ) -> None:
        super().__init__()
        self._base_formatter = base_formatter or logging.Formatter(DEFAULT_FORMAT)
        self._secrets: Sequence[str] = tuple(secrets or ())
        self._placeholder = placeholder

    @property
    def secrets(self) -> Sequence[str]:
        return self._secrets

    def update_secrets(self, secrets: Sequence[str]) -> None:
        self._secrets = tuple(secrets)

    def format(self, record: logging.LogRecord) -> str:
        formatted = self._base_formatter.format(record)
        for secret in self._secrets:
            formatted = formatted.replace(secret, self._placeholder)
        return formatted


def _wrap_handlers(handlers: Iterable[logging.Handler], secrets: Sequence[str]) -> None:
    for handler in handlers:
        formatter = handler.formatter
        if isinstance(formatter, RedactingFormatter):
            formatter.update_secrets(secrets)
        else:
            handler.setFormatter(RedactingFormatter(formatter, secrets))


def configure_logging(
    *,
    level: Optional[str] = None,
    extra_values: Optional[Iterable[Optional[str]]] = None,
) -> None:
    """Configure root logging for the bot and redact secrets from every handler."""

    if level is None:
        level = os.getenv("LOG_LEVEL", "INFO").upper()

    root_logger = logging.getLogger()
    if not root_logger.handlers:
        logging.basicConfig(level=level, format=DEFAULT_FORMAT)
    root_logger.setLevel(level)
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    secrets = _collect_secrets(extra_values)
    _wrap_handlers(root_logger.handlers, secrets)
    for logger_obj in logging.Logger.manager.loggerDict.values():
        if isinstance(logger_obj, logging.Logger):
            _wrap_handlers(logger_obj.handlers, secrets)
