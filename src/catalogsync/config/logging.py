"""Logging setup for catalogsync, including secret redaction."""

from __future__ import annotations

import logging
import re
from urllib.parse import urlsplit, urlunsplit

REDACTED = "<redacted>"

_KEY_PARAM_RE = re.compile(r"(?P<key>\b(?:key|token|apikey|api_key)=)(?P<secret>[^&\s'\"]+)", re.I)


def redact_url(url: str) -> str:
    """Return ``url`` with its query string and credentials removed."""

    parts = urlsplit(url)
    netloc = parts.hostname or ""
    if parts.port:
        netloc = f"{netloc}:{parts.port}"
    query = REDACTED if parts.query else ""
    return urlunsplit((parts.scheme, netloc, parts.path, query, ""))


def _scrub_text(value: str, secrets: tuple[str, ...]) -> str:
    for secret in secrets:
        if secret and secret in value:
            value = value.replace(secret, redact_url(secret))
    return _KEY_PARAM_RE.sub(lambda m: f"{m.group('key')}{REDACTED}", value)


class SecretRedactingFilter(logging.Filter):
    """Scrub registered secrets (the feed URL) and ``key=`` query values from records."""

    def __init__(self, secrets: tuple[str, ...] = ()) -> None:
        super().__init__()
        self.secrets = secrets

    def add_secret(self, secret: str) -> None:
        if secret and secret not in self.secrets:
            self.secrets = (*self.secrets, secret)

    def filter(self, record: logging.LogRecord) -> bool:
        message = record.getMessage()
        record.msg = _scrub_text(message, self.secrets)
        record.args = ()
        # tracebacks of httpx errors carry the request URL
        if record.exc_info and not record.exc_text:
            record.exc_text = _scrub_text(_TRACEBACK_FORMATTER.formatException(record.exc_info), self.secrets)
        return True


_TRACEBACK_FORMATTER = logging.Formatter()


_REDACTION_FILTER = SecretRedactingFilter()


def register_secret(secret: str) -> None:
    """Make sure ``secret`` never reaches a log handler in cleartext."""

    _REDACTION_FILTER.add_secret(secret)


def configure_logging(*, level: int = logging.INFO, force: bool = False) -> None:
    """Initialise the root logger once with sensible defaults.

    Parameters mirror ``logging.basicConfig`` with a simplified contract: INFO level
    and a terse format suitable for CLI output. Every root handler gets the redaction
    filter, since httpx logs full request URLs at INFO.
    """

    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
        datefmt="%H:%M:%S",
        force=force,
    )
    for handler in logging.getLogger().handlers:
        if _REDACTION_FILTER not in handler.filters:
            handler.addFilter(_REDACTION_FILTER)
