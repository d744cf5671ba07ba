"""Vendor feed configuration values."""

from __future__ import annotations

from dataclasses import dataclass

from .env import optional_float_env, require_env_var
from .http_resilience import ResilienceConfig, RetryPolicy

FEED_URL_ENV = "CATALOGSYNC_FEED_URL"
FEED_TIMEOUT_ENV = "CATALOGSYNC_FEED_TIMEOUT"
DEFAULT_FEED_TIMEOUT_SECONDS = 300.0


@dataclass(frozen=True)
class FeedConfig:
    """Where to fetch the product feed from.

    The URL usually embeds the vendor's access key, so it is kept out of ``repr``
    and is registered with the logging redaction filter at startup.
    """

    url: str
    resilience: ResilienceConfig

    def __repr__(self) -> str:
        return f"FeedConfig(url='<redacted>', timeout={self.resilience.timeout_seconds})"


def get_feed_config(
    *,
    url: str | None = None,
    timeout_seconds: float | None = None,
) -> FeedConfig:
    feed_url = url or require_env_var(FEED_URL_ENV)
    timeout = timeout_seconds or optional_float_env(FEED_TIMEOUT_ENV, DEFAULT_FEED_TIMEOUT_SECONDS)
    return FeedConfig(
        url=feed_url,
        resilience=ResilienceConfig(
            name="feed",
            timeout_seconds=timeout or DEFAULT_FEED_TIMEOUT_SECONDS,
            # never re-sent within a run; a failed fetch is retried by re-running the import
            retry=RetryPolicy(total=0),
            cache=None,
        ),
    )
