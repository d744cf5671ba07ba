"""HTTP client settings shared by the feed fetcher and the image downloader."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Final, Literal

import httpx

from catalogsync import __version__

type BodyPredicate = Callable[[bytes], bool]

DEFAULT_USER_AGENT: Final[str] = f"catalogsync/{__version__}"
DEFAULT_CACHE_TTL_SECONDS: Final[float] = 7 * 24 * 3600.0

TRANSIENT_STATUSES: Final[frozenset[int]] = frozenset({408, 429, 500, 502, 503, 504})
TRANSIENT_ERRORS: Final[tuple[type[httpx.HTTPError], ...]] = (
    httpx.TimeoutException,
    httpx.NetworkError,
    httpx.RemoteProtocolError,
)


@dataclass(slots=True, frozen=True)
class RetryPolicy:
    """Retries for idempotent GETs; ``total=0`` disables them."""

    total: int = 2
    backoff_factor: float = 0.5
    max_backoff_wait: float = 20.0
    status_forcelist: frozenset[int] = TRANSIENT_STATUSES
    retry_on_exceptions: tuple[type[httpx.HTTPError], ...] = TRANSIENT_ERRORS


@dataclass(slots=True, frozen=True)
class RateLimit:
    max_calls: int
    per_seconds: float = 1.0


@dataclass(slots=True, frozen=True)
class CacheConfig:
    """Response cache. With ``should_cache`` set, only accepted bodies are stored."""

    backend: Literal["sqlite", "memory"] = "sqlite"
    # None means the data directory's cache file
    sqlite_path: str | None = None
    ttl_seconds: float | None = DEFAULT_CACHE_TTL_SECONDS
    should_cache: BodyPredicate | None = None


@dataclass(slots=True, frozen=True)
class ResilienceConfig:
    name: str
    timeout_seconds: float = 30.0
    retry: RetryPolicy = field(default_factory=RetryPolicy)
    ratelimit: RateLimit | None = None
    cache: CacheConfig | None = None
    user_agent: str = DEFAULT_USER_AGENT
    follow_redirects: bool = True
