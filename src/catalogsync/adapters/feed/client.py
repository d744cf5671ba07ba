"""HTTP client for the vendor stock feed."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

import httpx

from catalogsync.adapters.http_resilience import ResilientClient
from catalogsync.config.feed import FeedConfig, get_feed_config
from catalogsync.config.logging import redact_url
from catalogsync.domain.errors import TransportError

if TYPE_CHECKING:
    from collections.abc import Callable

    from catalogsync.config.http_resilience import ResilienceConfig
    from catalogsync.domain.ports.fetching import FeedFetcher as FeedFetcherPort

log = getLogger(__name__)


def _default_client_factory(config: ResilienceConfig) -> ResilientClient:
    return ResilientClient(config)


@dataclass(slots=True)
class FeedFetcher:
    """Download the whole feed document in one request.

    Errors are reported against the redacted URL; the configured URL carries the
    vendor access key.
    """

    config: FeedConfig = field(default_factory=get_feed_config)
    client_factory: Callable[[ResilienceConfig], ResilientClient] = field(
        default=_default_client_factory
    )

    def __call__(self) -> bytes:
        return asyncio.run(self._fetch())

    async def _fetch(self) -> bytes:
        safe_url = redact_url(self.config.url)
        log.info("Fetching feed from %s", safe_url)
        try:
            async with self.client_factory(self.config.resilience) as client:
                body = await client.fetch_bytes(self.config.url)
        except httpx.HTTPStatusError as exc:
            msg = f"feed endpoint answered HTTP {exc.response.status_code}"
            raise TransportError(msg, url=safe_url) from None
        except httpx.TimeoutException:
            msg = f"feed request timed out after {self.config.resilience.timeout_seconds:g}s"
            raise TransportError(msg, url=safe_url) from None
        except httpx.HTTPError as exc:
            raise TransportError(f"feed request failed: {type(exc).__name__}", url=safe_url) from None

        log.info("Fetched feed (%d bytes)", len(body))
        return body


if TYPE_CHECKING:
    _fetcher_check: FeedFetcherPort = FeedFetcher()
