"""Async HTTP client with retries, rate limiting and an optional response cache."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING, Self, TypedDict

import httpx
from aiolimiter import AsyncLimiter
from hishel import AsyncSqliteStorage, FilterPolicy
from hishel import Response as HishelCacheResponse
from hishel._policies import BaseFilter
from hishel.httpx import AsyncCacheClient
from httpx_retries import Retry, RetryTransport

from catalogsync.config.storage import get_storage_config

if TYPE_CHECKING:
    from types import TracebackType

    from catalogsync.config.http_resilience import (
        BodyPredicate,
        CacheConfig,
        ResilienceConfig,
        RetryPolicy,
    )

log = getLogger(__name__)

IN_MEMORY_DATABASE = ":memory:"


class _ClientOptions(TypedDict):
    timeout: float
    transport: httpx.AsyncBaseTransport
    follow_redirects: bool
    headers: dict[str, str]


def build_retry(policy: RetryPolicy) -> Retry:
    return Retry(
        total=policy.total,
        backoff_factor=policy.backoff_factor,
        max_backoff_wait=policy.max_backoff_wait,
        respect_retry_after_header=True,
        allowed_methods=("GET", "HEAD"),
        status_forcelist=tuple(policy.status_forcelist),
        retry_on_exceptions=policy.retry_on_exceptions,
    )


class _BodyFilter(BaseFilter[HishelCacheResponse]):
    """Keep a response in the cache only when its body passes ``predicate``."""

    def __init__(self, predicate: BodyPredicate) -> None:
        self._predicate = predicate

    def needs_body(self) -> bool:
        return True

    def apply(self, item: HishelCacheResponse, body: bytes | None) -> bool:  # noqa: ARG002
        return body is not None and self._predicate(body)


def _cache_storage(config: CacheConfig) -> AsyncSqliteStorage:
    if config.backend == "memory":
        database_path = IN_MEMORY_DATABASE
    else:
        database_path = config.sqlite_path or str(get_storage_config().http_cache_path())
    return AsyncSqliteStorage(database_path=database_path, default_ttl=config.ttl_seconds)


def _open_client(
    config: ResilienceConfig, transport: httpx.AsyncBaseTransport | None
) -> httpx.AsyncClient:
    options: _ClientOptions = {
        "timeout": config.timeout_seconds,
        "transport": RetryTransport(transport=transport, retry=build_retry(config.retry)),
        "follow_redirects": config.follow_redirects,
        "headers": {"User-Agent": config.user_agent},
    }
    cache = config.cache
    if cache is None:
        return httpx.AsyncClient(**options)

    policy = (
        FilterPolicy(response_filters=[_BodyFilter(cache.should_cache)])
        if cache.should_cache is not None
        else None
    )
    return AsyncCacheClient(**options, storage=_cache_storage(cache), policy=policy)


class ResilientClient:
    """httpx client for one batch of downloads; use it as an async context manager.

    Transient failures are retried as ``config.retry`` allows. ``transport``
    replaces the network transport underneath the retry layer. ``fetch_bytes`` is the only
    call adapters need: it returns the body or raises an ``httpx.HTTPError``.
    """

    def __init__(
        self,
        config: ResilienceConfig,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.config = config
        self._limiter = (
            AsyncLimiter(config.ratelimit.max_calls, config.ratelimit.per_seconds)
            if config.ratelimit is not None
            else None
        )
        self._client = _open_client(config, transport)

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def get(self, url: str) -> httpx.Response:
        if self._limiter is None:
            return await self._client.get(url)
        async with self._limiter:
            return await self._client.get(url)

    async def fetch_bytes(self, url: str) -> bytes:
        """GET ``url`` and return its body; 4xx/5xx raise ``httpx.HTTPStatusError``."""

        response = await self.get(url)
        response.raise_for_status()
        if response.extensions.get("hishel_from_cache"):
            log.debug("%s: served from cache", self.config.name)
        return response.content
