"""Download product images to temporary files."""

from __future__ import annotations

import asyncio
import tempfile
from dataclasses import dataclass, field
from logging import getLogger
from pathlib import Path, PurePosixPath
from typing import TYPE_CHECKING
from urllib.parse import urlsplit

import httpx

from catalogsync.adapters.http_resilience import ResilientClient
from catalogsync.config.media import MediaConfig, get_media_config
from catalogsync.domain.errors import MediaError, TransportError

if TYPE_CHECKING:
    from collections.abc import Callable

    from catalogsync.config.http_resilience import ResilienceConfig
    from catalogsync.domain.ports.media import ImageDownloader

log = getLogger(__name__)

TEMP_PREFIX = "catalogsync-"


def _default_client_factory(config: ResilienceConfig) -> ResilientClient:
    return ResilientClient(config)


def _suffix_for(url: str) -> str:
    suffix = PurePosixPath(urlsplit(url).path).suffix
    return suffix if suffix.isascii() and len(suffix) <= 6 else ""


@dataclass(slots=True)
class HttpImageDownloader:
    """Fetch one image per call and write it to a temporary file owned by the caller."""

    config: MediaConfig = field(default_factory=get_media_config)
    client_factory: Callable[[ResilienceConfig], ResilientClient] = field(
        default=_default_client_factory
    )
    temp_dir: Path | None = None

    def __call__(self, url: str) -> Path:
        body = asyncio.run(self._download(url))
        try:
            with tempfile.NamedTemporaryFile(
                prefix=TEMP_PREFIX, suffix=_suffix_for(url), dir=self.temp_dir, delete=False
            ) as handle:
                handle.write(body)
                return Path(handle.name)
        except OSError as exc:
            raise MediaError(f"could not write temporary file: {exc}", url=url) from exc

    async def _download(self, url: str) -> bytes:
        try:
            async with self.client_factory(self.config.resilience) as client:
                body = await client.fetch_bytes(url)
        except httpx.HTTPStatusError as exc:
            raise TransportError(f"HTTP {exc.response.status_code}", url=url) from exc
        except httpx.TimeoutException as exc:
            timeout = self.config.resilience.timeout_seconds
            raise TransportError(f"timed out after {timeout:g}s", url=url) from exc
        except httpx.HTTPError as exc:
            raise TransportError(type(exc).__name__, url=url) from exc

        if not body:
            raise TransportError("empty response body", url=url)
        log.debug("Downloaded %s (%d bytes)", url, len(body))
        return body


if TYPE_CHECKING:
    _downloader_check: ImageDownloader = HttpImageDownloader()
