"""Image download and media storage configuration."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

from .env import optional_float_env
from .http_resilience import BodyPredicate, CacheConfig, RateLimit, ResilienceConfig, RetryPolicy
from .storage import StorageConfig, get_storage_config

IMAGE_TIMEOUT_ENV = "CATALOGSYNC_IMAGE_TIMEOUT"
MEDIA_DIR_ENV = "CATALOGSYNC_MEDIA_DIR"
DEFAULT_IMAGE_TIMEOUT_SECONDS = 30.0

DEFAULT_THUMBNAIL_SIZES: dict[str, tuple[int, int]] = {
    "thumbnail": (150, 150),
    "medium": (300, 300),
    "large": (1024, 1024),
}

_IMAGE_SIGNATURES = (b"\xff\xd8\xff", b"\x89PNG\r\n\x1a\n", b"GIF87a", b"GIF89a", b"RIFF")


def is_image_payload(body: bytes) -> bool:
    """Return whether ``body`` starts with a known raster image signature."""

    return any(body.startswith(signature) for signature in _IMAGE_SIGNATURES)


@dataclass(frozen=True)
class MediaConfig:
    media_dir: Path
    resilience: ResilienceConfig
    thumbnail_sizes: dict[str, tuple[int, int]] = field(
        default_factory=lambda: dict(DEFAULT_THUMBNAIL_SIZES)
    )


def get_media_config(
    *,
    storage: StorageConfig | None = None,
    timeout_seconds: float | None = None,
    cache_predicate: BodyPredicate | None = is_image_payload,
) -> MediaConfig:
    storage_config = storage or get_storage_config()
    env_dir = os.getenv(MEDIA_DIR_ENV)
    media_dir = Path(env_dir) if env_dir else storage_config.media_dir()
    timeout = timeout_seconds or optional_float_env(
        IMAGE_TIMEOUT_ENV, DEFAULT_IMAGE_TIMEOUT_SECONDS
    )
    return MediaConfig(
        media_dir=media_dir,
        resilience=ResilienceConfig(
            name="images",
            timeout_seconds=timeout or DEFAULT_IMAGE_TIMEOUT_SECONDS,
            # a failed image is reported and picked up again by the next run
            retry=RetryPolicy(total=0),
            ratelimit=RateLimit(max_calls=10, per_seconds=1.0),
            cache=CacheConfig(
                backend="sqlite",
                sqlite_path=str(storage_config.http_cache_path()),
                should_cache=cache_predicate,
            ),
        ),
    )
