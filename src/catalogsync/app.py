"""Application orchestration entry points."""

from __future__ import annotations

import sys
from collections.abc import Callable
from logging import getLogger
from typing import TYPE_CHECKING

from catalogsync.adapters.feed import FeedFetcher, parse_feed
from catalogsync.adapters.media import FilesystemMediaStore, HttpImageDownloader
from catalogsync.adapters.run_lock import RunLock
from catalogsync.adapters.sqlalchemy.unit_of_work import (
    SqlAlchemyCatalogUnitOfWork,
    is_started,
    startup,
)
from catalogsync.config import (
    get_feed_config,
    get_media_config,
    get_run_limits,
    get_storage_config,
    redact_url,
    register_secret,
)
from catalogsync.domain.ports.unit_of_work import CatalogUnitOfWork
from catalogsync.domain.reconciliation import (
    CategoryResolver,
    ImportRun,
    MediaSynchronizer,
    ProductReconciler,
)

if TYPE_CHECKING:
    from catalogsync.config import RunLimits, StorageConfig
    from catalogsync.domain.ports.fetching import FeedFetcher as FeedFetcherPort
    from catalogsync.domain.reconciliation import ImportSummary

UnitOfWorkFactory = Callable[[], CatalogUnitOfWork]

log = getLogger(__name__)


def _never_stop() -> bool:
    return False


def build_media_synchronizer(
    *,
    storage: StorageConfig | None = None,
    image_timeout: float | None = None,
) -> MediaSynchronizer:
    config = get_media_config(storage=storage, timeout_seconds=image_timeout)
    return MediaSynchronizer(
        downloader=HttpImageDownloader(config=config),
        store=FilesystemMediaStore(root=config.media_dir, thumbnail_sizes=config.thumbnail_sizes),
    )


def apply_memory_limit(limit_mb: int | None) -> None:
    """Cap the process address space; a no-op where the platform has no rlimits."""

    if limit_mb is None or limit_mb <= 0:
        return
    if sys.platform == "win32":
        log.warning("Memory limit of %d MB ignored on this platform", limit_mb)
        return

    import resource  # noqa: PLC0415

    requested = limit_mb * 1024 * 1024
    _soft, hard = resource.getrlimit(resource.RLIMIT_AS)
    if hard != resource.RLIM_INFINITY:
        requested = min(requested, hard)
    try:
        resource.setrlimit(resource.RLIMIT_AS, (requested, hard))
    except (ValueError, OSError) as exc:
        log.warning("Could not apply memory limit of %d MB: %s", limit_mb, exc)
        return
    log.debug("Address space limited to %d MB", requested // (1024 * 1024))


def run_feed_import(
    *,
    feed_url: str | None = None,
    feed_timeout: float | None = None,
    image_timeout: float | None = None,
    limits: RunLimits | None = None,
    skip_media: bool = False,
    should_stop: Callable[[], bool] | None = None,
    fetcher: FeedFetcherPort | None = None,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
    media: MediaSynchronizer | None = None,
    storage: StorageConfig | None = None,
) -> ImportSummary:
    """Run one full import of the vendor feed using the configured adapters.

    Raises ``RunAlreadyActiveError`` when another import holds the run lock and
    ``ConfigurationError`` when required settings are missing. Feed-level failures
    do not raise; they are reported in ``summary.fatal_error``.
    """

    storage_config = storage or get_storage_config()
    run_limits = limits or get_run_limits()

    if fetcher is None:
        feed_config = get_feed_config(url=feed_url, timeout_seconds=feed_timeout)
        register_secret(feed_config.url)
        fetcher = FeedFetcher(config=feed_config)
        log.info(
            "Importing from %s (timeout %.0fs)",
            redact_url(feed_config.url),
            feed_config.resilience.timeout_seconds,
        )

    if unit_of_work_factory is None:
        if not is_started():
            startup()
        unit_of_work_factory = SqlAlchemyCatalogUnitOfWork

    synchronizer: MediaSynchronizer | None = None
    if not skip_media:
        synchronizer = media or build_media_synchronizer(
            storage=storage_config, image_timeout=image_timeout
        )

    run = ImportRun(
        fetch=fetcher,
        parse=parse_feed,
        reconciler=ProductReconciler(categories=CategoryResolver(), media=synchronizer),
        unit_of_work_factory=unit_of_work_factory,
        time_budget=run_limits.time_budget_seconds,
        should_stop=should_stop or _never_stop,
    )

    with RunLock(storage_config.run_lock_path()):
        summary = run.execute()

    log.info(
        "Import summary: created=%s, updated=%s, skipped=%s, failed=%s, media_errors=%s",
        summary.created,
        summary.updated,
        summary.skipped,
        summary.failed,
        summary.media_errors,
    )
    return summary
