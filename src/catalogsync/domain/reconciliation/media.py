"""Attach featured and gallery images to a catalog product."""

from __future__ import annotations

from dataclasses import dataclass, field
from logging import getLogger
from pathlib import PurePosixPath
from typing import TYPE_CHECKING
from urllib.parse import unquote, urlsplit

from catalogsync.domain.errors import MediaError, TransportError
from catalogsync.domain.model import MediaAsset

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable
    from pathlib import Path
    from uuid import UUID

    from catalogsync.domain.model import CatalogProduct, ProductRecord
    from catalogsync.domain.ports.media import ImageDownloader, MediaStore
    from catalogsync.domain.ports.persistence import MediaAssetRepository

log = getLogger(__name__)

_IMAGE_SCHEMES = frozenset({"http", "https"})


def is_valid_image_url(url: str) -> bool:
    """Absolute http(s) URL with a host and a non-empty path segment."""

    try:
        parts = urlsplit(url)
    except ValueError:
        return False
    if parts.scheme.lower() not in _IMAGE_SCHEMES or not parts.netloc:
        return False
    return bool(display_name_for(url))


def display_name_for(url: str) -> str:
    """Percent-decoded final path segment, e.g. ``.../my%20pic.jpg`` -> ``my pic.jpg``."""

    path = urlsplit(url).path
    return unquote(PurePosixPath(path).name).strip()


def gallery_urls_for(record: ProductRecord) -> list[str]:
    """Trimmed gallery URLs in feed order, without duplicates or the featured URL."""

    featured = (record.featured_image_url or "").strip()
    seen: set[str] = set()
    urls: list[str] = []
    for raw in record.gallery_image_urls:
        url = raw.strip()
        if not url or url == featured or url in seen:
            continue
        seen.add(url)
        urls.append(url)
    return urls


def _never_stop() -> bool:
    return False


@dataclass(slots=True)
class MediaSyncReport:
    featured_asset_id: UUID | None = None
    gallery_asset_ids: list[UUID] | None = None
    errors: list[MediaError] = field(default_factory=list[MediaError])
    interrupted: bool = False


@dataclass(slots=True)
class MediaSynchronizer:
    """Download images, move them into the media store and link them to a product.

    Failures are per image: a broken URL or a timed-out download is reported as
    a :class:`MediaError` and the remaining images are still processed.
    """

    downloader: ImageDownloader
    store: MediaStore

    def attach(
        self,
        product: CatalogProduct,
        url: str,
        *,
        is_featured: bool,
        assets: MediaAssetRepository,
    ) -> MediaAsset:
        """Create one media asset for ``url`` owned by ``product``.

        Raises :class:`MediaError` when the URL is invalid, the download fails or
        the file is not a storable image. The temporary download is always removed.
        """

        cleaned = url.strip()
        if not is_valid_image_url(cleaned):
            raise MediaError("invalid image URL", url=cleaned)
        display_name = display_name_for(cleaned)

        try:
            temp_path = self.downloader(cleaned)
        except TransportError as exc:
            raise MediaError(f"download failed: {exc}", url=cleaned) from exc

        try:
            stored = self.store.store_permanently(
                temp_path, display_name=display_name, owner_id=product.id
            )
        except MediaError as exc:
            raise MediaError(exc.reason, url=cleaned) from exc
        finally:
            _discard_temp_file(temp_path)

        asset = MediaAsset(
            product_id=product.id,
            name=display_name,
            path=str(stored.path),
            mime_type=stored.mime_type,
            size=stored.size,
            source_url=cleaned,
        )
        try:
            asset.renditions = self.store.generate_renditions(stored)
        except MediaError as exc:
            log.warning("Keeping %s without renditions: %s", asset.name, exc)

        assets.add(asset)
        if is_featured:
            product.featured_asset_id = asset.id
        log.debug("Attached %s to %s (featured=%s)", asset.name, product.sku, is_featured)
        return asset

    def synchronize(
        self,
        product: CatalogProduct,
        record: ProductRecord,
        *,
        assets: MediaAssetRepository,
        should_stop: Callable[[], bool] = _never_stop,
    ) -> MediaSyncReport:
        """Process the featured image, then the gallery.

        The gallery is replaced whenever the record lists any gallery entry, even
        one that only repeats the featured image; it then holds exactly the
        assets created here, possibly none. A stop request between gallery
        images keeps what was attached so far and skips the rest.
        """

        report = MediaSyncReport()

        featured_url = (record.featured_image_url or "").strip()
        if featured_url:
            try:
                asset = self.attach(product, featured_url, is_featured=True, assets=assets)
            except MediaError as exc:
                log.warning("Featured image for %s skipped: %s", product.sku, exc)
                report.errors.append(exc)
            else:
                report.featured_asset_id = asset.id

        if not record.gallery_image_urls:
            return report

        gallery_ids = self._attach_gallery(
            product, gallery_urls_for(record), assets, should_stop, report
        )
        product.gallery_asset_ids = gallery_ids
        report.gallery_asset_ids = list(gallery_ids)
        return report

    def _attach_gallery(
        self,
        product: CatalogProduct,
        urls: Iterable[str],
        assets: MediaAssetRepository,
        should_stop: Callable[[], bool],
        report: MediaSyncReport,
    ) -> list[UUID]:
        gallery_ids: list[UUID] = []
        for url in urls:
            if should_stop():
                log.info("Stop requested; skipping remaining gallery images for %s", product.sku)
                report.interrupted = True
                break
            try:
                asset = self.attach(product, url, is_featured=False, assets=assets)
            except MediaError as exc:
                log.warning("Gallery image for %s skipped: %s", product.sku, exc)
                report.errors.append(exc)
                continue
            gallery_ids.append(asset.id)
        return gallery_ids


def _discard_temp_file(path: Path) -> None:
    try:
        path.unlink(missing_ok=True)
    except OSError as exc:
        log.warning("Could not remove temporary download %s: %s", path, exc)
