"""Permanent image storage on the local filesystem, with Pillow thumbnails."""

from __future__ import annotations

import re
import shutil
from dataclasses import dataclass, field
from datetime import UTC, datetime
from logging import getLogger
from pathlib import Path, PurePosixPath
from typing import TYPE_CHECKING

from PIL import Image, UnidentifiedImageError

from catalogsync.config.media import DEFAULT_THUMBNAIL_SIZES
from catalogsync.domain.errors import MediaError
from catalogsync.domain.ports.media import StoredFile

if TYPE_CHECKING:
    from collections.abc import Callable
    from uuid import UUID

    from catalogsync.domain.ports.media import MediaStore

log = getLogger(__name__)

_UNSAFE_CHARS_RE = re.compile(r"[^A-Za-z0-9._-]+")
_EXTENSIONS = {
    "JPEG": (".jpg", ".jpeg"),
    "PNG": (".png",),
    "GIF": (".gif",),
    "WEBP": (".webp",),
}
_MODES_WITHOUT_ALPHA = {"JPEG": "RGB"}


def safe_filename(display_name: str, *, fallback: str = "image") -> str:
    """Reduce ``display_name`` to a portable filename, keeping its extension."""

    name = PurePosixPath(display_name.replace("\\", "/")).name
    cleaned = _UNSAFE_CHARS_RE.sub("-", name).strip(".-")
    return cleaned or fallback


def _unique_path(directory: Path, filename: str) -> Path:
    candidate = directory / filename
    stem, suffix = candidate.stem, candidate.suffix
    counter = 1
    while candidate.exists():
        candidate = directory / f"{stem}-{counter}{suffix}"
        counter += 1
    return candidate


def _default_clock() -> datetime:
    return datetime.now(UTC)


@dataclass(slots=True)
class FilesystemMediaStore:
    """Store images under ``root/YYYY/MM`` and write resized renditions next to them.

    Filenames never collide: an existing name gets a numeric suffix.
    """

    root: Path
    thumbnail_sizes: dict[str, tuple[int, int]] = field(
        default_factory=lambda: dict(DEFAULT_THUMBNAIL_SIZES)
    )
    clock: Callable[[], datetime] = _default_clock

    def store_permanently(self, temp_path: Path, *, display_name: str, owner_id: UUID) -> StoredFile:
        image_format = self._identify(temp_path)
        filename = safe_filename(display_name)
        suffixes = _EXTENSIONS.get(image_format, ())
        if suffixes and Path(filename).suffix.lower() not in suffixes:
            filename = f"{Path(filename).stem or 'image'}{suffixes[0]}"

        now = self.clock()
        directory = self.root / f"{now:%Y}" / f"{now:%m}"
        try:
            directory.mkdir(parents=True, exist_ok=True)
            target = _unique_path(directory, filename)
            shutil.move(temp_path, target)
            size = target.stat().st_size
        except OSError as exc:
            raise MediaError(f"could not store image: {exc}", url=str(temp_path)) from exc

        mime_type = Image.MIME.get(image_format, "application/octet-stream")
        log.debug("Stored %s for %s at %s", display_name, owner_id, target)
        return StoredFile(path=target, mime_type=mime_type, size=size)

    def generate_renditions(self, stored: StoredFile) -> dict[str, str]:
        """Write one downscaled copy per configured size; smaller sources are not upscaled."""

        renditions: dict[str, str] = {}
        try:
            with Image.open(stored.path) as source:
                image_format = source.format or "PNG"
                for label, (max_width, max_height) in self.thumbnail_sizes.items():
                    if source.width <= max_width and source.height <= max_height:
                        continue
                    rendition = source.copy()
                    rendition.thumbnail((max_width, max_height))
                    target_mode = _MODES_WITHOUT_ALPHA.get(image_format)
                    if target_mode and rendition.mode != target_mode:
                        rendition = rendition.convert(target_mode)
                    target = stored.path.with_name(
                        f"{stored.path.stem}-{rendition.width}x{rendition.height}{stored.path.suffix}"
                    )
                    rendition.save(target, format=image_format)
                    renditions[label] = str(target)
        except (OSError, ValueError, Image.DecompressionBombError) as exc:
            raise MediaError(f"could not generate renditions: {exc}", url=str(stored.path)) from exc
        return renditions

    def _identify(self, path: Path) -> str:
        try:
            with Image.open(path) as image:
                image.verify()
                image_format = image.format
        except (UnidentifiedImageError, OSError, SyntaxError, Image.DecompressionBombError) as exc:
            raise MediaError(f"not a usable image: {exc}", url=str(path)) from exc
        if image_format is None:
            raise MediaError("not a usable image: unknown format", url=str(path))
        return image_format


if TYPE_CHECKING:
    _store_check: MediaStore = FilesystemMediaStore(root=Path())
