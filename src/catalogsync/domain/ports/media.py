"""Ports for downloading images and storing them as catalog media."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from pathlib import Path
    from uuid import UUID


@dataclass(frozen=True, slots=True)
class StoredFile:
    """A file that has been moved into permanent media storage."""

    path: Path
    mime_type: str
    size: int


@runtime_checkable
class ImageDownloader(Protocol):
    """Download ``url`` to a temporary file and return its path.

    The caller owns the temporary file. Raises ``TransportError`` on timeouts,
    network failures and error responses.
    """

    def __call__(self, url: str) -> Path: ...


@runtime_checkable
class MediaStore(Protocol):
    """Permanent storage for product images."""

    def store_permanently(self, temp_path: Path, *, display_name: str, owner_id: UUID) -> StoredFile:
        """Move ``temp_path`` into storage; raises ``MediaError`` if it is not a usable image."""
        ...

    def generate_renditions(self, stored: StoredFile) -> dict[str, str]:
        """Create derived representations (thumbnails), returning label -> path."""
        ...
