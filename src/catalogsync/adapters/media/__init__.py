"""Image download and storage adapters."""

from __future__ import annotations

from .downloader import HttpImageDownloader
from .filesystem import FilesystemMediaStore, safe_filename

__all__ = ["FilesystemMediaStore", "HttpImageDownloader", "safe_filename"]
