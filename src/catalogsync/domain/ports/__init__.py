"""Domain port definitions for adapters."""

from __future__ import annotations

from .fetching import FeedFetcher, FeedParser, ParsedItem
from .media import ImageDownloader, MediaStore, StoredFile
from .persistence import (
    CategoryRepository,
    MediaAssetRepository,
    ProductRepository,
    Repository,
)
from .unit_of_work import (
    CatalogRepositories,
    CatalogUnitOfWork,
    RepositoryCollection,
    UnitOfWork,
)

__all__ = [
    "CatalogRepositories",
    "CatalogUnitOfWork",
    "CategoryRepository",
    "FeedFetcher",
    "FeedParser",
    "ImageDownloader",
    "MediaAssetRepository",
    "MediaStore",
    "ParsedItem",
    "ProductRepository",
    "Repository",
    "RepositoryCollection",
    "StoredFile",
    "UnitOfWork",
]
