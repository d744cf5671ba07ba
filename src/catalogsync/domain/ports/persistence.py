"""Ports for the persistent catalog store."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

from catalogsync.domain.model import CatalogProduct, CategoryNode, MediaAsset

if TYPE_CHECKING:
    from uuid import UUID


@runtime_checkable
class Repository[TEntity](Protocol):
    """Minimal repository contract for a persistent aggregate store."""

    def add(self, entity: TEntity) -> None: ...


@runtime_checkable
class ProductRepository(Repository[CatalogProduct], Protocol):
    """Persistence contract for catalog products."""

    def get_by_sku(self, sku: str) -> CatalogProduct | None:
        """Return the product with exactly this SKU, if any.

        Raises ``PersistenceError`` when the store cannot be queried.
        """
        ...


@runtime_checkable
class CategoryRepository(Protocol):
    """Persistence contract for the category tree."""

    def find_or_create(self, name: str, parent_id: UUID | None) -> CategoryNode:
        """Return the node named ``name`` under ``parent_id``, creating it if absent.

        Must be idempotent and safe against a concurrent creator of the same node.
        Raises ``PersistenceError`` when the node can be neither found nor created.
        """
        ...


@runtime_checkable
class MediaAssetRepository(Repository[MediaAsset], Protocol):
    """Persistence contract for media assets."""

    def get(self, asset_id: UUID) -> MediaAsset | None: ...
