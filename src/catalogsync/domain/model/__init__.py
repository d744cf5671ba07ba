"""Public domain model surface."""

from __future__ import annotations

from catalogsync.domain.model.base import Entity, new_id, utcnow
from catalogsync.domain.model.catalog import (
    ROOT_PARENT_KEY,
    AttributeEntry,
    CatalogProduct,
    CategoryNode,
    MediaAsset,
    parent_key_for,
)
from catalogsync.domain.model.record import (
    BranchStock,
    Dimensions,
    ProductRecord,
    coerce_decimal,
    coerce_int,
    coerce_optional_decimal,
)

__all__ = [
    "ROOT_PARENT_KEY",
    "AttributeEntry",
    "BranchStock",
    "CatalogProduct",
    "CategoryNode",
    "Dimensions",
    "Entity",
    "MediaAsset",
    "ProductRecord",
    "coerce_decimal",
    "coerce_int",
    "coerce_optional_decimal",
    "new_id",
    "parent_key_for",
    "utcnow",
]
