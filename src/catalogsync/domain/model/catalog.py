"""Persistent catalog entities: products, category nodes and media assets."""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from pathlib import PurePosixPath
from typing import TYPE_CHECKING
from uuid import UUID

from .base import Entity, utcnow
from .record import ZERO

if TYPE_CHECKING:
    from datetime import datetime

ROOT_PARENT_KEY = ""


def parent_key_for(parent_id: UUID | None) -> str:
    """Key used by the store's (name, parent) uniqueness constraint; root is ``""``."""

    return ROOT_PARENT_KEY if parent_id is None else str(parent_id)


@dataclass(frozen=True, slots=True, kw_only=True)
class AttributeEntry:
    """Descriptive product attribute. Rebuilt from the feed on every reconciliation."""

    name: str
    options: tuple[str, ...]
    position: int = 0
    visible: bool = True
    # product variations are not managed by this system
    variation: bool = False

    def to_dict(self) -> dict[str, object]:
        return {
            "name": self.name,
            "options": list(self.options),
            "position": self.position,
            "visible": self.visible,
            "variation": self.variation,
        }

    @classmethod
    def from_dict(cls, data: dict[str, object]) -> AttributeEntry:
        raw_options = data.get("options") or []
        options = tuple(str(option) for option in raw_options) if isinstance(raw_options, list) else ()
        position = data.get("position", 0)
        return cls(
            name=str(data.get("name", "")),
            options=options,
            position=position if isinstance(position, int) else 0,
            visible=bool(data.get("visible", True)),
            variation=bool(data.get("variation", False)),
        )


@dataclass(eq=False, kw_only=True)
class CategoryNode(Entity):
    """Taxonomy node; at most one node exists per (name, parent)."""

    name: str
    parent_id: UUID | None = None
    parent_key: str = field(init=False, default=ROOT_PARENT_KEY)

    def __post_init__(self) -> None:
        self.parent_key = parent_key_for(self.parent_id)

    @property
    def is_root(self) -> bool:
        return self.parent_id is None


@dataclass(eq=False, kw_only=True)
class MediaAsset(Entity):
    """A downloaded image owned by the catalog. Never deleted by the importer."""

    product_id: UUID
    name: str
    path: str
    mime_type: str
    size: int
    source_url: str
    renditions: dict[str, str] = field(default_factory=dict[str, str])
    created_at: datetime = field(default_factory=utcnow)

    @property
    def title(self) -> str:
        return PurePosixPath(self.name).stem or self.name


@dataclass(eq=False, kw_only=True)
class CatalogProduct(Entity):
    """Catalog-side product keyed by SKU; created on first sight, then mutated in place."""

    sku: str
    name: str = ""
    description: str = ""
    short_description: str = ""
    regular_price: Decimal | None = None
    sale_price: Decimal | None = None
    # internal reference value, never shown to customers
    cost_price: Decimal = ZERO
    manage_stock: bool = False
    stock_quantity: int = 0
    weight: str | None = None
    length: str | None = None
    width: str | None = None
    height: str | None = None
    category_ids: list[UUID] = field(default_factory=list[UUID])
    attributes: list[AttributeEntry] = field(default_factory=list[AttributeEntry])
    featured_asset_id: UUID | None = None
    gallery_asset_ids: list[UUID] = field(default_factory=list[UUID])
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime | None = None

    def touch(self) -> None:
        self.updated_at = utcnow()
