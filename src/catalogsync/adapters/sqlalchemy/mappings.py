"""SQLAlchemy mapping metadata for the catalog model."""

from __future__ import annotations

import json
import logging
import uuid
from datetime import UTC, datetime
from decimal import Decimal
from functools import cache
from typing import Any, cast

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    Dialect,
    ForeignKey,
    Integer,
    String,
    Table,
    Text,
    TypeDecorator,
    UniqueConstraint,
    Uuid,
    orm,
)
from sqlalchemy.orm import configure_mappers

from catalogsync.domain.model import (
    ROOT_PARENT_KEY,
    AttributeEntry,
    CatalogProduct,
    CategoryNode,
    MediaAsset,
)
from catalogsync.domain.model.record import CENT

log = logging.getLogger(__name__)

UUIDColumnType = Uuid[uuid.UUID]


class UTCDateTime(TypeDecorator[datetime]):
    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        if value.tzinfo is None:
            value = value.replace(tzinfo=UTC)
        return value.astimezone(UTC)

    def process_result_value(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        return value if value.tzinfo else value.replace(tzinfo=UTC)


class MoneyType(TypeDecorator[Decimal]):
    """Two-place decimal stored as text, so SQLite keeps it exact."""

    impl = String(32)
    cache_ok = True

    def process_bind_param(self, value: Decimal | None, dialect: Dialect) -> str | None:
        _ = dialect
        if value is None:
            return None
        return str(Decimal(value).quantize(CENT))

    def process_result_value(self, value: str | None, dialect: Dialect) -> Decimal | None:
        _ = dialect
        if value is None:
            return None
        return Decimal(value).quantize(CENT)


class _JsonText[T](TypeDecorator[T]):
    """A Python value stored as JSON text; unreadable content loads as the empty value."""

    impl = Text
    cache_ok = True

    def encode(self, value: T | None) -> object:
        raise NotImplementedError

    def decode(self, loaded: object) -> T:
        raise NotImplementedError

    def process_bind_param(self, value: T | None, dialect: Dialect) -> str:
        _ = dialect
        return json.dumps(self.encode(value), sort_keys=True)

    def process_result_value(self, value: str | None, dialect: Dialect) -> T:
        _ = dialect
        return self.decode(None if value is None else json.loads(value))


class UUIDListType(_JsonText[list[uuid.UUID]]):
    cache_ok = True

    def encode(self, value: list[uuid.UUID] | None) -> object:
        return [str(item) for item in value or []]

    def decode(self, loaded: object) -> list[uuid.UUID]:
        if not isinstance(loaded, list):
            return []
        return [uuid.UUID(item) for item in cast(list[Any], loaded) if isinstance(item, str)]


class AttributeListType(_JsonText[list[AttributeEntry]]):
    cache_ok = True

    def encode(self, value: list[AttributeEntry] | None) -> object:
        return [entry.to_dict() for entry in value or []]

    def decode(self, loaded: object) -> list[AttributeEntry]:
        if not isinstance(loaded, list):
            return []
        return [
            AttributeEntry.from_dict(cast(dict[str, object], item))
            for item in cast(list[Any], loaded)
            if isinstance(item, dict)
        ]


class StringMapType(_JsonText[dict[str, str]]):
    cache_ok = True

    def encode(self, value: dict[str, str] | None) -> object:
        return dict(value or {})

    def decode(self, loaded: object) -> dict[str, str]:
        if not isinstance(loaded, dict):
            return {}
        return {str(key): str(item) for key, item in cast(dict[Any, Any], loaded).items()}


mapper_registry = orm.registry()
mapper_registry.metadata.naming_convention = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_N_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_label)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}

category_table = Table(
    "category",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column("name", String, nullable=False),
    Column("parent_id", UUIDColumnType, ForeignKey("category.id"), nullable=True),
    # NULL parents never collide in a unique index, so root uses "" here
    Column("parent_key", String(36), nullable=False, default=ROOT_PARENT_KEY),
    UniqueConstraint("name", "parent_key"),
)

product_table = Table(
    "product",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column("sku", String, nullable=False, unique=True),
    Column("name", String, nullable=False, default=""),
    Column("description", Text, nullable=False, default=""),
    Column("short_description", Text, nullable=False, default=""),
    Column("regular_price", MoneyType, nullable=True),
    Column("sale_price", MoneyType, nullable=True),
    Column("cost_price", MoneyType, nullable=False),
    Column("manage_stock", Boolean, nullable=False, default=False),
    Column("stock_quantity", Integer, nullable=False, default=0),
    Column("weight", String, nullable=True),
    Column("length", String, nullable=True),
    Column("width", String, nullable=True),
    Column("height", String, nullable=True),
    Column("category_ids", UUIDListType, nullable=False),
    Column("attributes", AttributeListType, nullable=False),
    # no foreign key: assets reference products, and a product outlives its old featured image
    Column("featured_asset_id", UUIDColumnType, nullable=True),
    Column("gallery_asset_ids", UUIDListType, nullable=False),
    Column("created_at", UTCDateTime, nullable=False),
    Column("updated_at", UTCDateTime, nullable=True),
)

media_asset_table = Table(
    "media_asset",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column(
        "product_id",
        UUIDColumnType,
        ForeignKey("product.id"),
        nullable=False,
        index=True,
    ),
    Column("name", String, nullable=False),
    Column("path", String, nullable=False),
    Column("mime_type", String, nullable=False),
    Column("size", Integer, nullable=False),
    Column("source_url", String, nullable=False, index=True),
    Column("renditions", StringMapType, nullable=False),
    Column("created_at", UTCDateTime, nullable=False),
)


@cache
def start_mappers() -> orm.registry:
    """Map the catalog dataclasses onto their tables exactly once."""

    log.debug("Configuring catalog mappers")
    mapper_registry.map_imperatively(CategoryNode, category_table)
    mapper_registry.map_imperatively(CatalogProduct, product_table)
    mapper_registry.map_imperatively(MediaAsset, media_asset_table)
    configure_mappers()
    return mapper_registry

