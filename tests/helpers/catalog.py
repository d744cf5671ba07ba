"""Reusable fakes and builders for catalog reconciliation tests."""

from __future__ import annotations

import io
from dataclasses import dataclass, field
from decimal import Decimal
from pathlib import Path
from typing import TYPE_CHECKING, Literal

from PIL import Image

from catalogsync.domain.errors import MediaError, PersistenceError, TransportError
from catalogsync.domain.model import (
    BranchStock,
    CatalogProduct,
    CategoryNode,
    Dimensions,
    MediaAsset,
    ProductRecord,
    parent_key_for,
)
from catalogsync.domain.ports.media import StoredFile
from catalogsync.domain.ports.unit_of_work import CatalogRepositories

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping
    from types import TracebackType
    from uuid import UUID


def make_record(
    sku: str = "SKU-1",
    *,
    name: str = "Example Router",
    description: str = "<p>Fast <strong>router</strong></p>",
    short_description: str = "",
    retail_price: str = "1299.00",
    cost_price: str = "999.00",
    promo_price: str | None = None,
    stock: tuple[int, int, int] = (3, 5, 0),
    category_path: str = "Networking > Routers",
    attributes: Mapping[str, str] | None = None,
    featured_image_url: str | None = None,
    gallery_image_urls: Iterable[str] = (),
    weight: str | None = "1.2",
) -> ProductRecord:
    cpt, jhb, dbn = stock
    return ProductRecord(
        sku=sku,
        name=name,
        description=description,
        short_description=short_description,
        retail_price=Decimal(retail_price),
        cost_price=Decimal(cost_price),
        promo_price=Decimal(promo_price) if promo_price is not None else None,
        stock=BranchStock(cpt=cpt, jhb=jhb, dbn=dbn),
        dimensions=Dimensions(weight=weight),
        category_path=category_path,
        attributes=dict(attributes) if attributes is not None else {"brand": "Acme"},
        featured_image_url=featured_image_url,
        gallery_image_urls=tuple(gallery_image_urls),
    )


def png_bytes(size: tuple[int, int] = (400, 300), color: str = "red") -> bytes:
    buffer = io.BytesIO()
    Image.new("RGB", size, color).save(buffer, format="PNG")
    return buffer.getvalue()


class InMemoryProductRepository:
    def __init__(self) -> None:
        self.by_sku: dict[str, CatalogProduct] = {}
        self.fail_lookups = False

    def add(self, entity: CatalogProduct) -> None:
        self.by_sku[entity.sku] = entity

    def get_by_sku(self, sku: str) -> CatalogProduct | None:
        if self.fail_lookups:
            raise PersistenceError("lookup unavailable")
        return self.by_sku.get(sku)


class InMemoryCategoryRepository:
    def __init__(self) -> None:
        self.nodes: dict[tuple[str, str], CategoryNode] = {}
        self.calls: list[tuple[str, UUID | None]] = []
        self.fail_on: set[str] = set()

    def find_or_create(self, name: str, parent_id: UUID | None) -> CategoryNode:
        self.calls.append((name, parent_id))
        if name in self.fail_on:
            raise PersistenceError(f"cannot create {name}")
        key = (name, parent_key_for(parent_id))
        node = self.nodes.get(key)
        if node is None:
            node = CategoryNode(name=name, parent_id=parent_id)
            self.nodes[key] = node
        return node


class InMemoryMediaAssetRepository:
    def __init__(self) -> None:
        self.assets: dict[UUID, MediaAsset] = {}

    def add(self, entity: MediaAsset) -> None:
        self.assets[entity.id] = entity

    def get(self, asset_id: UUID) -> MediaAsset | None:
        return self.assets.get(asset_id)


@dataclass
class InMemoryCatalog:
    """Repositories shared by every unit of work a test hands out."""

    products: InMemoryProductRepository = field(default_factory=InMemoryProductRepository)
    categories: InMemoryCategoryRepository = field(default_factory=InMemoryCategoryRepository)
    media_assets: InMemoryMediaAssetRepository = field(
        default_factory=InMemoryMediaAssetRepository
    )
    commits: int = 0
    # 1-based commit numbers that should fail
    failing_commits: set[int] = field(default_factory=set[int])

    def unit_of_work(self) -> FakeUnitOfWork:
        return FakeUnitOfWork(self)


class FakeUnitOfWork:
    def __init__(self, catalog: InMemoryCatalog) -> None:
        self.catalog = catalog
        self._repositories = CatalogRepositories(
            products=catalog.products,
            categories=catalog.categories,
            media_assets=catalog.media_assets,
        )
        self.rolled_back = False

    @property
    def repositories(self) -> CatalogRepositories:
        return self._repositories

    def __enter__(self) -> FakeUnitOfWork:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> Literal[False]:
        if exc_type is not None:
            self.rollback()
        return False

    def commit(self) -> None:
        self.catalog.commits += 1
        if self.catalog.commits in self.catalog.failing_commits:
            raise PersistenceError(f"commit {self.catalog.commits} rejected")

    def rollback(self) -> None:
        self.rolled_back = True


class FakeImageDownloader:
    """Serve canned bodies from ``responses``; URLs mapped to an exception raise it."""

    def __init__(self, directory: Path, responses: Mapping[str, bytes | Exception]) -> None:
        self.directory = directory
        self.responses = dict(responses)
        self.requested: list[str] = []
        self.written: list[Path] = []

    def __call__(self, url: str) -> Path:
        self.requested.append(url)
        response = self.responses.get(url)
        if response is None:
            raise TransportError("HTTP 404", url=url)
        if isinstance(response, Exception):
            raise response
        path = self.directory / f"download-{len(self.requested)}.tmp"
        path.write_bytes(response)
        self.written.append(path)
        return path


class FakeMediaStore:
    def __init__(self, root: Path, *, fail_renditions: bool = False) -> None:
        self.root = root
        self.fail_renditions = fail_renditions
        self.stored: list[StoredFile] = []

    def store_permanently(self, temp_path: Path, *, display_name: str, owner_id: UUID) -> StoredFile:
        data = temp_path.read_bytes()
        if not data.startswith(b"\x89PNG"):
            raise MediaError("not a usable image", url=str(temp_path))
        target = self.root / f"{owner_id.hex[:8]}-{len(self.stored)}-{display_name}"
        target.write_bytes(data)
        stored = StoredFile(path=target, mime_type="image/png", size=len(data))
        self.stored.append(stored)
        return stored

    def generate_renditions(self, stored: StoredFile) -> dict[str, str]:
        if self.fail_renditions:
            raise MediaError("thumbnail failed", url=str(stored.path))
        return {"thumbnail": str(stored.path.with_suffix(".thumb.png"))}


class StaticFeedFetcher:
    def __init__(self, payload: bytes | Exception) -> None:
        self.payload = payload
        self.calls = 0

    def __call__(self) -> bytes:
        self.calls += 1
        if isinstance(self.payload, Exception):
            raise self.payload
        return self.payload
