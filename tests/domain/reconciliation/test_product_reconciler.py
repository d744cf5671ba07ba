from __future__ import annotations

from decimal import Decimal
from typing import TYPE_CHECKING

import pytest

from catalogsync.domain.errors import PersistenceError, TransportError
from catalogsync.domain.model import AttributeEntry, CatalogProduct
from catalogsync.domain.reconciliation import (
    CategoryResolver,
    MediaSynchronizer,
    ProductReconciler,
    RecordStatus,
)
from tests.helpers.catalog import (
    FakeImageDownloader,
    FakeMediaStore,
    InMemoryCatalog,
    make_record,
    png_bytes,
)

if TYPE_CHECKING:
    from pathlib import Path

FRONT = "https://cdn.example.com/img/front.png"
BACK = "https://cdn.example.com/img/back.png"


def _media(tmp_path: Path, responses: dict[str, bytes | Exception]) -> MediaSynchronizer:
    downloads = tmp_path / "downloads"
    media_root = tmp_path / "media"
    downloads.mkdir(exist_ok=True)
    media_root.mkdir(exist_ok=True)
    return MediaSynchronizer(FakeImageDownloader(downloads, responses), FakeMediaStore(media_root))


def test_reconcile_creates_product_with_all_fields() -> None:
    catalog = InMemoryCatalog()
    reconciler = ProductReconciler(categories=CategoryResolver())

    outcome = reconciler.reconcile(
        make_record(
            name="Router <b>X</b>",
            short_description="<em>short</em>",
            promo_price="1199.00",
            attributes={"brand": "Acme", "warranty": "1 year"},
        ),
        catalog.unit_of_work(),
    )

    assert outcome.status is RecordStatus.CREATED
    product = catalog.products.by_sku["SKU-1"]
    assert product.name == "Router X"
    assert product.description == "<p>Fast <strong>router</strong></p>"
    assert product.short_description == "<em>short</em>"
    assert product.regular_price == Decimal("1299.00")
    assert product.sale_price == Decimal("1199.00")
    assert product.cost_price == Decimal("999.00")
    assert product.stock_quantity == 8
    assert product.manage_stock is True
    assert product.weight == "1.2"
    assert product.length is None
    assert len(product.category_ids) == 2
    assert [entry.name for entry in product.attributes] == ["Brand", "Warranty"]
    assert product.updated_at is not None
    assert catalog.commits == 1


def test_reconcile_twice_is_idempotent() -> None:
    catalog = InMemoryCatalog()
    reconciler = ProductReconciler(categories=CategoryResolver())
    record = make_record()

    first = reconciler.reconcile(record, catalog.unit_of_work())
    product = catalog.products.by_sku["SKU-1"]
    snapshot = (
        product.id,
        product.name,
        product.regular_price,
        product.stock_quantity,
        list(product.category_ids),
        list(product.attributes),
    )
    second = reconciler.reconcile(record, catalog.unit_of_work())

    assert first.status is RecordStatus.CREATED
    assert second.status is RecordStatus.UPDATED
    assert len(catalog.products.by_sku) == 1
    assert len(catalog.categories.nodes) == 2
    assert snapshot == (
        product.id,
        product.name,
        product.regular_price,
        product.stock_quantity,
        product.category_ids,
        product.attributes,
    )


def test_empty_optional_fields_keep_previous_values() -> None:
    catalog = InMemoryCatalog()
    existing = CatalogProduct(
        sku="SKU-1",
        short_description="old short",
        attributes=[AttributeEntry(name="Brand", options=("Old",))],
        weight="5",
    )
    catalog.products.add(existing)

    ProductReconciler(categories=CategoryResolver()).reconcile(
        make_record(short_description="", attributes={}, category_path=" > ", weight=None),
        catalog.unit_of_work(),
    )

    assert existing.short_description == "old short"
    assert existing.attributes == [AttributeEntry(name="Brand", options=("Old",))]
    assert existing.category_ids == []
    assert existing.weight == "5"


def test_category_failure_keeps_previous_categories() -> None:
    catalog = InMemoryCatalog()
    reconciler = ProductReconciler(categories=CategoryResolver())
    reconciler.reconcile(make_record(category_path="Networking > Routers"), catalog.unit_of_work())
    previous = list(catalog.products.by_sku["SKU-1"].category_ids)
    catalog.categories.fail_on.add("Switches")

    outcome = reconciler.reconcile(
        make_record(category_path="Networking > Switches", retail_price="50.00"),
        catalog.unit_of_work(),
    )

    product = catalog.products.by_sku["SKU-1"]
    assert outcome.status is RecordStatus.UPDATED
    assert product.category_ids == previous
    assert product.regular_price == Decimal("50.00")
    assert any("categories not updated" in warning for warning in outcome.warnings)


def test_initial_commit_failure_raises() -> None:
    catalog = InMemoryCatalog(failing_commits={1})

    with pytest.raises(PersistenceError):
        ProductReconciler(categories=CategoryResolver()).reconcile(
            make_record(), catalog.unit_of_work()
        )


def test_reconcile_with_media_commits_twice(tmp_path: Path) -> None:
    catalog = InMemoryCatalog()
    reconciler = ProductReconciler(
        categories=CategoryResolver(),
        media=_media(tmp_path, {FRONT: png_bytes(), BACK: png_bytes()}),
    )

    outcome = reconciler.reconcile(
        make_record(featured_image_url=FRONT, gallery_image_urls=[FRONT, BACK]),
        catalog.unit_of_work(),
    )

    product = catalog.products.by_sku["SKU-1"]
    assert outcome.media_errors == ()
    assert catalog.commits == 2
    assert product.featured_asset_id is not None
    assert len(product.gallery_asset_ids) == 1
    assert len(catalog.media_assets.assets) == 2


def test_image_timeout_is_a_media_error_and_product_persists(tmp_path: Path) -> None:
    catalog = InMemoryCatalog()
    reconciler = ProductReconciler(
        categories=CategoryResolver(),
        media=_media(tmp_path, {FRONT: TransportError("timed out after 30s", url=FRONT)}),
    )

    outcome = reconciler.reconcile(make_record(featured_image_url=FRONT), catalog.unit_of_work())

    assert outcome.status is RecordStatus.CREATED
    assert len(outcome.media_errors) == 1
    assert FRONT in outcome.media_errors[0]
    assert catalog.products.by_sku["SKU-1"].featured_asset_id is None


def test_final_commit_failure_raises_after_initial_commit(tmp_path: Path) -> None:
    catalog = InMemoryCatalog(failing_commits={2})
    reconciler = ProductReconciler(
        categories=CategoryResolver(), media=_media(tmp_path, {FRONT: png_bytes()})
    )

    with pytest.raises(PersistenceError):
        reconciler.reconcile(make_record(featured_image_url=FRONT), catalog.unit_of_work())

    assert catalog.commits == 2
    assert "SKU-1" in catalog.products.by_sku
