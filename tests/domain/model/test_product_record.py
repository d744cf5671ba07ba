from __future__ import annotations

from decimal import Decimal

import pytest

from catalogsync.domain.model import (
    AttributeEntry,
    BranchStock,
    CategoryNode,
    MediaAsset,
    ProductRecord,
    coerce_decimal,
    coerce_int,
    coerce_optional_decimal,
    parent_key_for,
)


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("1299.00", Decimal("1299.00")),
        ("1999.5", Decimal("1999.50")),
        (2599, Decimal("2599.00")),
        (12.345, Decimal("12.34")),
        (" 7 ", Decimal("7.00")),
        ("", Decimal("0.00")),
        ("n/a", Decimal("0.00")),
        ("NaN", Decimal("0.00")),
        (None, Decimal("0.00")),
        (True, Decimal("0.00")),
    ],
)
def test_coerce_decimal(raw: object, expected: Decimal) -> None:
    assert coerce_decimal(raw) == expected


def test_coerce_optional_decimal_keeps_absence() -> None:
    assert coerce_optional_decimal(None) is None
    assert coerce_optional_decimal("  ") is None
    assert coerce_optional_decimal("0") == Decimal("0.00")


@pytest.mark.parametrize(
    ("raw", "expected"),
    [("3", 3), (5, 5), ("4.0", 4), ("bad", 0), (None, 0), ("", 0), (False, 0)],
)
def test_coerce_int(raw: object, expected: int) -> None:
    assert coerce_int(raw) == expected


def test_branch_stock_total_tolerates_bad_values() -> None:
    stock = BranchStock.from_raw(cpt="3", jhb=5, dbn="bad")

    assert stock == BranchStock(cpt=3, jhb=5, dbn=0)
    assert stock.total == 8


@pytest.mark.parametrize("sku", ["", "   "])
def test_record_requires_sku(sku: str) -> None:
    with pytest.raises(ValueError, match="non-empty SKU"):
        ProductRecord(sku=sku)


def test_category_parent_key_tracks_parent() -> None:
    root = CategoryNode(name="Networking")
    child = CategoryNode(name="Routers", parent_id=root.id)

    assert root.is_root
    assert root.parent_key == parent_key_for(None) == ""
    assert child.parent_key == str(root.id)


def test_attribute_entry_round_trips_through_dict() -> None:
    entry = AttributeEntry(name="Brand", options=("Acme",), position=2)

    assert AttributeEntry.from_dict(entry.to_dict()) == entry


def test_media_asset_title_drops_extension() -> None:
    asset = MediaAsset(
        product_id=CategoryNode(name="x").id,
        name="ax55-front.jpg",
        path="/media/2026/10/ax55-front.jpg",
        mime_type="image/jpeg",
        size=10,
        source_url="https://cdn.example.com/ax55-front.jpg",
    )

    assert asset.title == "ax55-front"
