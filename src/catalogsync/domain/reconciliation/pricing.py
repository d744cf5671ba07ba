"""Pricing and stock normalization."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from decimal import Decimal

    from catalogsync.domain.model import CatalogProduct, ProductRecord


@dataclass(frozen=True, slots=True)
class PricingResult:
    regular_price: Decimal | None
    sale_price: Decimal | None
    cost_price: Decimal
    stock_quantity: int


def normalize_pricing(record: ProductRecord) -> PricingResult:
    regular = record.retail_price if record.retail_price > 0 else None
    sale = record.promo_price if record.promo_price is not None and record.promo_price > 0 else None
    return PricingResult(
        regular_price=regular,
        sale_price=sale,
        cost_price=record.cost_price,
        stock_quantity=record.stock.total,
    )


def apply_pricing(product: CatalogProduct, pricing: PricingResult) -> None:
    """Write prices and stock onto ``product``.

    Unset regular/sale prices leave the stored values alone; cost and stock are
    always written and stock management is always switched on.
    """

    if pricing.regular_price is not None:
        product.regular_price = pricing.regular_price
    if pricing.sale_price is not None:
        product.sale_price = pricing.sale_price
    product.cost_price = pricing.cost_price
    product.manage_stock = True
    product.stock_quantity = pricing.stock_quantity
