"""Feed-side value objects and the coercion rules applied at the parser boundary."""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Mapping

CENT = Decimal("0.01")
ZERO = Decimal("0.00")


def coerce_decimal(value: object) -> Decimal:
    """Return ``value`` as a two-place decimal; missing or invalid input becomes 0."""

    if value is None or isinstance(value, bool):
        return ZERO
    if isinstance(value, Decimal):
        number = value
    elif isinstance(value, int | float):
        number = Decimal(str(value))
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            return ZERO
        try:
            number = Decimal(text)
        except InvalidOperation:
            return ZERO
    else:
        return ZERO
    if not number.is_finite():
        return ZERO
    return number.quantize(CENT)


def coerce_optional_decimal(value: object) -> Decimal | None:
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    return coerce_decimal(value)


def coerce_int(value: object) -> int:
    """Return ``value`` as an int; ``"4.0"`` is 4, anything unparsable is 0."""

    if value is None or isinstance(value, bool):
        return 0
    if isinstance(value, int):
        return value
    number = coerce_decimal(value)
    return int(number)


@dataclass(frozen=True, slots=True)
class BranchStock:
    """Stock counts reported per vendor warehouse."""

    cpt: int = 0
    jhb: int = 0
    dbn: int = 0

    @classmethod
    def from_raw(cls, *, cpt: object, jhb: object, dbn: object) -> BranchStock:
        return cls(cpt=coerce_int(cpt), jhb=coerce_int(jhb), dbn=coerce_int(dbn))

    @property
    def total(self) -> int:
        return self.cpt + self.jhb + self.dbn


@dataclass(frozen=True, slots=True, kw_only=True)
class Dimensions:
    """Shipping dimensions, copied verbatim; ``None`` means the feed omitted the value."""

    weight: str | None = None
    length: str | None = None
    width: str | None = None
    height: str | None = None


@dataclass(frozen=True, slots=True, kw_only=True)
class ProductRecord:
    """One product as described by the vendor feed, immutable for the duration of a run."""

    sku: str
    name: str = ""
    description: str = ""
    short_description: str = ""
    retail_price: Decimal = ZERO
    cost_price: Decimal = ZERO
    promo_price: Decimal | None = None
    stock: BranchStock = field(default_factory=BranchStock)
    dimensions: Dimensions = field(default_factory=Dimensions)
    category_path: str = ""
    attributes: Mapping[str, str] = field(default_factory=dict[str, str])
    featured_image_url: str | None = None
    gallery_image_urls: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        if not self.sku.strip():
            raise ValueError("ProductRecord requires a non-empty SKU")
