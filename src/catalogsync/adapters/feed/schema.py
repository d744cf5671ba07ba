"""Pydantic models describing the vendor stock feed."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, cast

from pydantic import BaseModel, ConfigDict, Field, field_validator


def _blank_to_none(value: object) -> object:
    if isinstance(value, str):
        stripped = value.strip()
        return stripped or None
    return value


def _none_to_empty(value: object) -> object:
    if value is None:
        return ""
    if isinstance(value, int | float) and not isinstance(value, bool):
        return str(value)
    return value


def _scalar_to_text(value: object) -> object:
    # dimensions arrive as numbers or strings; both are copied verbatim
    if isinstance(value, int | float) and not isinstance(value, bool):
        return str(value)
    return value


class FeedBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class ProductPayload(FeedBaseModel):
    sku: str
    name: str = ""
    description: str = ""
    short_description: str = Field(default="", alias="shortdesc")
    retail_price: Any = Field(default=None, alias="rrp_incl")
    cost_price: Any = Field(default=None, alias="price")
    promo_price: Any = None
    cpt_stock: Any = Field(default=None, alias="cptstock")
    jhb_stock: Any = Field(default=None, alias="jhbstock")
    dbn_stock: Any = Field(default=None, alias="dbnstock")
    weight: str | None = None
    length: str | None = None
    width: str | None = None
    height: str | None = None
    category_tree: str = Field(default="", alias="categorytree")
    attributes: dict[str, Any] = Field(default_factory=dict[str, Any])
    featured_image: str | None = None
    all_images: str | list[str] = ""

    @field_validator("sku", mode="before")
    @classmethod
    def _require_sku(cls, value: object) -> str:
        if isinstance(value, int) and not isinstance(value, bool):
            value = str(value)
        if not isinstance(value, str) or not value.strip():
            raise ValueError("sku must be a non-empty string")
        return value.strip()

    _normalize_text = field_validator(
        "name", "description", "short_description", "category_tree", "all_images", mode="before"
    )(_none_to_empty)
    _normalize_dimensions = field_validator("weight", "length", "width", "height", mode="before")(
        _scalar_to_text
    )
    _normalize_featured = field_validator("featured_image", mode="before")(_blank_to_none)

    @field_validator("attributes", mode="before")
    @classmethod
    def _coerce_attributes(cls, value: object) -> object:
        # an empty attribute set is serialized as ``[]`` by the vendor
        if value is None or (isinstance(value, list) and not value):
            return {}
        return value

    def gallery_urls(self) -> tuple[str, ...]:
        # blank entries are kept: a listing of only blanks still clears the gallery
        if isinstance(self.all_images, list):
            raw = self.all_images
        elif self.all_images.strip():
            raw = self.all_images.split("|")
        else:
            return ()
        return tuple(part.strip() for part in raw)

    def attribute_values(self) -> dict[str, str]:
        values: dict[str, str] = {}
        for name, value in self.attributes.items():
            if value is None or value is False:
                continue
            values[str(name)] = str(value)
        return values


class StockSection(FeedBaseModel):
    products: list[Any]


class FeedEnvelope(FeedBaseModel):
    syntechstock: StockSection


def raw_sku(entry: object) -> str | None:
    """Best-effort SKU of an entry that failed validation, for error reporting."""

    if not isinstance(entry, Mapping):
        return None
    value = cast(Mapping[str, object], entry).get("sku")
    if isinstance(value, str | int) and not isinstance(value, bool):
        text = str(value).strip()
        return text or None
    return None
