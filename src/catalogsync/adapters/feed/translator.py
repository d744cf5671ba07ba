"""Translate the raw vendor feed into domain records."""

from __future__ import annotations

import json
from collections.abc import Mapping
from logging import getLogger
from typing import TYPE_CHECKING

from pydantic import ValidationError

from catalogsync.domain.errors import MalformedFeed, RecordError
from catalogsync.domain.model import (
    BranchStock,
    Dimensions,
    ProductRecord,
    coerce_decimal,
    coerce_optional_decimal,
)

from .schema import FeedEnvelope, ProductPayload, raw_sku

if TYPE_CHECKING:
    from catalogsync.domain.ports.fetching import ParsedItem

log = getLogger(__name__)


def parse_feed(payload: bytes) -> list[ParsedItem]:
    """Decode ``payload`` into records, in feed order.

    Raises :class:`MalformedFeed` when the document is not JSON or has no
    ``syntechstock.products`` list with at least one entry. Invalid entries do
    not fail the parse; they come back as :class:`RecordError` items.
    """

    try:
        document = json.loads(payload)
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise MalformedFeed(f"feed is not valid JSON: {exc}") from exc

    try:
        envelope = FeedEnvelope.model_validate(document)
    except ValidationError as exc:
        raise MalformedFeed("feed has no syntechstock.products list") from exc

    entries = envelope.syntechstock.products
    if not entries:
        raise MalformedFeed("feed contains no products")

    items = [parse_product(entry, index=index) for index, entry in enumerate(entries)]
    invalid = sum(1 for item in items if isinstance(item, RecordError))
    if invalid:
        log.warning("%d of %d feed entries are invalid", invalid, len(items))
    return items


def parse_product(entry: object, *, index: int) -> ParsedItem:
    if not isinstance(entry, Mapping):
        return RecordError("entry is not an object", index=index)
    try:
        payload = ProductPayload.model_validate(entry)
    except ValidationError as exc:
        fields = ", ".join(".".join(str(part) for part in error["loc"]) for error in exc.errors())
        return RecordError(f"invalid entry ({fields})", sku=raw_sku(entry), index=index)
    return to_record(payload)


def to_record(payload: ProductPayload) -> ProductRecord:
    return ProductRecord(
        sku=payload.sku,
        name=payload.name,
        description=payload.description,
        short_description=payload.short_description,
        retail_price=coerce_decimal(payload.retail_price),
        cost_price=coerce_decimal(payload.cost_price),
        promo_price=coerce_optional_decimal(payload.promo_price),
        stock=BranchStock.from_raw(
            cpt=payload.cpt_stock, jhb=payload.jhb_stock, dbn=payload.dbn_stock
        ),
        dimensions=Dimensions(
            weight=payload.weight,
            length=payload.length,
            width=payload.width,
            height=payload.height,
        ),
        category_path=payload.category_tree,
        attributes=payload.attribute_values(),
        featured_image_url=payload.featured_image,
        gallery_image_urls=payload.gallery_urls(),
    )
