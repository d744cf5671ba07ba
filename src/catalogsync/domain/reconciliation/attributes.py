"""Map feed key/value pairs onto catalog attribute entries."""

from __future__ import annotations

from typing import TYPE_CHECKING

from catalogsync.domain.model import AttributeEntry

if TYPE_CHECKING:
    from collections.abc import Mapping


def capitalize_first(name: str) -> str:
    """Upper-case the first letter only; ``"warranty period"`` -> ``"Warranty period"``."""

    return name[:1].upper() + name[1:]


def map_attributes(values: Mapping[str, object]) -> list[AttributeEntry]:
    """Build the full attribute list for a product, skipping empty values."""

    entries: list[AttributeEntry] = []
    for name, value in values.items():
        if value is None or value is False:
            continue
        text = str(value).strip()
        if not text:
            continue
        entries.append(AttributeEntry(name=capitalize_first(name.strip()), options=(text,)))
    return entries
