"""Reconciliation of vendor feed records onto the catalog."""

from __future__ import annotations

from .attributes import capitalize_first, map_attributes
from .categories import CategoryResolver, split_category_path
from .markup import plain_text, sanitize_html
from .media import MediaSyncReport, MediaSynchronizer, display_name_for, is_valid_image_url
from .pricing import PricingResult, apply_pricing, normalize_pricing
from .products import ProductReconciler
from .results import ImportSummary, RecordOutcome, RecordStatus
from .run import ImportRun

__all__ = [
    "CategoryResolver",
    "ImportRun",
    "ImportSummary",
    "MediaSyncReport",
    "MediaSynchronizer",
    "PricingResult",
    "ProductReconciler",
    "RecordOutcome",
    "RecordStatus",
    "apply_pricing",
    "capitalize_first",
    "display_name_for",
    "is_valid_image_url",
    "map_attributes",
    "normalize_pricing",
    "plain_text",
    "sanitize_html",
    "split_category_path",
]
