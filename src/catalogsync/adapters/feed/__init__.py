"""Public interface for the vendor feed adapter."""

from __future__ import annotations

from .client import FeedFetcher
from .schema import FeedEnvelope, ProductPayload
from .translator import parse_feed, parse_product

__all__ = [
    "FeedEnvelope",
    "FeedFetcher",
    "ProductPayload",
    "parse_feed",
    "parse_product",
]
