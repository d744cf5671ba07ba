"""Error taxonomy for feed imports.

Fatal errors (:class:`MalformedFeed` and a feed-level :class:`TransportError`) end a
run before any record is reconciled. Everything else is recovered at record or
image granularity and reported in the run summary.
"""

from __future__ import annotations


class CatalogSyncError(Exception):
    """Base class for all import errors."""


class TransportError(CatalogSyncError):
    """A feed or image fetch failed at the network level."""

    def __init__(self, message: str, *, url: str | None = None) -> None:
        super().__init__(message)
        self.url = url


class MalformedFeed(CatalogSyncError):  # noqa: N818
    """The feed document could not be decoded or lacks the product list."""


class RecordError(CatalogSyncError):
    """A single feed record is invalid and was skipped."""

    def __init__(self, reason: str, *, sku: str | None = None, index: int | None = None) -> None:
        super().__init__(reason)
        self.reason = reason
        self.sku = sku
        self.index = index

    @property
    def label(self) -> str:
        if self.sku:
            return self.sku
        if self.index is not None:
            return f"#{self.index}"
        return "<unknown>"


class PersistenceError(CatalogSyncError):
    """A catalog store read or write failed."""


class MediaError(CatalogSyncError):
    """An image could not be fetched, stored or attached."""

    def __init__(self, reason: str, *, url: str) -> None:
        super().__init__(f"{reason} ({url})")
        self.reason = reason
        self.url = url
