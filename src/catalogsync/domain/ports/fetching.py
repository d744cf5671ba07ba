"""Ports for fetching the vendor feed."""

from __future__ import annotations

from collections.abc import Callable, Sequence
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from catalogsync.domain.errors import RecordError
    from catalogsync.domain.model import ProductRecord


@runtime_checkable
class FeedFetcher(Protocol):
    """Callable port returning the raw feed payload.

    Raises ``TransportError`` when the endpoint cannot be reached or answers with an error.
    """

    def __call__(self) -> bytes: ...


type ParsedItem = ProductRecord | RecordError
type FeedParser = Callable[[bytes], Sequence[ParsedItem]]


__all__ = ["FeedFetcher", "FeedParser", "ParsedItem"]
