"""Resolve ``"A > B > C"`` category paths into chains of persistent nodes."""

from __future__ import annotations

from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from uuid import UUID

    from catalogsync.domain.ports.persistence import CategoryRepository

log = getLogger(__name__)

PATH_SEPARATOR = ">"


def split_category_path(path: str) -> list[str]:
    """Split on ``>``, trim each segment and drop empty ones."""

    return [segment for segment in (part.strip() for part in path.split(PATH_SEPARATOR)) if segment]


@dataclass(slots=True)
class CategoryResolver:
    """Walk a path root-first, finding or creating one node per segment."""

    def resolve(self, path: str, repository: CategoryRepository) -> list[UUID]:
        """Return the ordered node ids for ``path``, root first.

        A store failure propagates as ``PersistenceError``; the caller keeps the
        product's previous categories in that case.
        """

        parent_id: UUID | None = None
        node_ids: list[UUID] = []
        for segment in split_category_path(path):
            node = repository.find_or_create(segment, parent_id)
            parent_id = node.id
            node_ids.append(node.id)
        log.debug("Resolved category path %r to %d node(s)", path, len(node_ids))
        return node_ids
