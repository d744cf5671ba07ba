"""Repository implementations backed by SQLAlchemy sessions."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from catalogsync.adapters.sqlalchemy.mappings import category_table, product_table
from catalogsync.domain.errors import PersistenceError
from catalogsync.domain.model import CatalogProduct, CategoryNode, MediaAsset, parent_key_for

if TYPE_CHECKING:
    import uuid

    from sqlalchemy.orm import Session

log = getLogger(__name__)


class SqlAlchemyProductRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def add(self, entity: CatalogProduct) -> None:
        self.session.add(entity)

    def get_by_sku(self, sku: str) -> CatalogProduct | None:
        stmt = select(CatalogProduct).where(product_table.c.sku == sku)
        try:
            return self.session.execute(stmt).scalar_one_or_none()
        except SQLAlchemyError as exc:
            raise PersistenceError(f"product lookup for {sku!r} failed: {exc}") from exc


class SqlAlchemyCategoryRepository:
    """Find-or-create over the ``(name, parent_key)`` unique constraint.

    New nodes are flushed inside a SAVEPOINT; if another writer created the same
    node first, the savepoint is rolled back and the winner is selected instead.
    """

    def __init__(self, session: Session) -> None:
        self.session = session

    def find_or_create(self, name: str, parent_id: uuid.UUID | None) -> CategoryNode:
        parent_key = parent_key_for(parent_id)
        try:
            existing = self._select(name, parent_key)
            if existing is not None:
                return existing

            node = CategoryNode(name=name, parent_id=parent_id)
            try:
                with self.session.begin_nested():
                    self.session.add(node)
            except IntegrityError:
                log.info("Category %r created concurrently; reusing it", name)
                winner = self._select(name, parent_key)
                if winner is None:
                    msg = f"category {name!r} conflicted but could not be found"
                    raise PersistenceError(msg) from None
                return winner
        except SQLAlchemyError as exc:
            raise PersistenceError(f"category {name!r} could not be resolved: {exc}") from exc

        log.debug("Created category %r under %s", name, parent_key or "<root>")
        return node

    def _select(self, name: str, parent_key: str) -> CategoryNode | None:
        stmt = (
            select(CategoryNode)
            .where(category_table.c.name == name)
            .where(category_table.c.parent_key == parent_key)
        )
        return self.session.execute(stmt).scalar_one_or_none()


class SqlAlchemyMediaAssetRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def add(self, entity: MediaAsset) -> None:
        self.session.add(entity)

    def get(self, asset_id: uuid.UUID) -> MediaAsset | None:
        try:
            return self.session.get(MediaAsset, asset_id)
        except SQLAlchemyError as exc:
            raise PersistenceError(f"media asset lookup failed: {exc}") from exc
