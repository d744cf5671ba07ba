"""SQLAlchemy adapter package for catalogsync."""

from __future__ import annotations

from .mappings import mapper_registry, start_mappers
from .repositories import (
    SqlAlchemyCategoryRepository,
    SqlAlchemyMediaAssetRepository,
    SqlAlchemyProductRepository,
)
from .unit_of_work import SqlAlchemyCatalogUnitOfWork, shutdown, startup

__all__ = [
    "SqlAlchemyCatalogUnitOfWork",
    "SqlAlchemyCategoryRepository",
    "SqlAlchemyMediaAssetRepository",
    "SqlAlchemyProductRepository",
    "mapper_registry",
    "shutdown",
    "start_mappers",
    "startup",
]
