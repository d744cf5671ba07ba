"""Reconcile one feed record onto its catalog product.

The reconciler runs ``lookup -> create|load -> populate -> persist -> media ->
persist``. The first commit gives a new product a stable identity before any
image is attached to it; the second commits the featured image and gallery. A
failure in the second commit leaves the fields from the first one in place.
"""

from __future__ import annotations

from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING

from catalogsync.domain.errors import PersistenceError
from catalogsync.domain.model import CatalogProduct

from .attributes import map_attributes
from .categories import CategoryResolver, split_category_path
from .markup import plain_text, sanitize_html
from .pricing import apply_pricing, normalize_pricing
from .results import RecordOutcome, RecordStatus

if TYPE_CHECKING:
    from collections.abc import Callable

    from catalogsync.domain.model import ProductRecord
    from catalogsync.domain.ports.unit_of_work import CatalogUnitOfWork

    from .media import MediaSynchronizer

log = getLogger(__name__)


def _never_stop() -> bool:
    return False


@dataclass(slots=True)
class ProductReconciler:
    """Create or update the catalog product for a record.

    ``media`` may be ``None`` to skip image handling entirely.
    """

    categories: CategoryResolver
    media: MediaSynchronizer | None = None

    def reconcile(
        self,
        record: ProductRecord,
        uow: CatalogUnitOfWork,
        *,
        should_stop: Callable[[], bool] = _never_stop,
    ) -> RecordOutcome:
        """Reconcile ``record`` inside ``uow``.

        Raises :class:`PersistenceError` when the lookup or either commit fails.
        """

        repositories = uow.repositories
        product = repositories.products.get_by_sku(record.sku)
        created = product is None
        if product is None:
            product = CatalogProduct(sku=record.sku)
            repositories.products.add(product)
            log.debug("Creating product %s", record.sku)

        warnings = self._populate(product, record, uow)
        product.touch()
        uow.commit()

        media_errors: tuple[str, ...] = ()
        if self.media is not None:
            report = self.media.synchronize(
                product,
                record,
                assets=repositories.media_assets,
                should_stop=should_stop,
            )
            media_errors = tuple(str(error) for error in report.errors)
            if report.interrupted:
                warnings.append("remaining gallery images skipped after stop request")
            product.touch()
            uow.commit()

        return RecordOutcome(
            label=record.sku,
            status=RecordStatus.CREATED if created else RecordStatus.UPDATED,
            warnings=tuple(warnings),
            media_errors=media_errors,
        )

    def _populate(
        self,
        product: CatalogProduct,
        record: ProductRecord,
        uow: CatalogUnitOfWork,
    ) -> list[str]:
        warnings: list[str] = []

        product.name = plain_text(record.name)
        product.description = sanitize_html(record.description)
        short_description = sanitize_html(record.short_description)
        if short_description:
            product.short_description = short_description

        apply_pricing(product, normalize_pricing(record))

        dimensions = record.dimensions
        if dimensions.weight is not None:
            product.weight = dimensions.weight
        if dimensions.length is not None:
            product.length = dimensions.length
        if dimensions.width is not None:
            product.width = dimensions.width
        if dimensions.height is not None:
            product.height = dimensions.height

        if split_category_path(record.category_path):
            try:
                category_ids = self.categories.resolve(
                    record.category_path, uow.repositories.categories
                )
            except PersistenceError as exc:
                log.warning("Keeping previous categories for %s: %s", record.sku, exc)
                warnings.append(f"categories not updated: {exc}")
            else:
                product.category_ids = category_ids

        if record.attributes:
            product.attributes = map_attributes(record.attributes)

        return warnings
