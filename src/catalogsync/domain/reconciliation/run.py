"""Drive one import pass over the vendor feed."""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

from catalogsync.domain.errors import MalformedFeed, PersistenceError, RecordError, TransportError

from .results import ImportSummary, RecordOutcome, RecordStatus

if TYPE_CHECKING:
    from collections.abc import Callable

    from catalogsync.domain.model import ProductRecord
    from catalogsync.domain.ports.fetching import FeedFetcher, FeedParser, ParsedItem
    from catalogsync.domain.ports.unit_of_work import CatalogUnitOfWork

    from .products import ProductReconciler

log = getLogger(__name__)


def _never_stop() -> bool:
    return False


@dataclass(slots=True)
class ImportRun:
    """Fetch, parse and reconcile every feed record in order.

    Feed-level failures end the run before any record is touched and are
    reported as ``summary.fatal_error``. Record failures are recorded and the
    run moves on. The time budget and ``should_stop`` are checked before each
    record and between gallery images.
    """

    fetch: FeedFetcher
    parse: FeedParser
    reconciler: ProductReconciler
    unit_of_work_factory: Callable[[], CatalogUnitOfWork]
    time_budget: float | None = None
    clock: Callable[[], float] = time.monotonic
    should_stop: Callable[[], bool] = _never_stop
    _deadline: float | None = field(default=None, init=False, repr=False)

    def execute(self) -> ImportSummary:
        summary = ImportSummary()
        self._deadline = None if self.time_budget is None else self.clock() + self.time_budget

        try:
            items = self.parse(self.fetch())
        except (TransportError, MalformedFeed) as exc:
            log.error("Import aborted before processing records: %s", exc)  # noqa: TRY400
            summary.fatal_error = f"{type(exc).__name__}: {exc}"
            summary.finish()
            return summary

        summary.records_seen = len(items)
        log.info("Feed contains %d record(s)", len(items))

        for index, item in enumerate(items):
            if self._halted():
                log.warning(
                    "Stopping early after %d of %d record(s)", len(summary.outcomes), len(items)
                )
                summary.stopped_early = True
                break
            summary.add(self._process(index, item))

        summary.finish()
        log.info(
            "Import finished: %d created, %d updated, %d skipped, %d failed",
            summary.created,
            summary.updated,
            summary.skipped,
            summary.failed,
        )
        return summary

    def _halted(self) -> bool:
        if self.should_stop():
            return True
        return self._deadline is not None and self.clock() >= self._deadline

    def _process(self, index: int, item: ParsedItem) -> RecordOutcome:
        if isinstance(item, RecordError):
            log.warning("Skipping record %s: %s", item.label, item.reason)
            return RecordOutcome(
                label=item.label,
                status=RecordStatus.SKIPPED,
                index=item.index if item.index is not None else index,
                reason=item.reason,
            )
        return self._reconcile(index, item)

    def _reconcile(self, index: int, record: ProductRecord) -> RecordOutcome:
        try:
            with self.unit_of_work_factory() as uow:
                outcome = self.reconciler.reconcile(record, uow, should_stop=self._halted)
        except PersistenceError as exc:
            log.warning("Record %s failed: %s", record.sku, exc)
            return RecordOutcome(
                label=record.sku, status=RecordStatus.FAILED, index=index, reason=str(exc)
            )
        except Exception as exc:  # noqa: BLE001
            log.exception("Unexpected error while reconciling %s", record.sku)
            return RecordOutcome(
                label=record.sku,
                status=RecordStatus.FAILED,
                index=index,
                reason=f"{type(exc).__name__}: {exc}",
            )
        log.debug("Record %s %s", record.sku, outcome.status.value)
        return RecordOutcome(
            label=outcome.label,
            status=outcome.status,
            index=index,
            warnings=outcome.warnings,
            media_errors=outcome.media_errors,
        )
