"""Per-record outcomes and the aggregated import summary."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from enum import StrEnum
from typing import TYPE_CHECKING

from catalogsync.domain.model import utcnow

if TYPE_CHECKING:
    from datetime import datetime


class RecordStatus(StrEnum):
    CREATED = "created"
    UPDATED = "updated"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass(frozen=True, slots=True, kw_only=True)
class RecordOutcome:
    """What happened to one feed entry. ``label`` is the SKU, or ``#index`` without one."""

    label: str
    status: RecordStatus
    index: int | None = None
    reason: str | None = None
    warnings: tuple[str, ...] = ()
    media_errors: tuple[str, ...] = ()


@dataclass(slots=True, kw_only=True)
class ImportSummary:
    """Structured result of one import run."""

    started_at: datetime = field(default_factory=utcnow)
    finished_at: datetime | None = None
    records_seen: int = 0
    outcomes: list[RecordOutcome] = field(default_factory=list[RecordOutcome])
    fatal_error: str | None = None
    stopped_early: bool = False

    def add(self, outcome: RecordOutcome) -> None:
        self.outcomes.append(outcome)

    def finish(self) -> None:
        self.finished_at = utcnow()

    def count(self, status: RecordStatus) -> int:
        return sum(1 for outcome in self.outcomes if outcome.status is status)

    @property
    def created(self) -> int:
        return self.count(RecordStatus.CREATED)

    @property
    def updated(self) -> int:
        return self.count(RecordStatus.UPDATED)

    @property
    def skipped(self) -> int:
        return self.count(RecordStatus.SKIPPED)

    @property
    def failed(self) -> int:
        return self.count(RecordStatus.FAILED)

    @property
    def media_errors(self) -> int:
        return sum(len(outcome.media_errors) for outcome in self.outcomes)

    @property
    def succeeded(self) -> bool:
        return self.fatal_error is None

    def as_dict(self) -> dict[str, object]:
        counts = Counter(outcome.status for outcome in self.outcomes)
        return {
            "started_at": self.started_at.isoformat(),
            "finished_at": self.finished_at.isoformat() if self.finished_at else None,
            "records_seen": self.records_seen,
            "processed": len(self.outcomes),
            "counts": {status.value: counts.get(status, 0) for status in RecordStatus},
            "media_errors": self.media_errors,
            "fatal_error": self.fatal_error,
            "stopped_early": self.stopped_early,
            "problems": [
                {"record": outcome.label, "status": outcome.status.value, "reason": outcome.reason}
                for outcome in self.outcomes
                if outcome.status in {RecordStatus.SKIPPED, RecordStatus.FAILED}
            ],
        }
