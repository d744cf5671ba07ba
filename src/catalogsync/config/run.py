"""Resource limits for a batch import run."""

from __future__ import annotations

from dataclasses import dataclass

from .env import optional_float_env, optional_int_env

TIME_BUDGET_ENV = "CATALOGSYNC_TIME_BUDGET"
MEMORY_LIMIT_ENV = "CATALOGSYNC_MEMORY_LIMIT_MB"
DEFAULT_MEMORY_LIMIT_MB = 1024


@dataclass(frozen=True, slots=True)
class RunLimits:
    # None means unbounded
    time_budget_seconds: float | None = None
    memory_limit_mb: int | None = DEFAULT_MEMORY_LIMIT_MB


def get_run_limits(
    *,
    time_budget_seconds: float | None = None,
    memory_limit_mb: int | None = None,
) -> RunLimits:
    return RunLimits(
        time_budget_seconds=(
            time_budget_seconds
            if time_budget_seconds is not None
            else optional_float_env(TIME_BUDGET_ENV, None)
        ),
        memory_limit_mb=(
            memory_limit_mb
            if memory_limit_mb is not None
            else optional_int_env(MEMORY_LIMIT_ENV, DEFAULT_MEMORY_LIMIT_MB)
        ),
    )
