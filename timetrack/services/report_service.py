"""Report Aggregator - per-task durations for a user over a half-open window.

Invariants:
    - Range validated before any storage access (InvalidTimeRangeError)
    - Exactly one snapshot read per report; "now" captured after it
    - Read-only: never writes to the store

Design Decisions:
    - Clipping and summing live in core/report_aggregation.py (pure); this class only
      sequences validate -> read -> aggregate
    - Empty window short-circuits to []: no time can be attributed to it
"""

import logging
from datetime import datetime
from typing import Callable

from timetrack.core.domain_types import TaskDuration, UserId, utc_now
from timetrack.core.repository_protocols import IntervalStore
from timetrack.core.report_aggregation import (
    aggregate_task_durations, check_time_range,
)

logger = logging.getLogger(__name__)


class ReportAggregator:
    """Computes duration reports from an IntervalStore snapshot."""

    def __init__(
        self, store: IntervalStore, clock: Callable[[], datetime] = utc_now,
    ):
        self.store = store
        self.clock = clock

    async def report(
        self, user_id: UserId, window_from: datetime, window_to: datetime,
    ) -> list[TaskDuration]:
        window = check_time_range(window_from, window_to)
        if window.is_empty:
            return []

        intervals = await self.store.intervals_overlapping(
            user_id, window.start, window.end,
        )
        rows = aggregate_task_durations(intervals, window, self.clock())
        logger.debug(
            f"Report built from {len(intervals)} intervals, {len(rows)} tasks",
            extra={"user_id": user_id, "operation": "report"},
        )
        return rows
