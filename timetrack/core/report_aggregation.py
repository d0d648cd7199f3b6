"""Report Aggregation - pure clipping and summing of work intervals over a time window.

Invariants:
    - Window is half-open [start, end), start <= end, both timezone-aware
    - Each interval contributes min(E, end) - max(started_at, start), E = stopped_at or now
    - A negative contribution raises InvariantViolationError (never clamped to zero)
    - Rows sorted by total duration descending, then task_id ascending

Design Decisions:
    - Pure functions, no IO: the report service reads the store and passes a snapshot in
    - "now" is an argument: the caller fixes it once per report so every open interval
      accrues up to the same instant
    - An open interval whose accrual has not reached the window (now <= start) contributes
      nothing; only E < started_at is a violation
"""

from collections import defaultdict
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Iterable

from timetrack.core.domain_types import TaskDuration, TaskId, WorkInterval
from timetrack.core.errors import (
    ErrorContext, InvalidTimeRangeError, InvariantViolationError,
)


@dataclass(frozen=True)
class TimeWindow:
    """Half-open query window [start, end)."""
    start: datetime
    end: datetime

    @property
    def is_empty(self) -> bool:
        return self.start == self.end

    def overlaps(self, started_at: datetime, effective_end: datetime) -> bool:
        return started_at < self.end and effective_end > self.start


def check_time_range(window_from: datetime, window_to: datetime) -> TimeWindow:
    """Validate report bounds. Raises InvalidTimeRangeError."""
    if window_from.tzinfo is None or window_to.tzinfo is None:
        raise InvalidTimeRangeError("from and to must include a timezone")
    if window_from > window_to:
        raise InvalidTimeRangeError("from must not be after to")
    return TimeWindow(window_from, window_to)


def effective_end(interval: WorkInterval, now: datetime) -> datetime:
    if interval.stopped_at is not None:
        return interval.stopped_at
    return now


def clipped_duration(
    interval: WorkInterval, window: TimeWindow, now: datetime,
) -> timedelta | None:
    """Duration of interval inside window, or None if it does not overlap."""
    end = effective_end(interval, now)
    if end < interval.started_at:
        raise InvariantViolationError(
            f"Interval {interval.id} ends before it starts",
            ErrorContext(
                user_id=interval.user_id, task_id=interval.task_id,
                operation="report",
                debug_info={
                    "started_at": interval.started_at.isoformat(),
                    "effective_end": end.isoformat(),
                },
            ),
        )
    if not window.overlaps(interval.started_at, end):
        return None

    duration = min(end, window.end) - max(interval.started_at, window.start)
    if duration < timedelta(0):
        raise InvariantViolationError(
            f"Negative clipped duration for interval {interval.id}",
            ErrorContext(
                user_id=interval.user_id, task_id=interval.task_id,
                operation="report",
            ),
        )
    return duration


def aggregate_task_durations(
    intervals: Iterable[WorkInterval], window: TimeWindow, now: datetime,
) -> list[TaskDuration]:
    """Sum clipped durations per task. Pure, no IO."""
    totals: dict[TaskId, timedelta] = defaultdict(timedelta)
    for interval in intervals:
        duration = clipped_duration(interval, window, now)
        if duration is not None:
            totals[interval.task_id] += duration

    rows = [TaskDuration(task_id, total) for task_id, total in totals.items()]
    rows.sort(key=lambda r: (-r.duration, r.task_id))
    return rows
