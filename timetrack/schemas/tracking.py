"""Tracking Schemas - work interval and report payloads at the API boundary.

Invariants:
    - Report bounds must carry a timezone (AwareDatetime); ordering is checked by the
      aggregator, not here, so it is reported as INVALID_TIME_RANGE
    - Durations rendered as total seconds plus whole hours/minutes

Design Decisions:
    - "from" is a Python keyword: exposed through a field alias
"""

from datetime import datetime, timedelta
from uuid import UUID

from pydantic import AwareDatetime, BaseModel, ConfigDict, Field

from timetrack.core.domain_types import SessionState, WorkInterval


class WorkIntervalResponse(BaseModel):
    id: UUID
    user_id: int
    task_id: int
    started_at: datetime
    stopped_at: datetime | None
    state: SessionState
    active: bool

    @classmethod
    def from_interval(cls, interval: WorkInterval) -> "WorkIntervalResponse":
        return cls(
            id=interval.id,
            user_id=interval.user_id,
            task_id=interval.task_id,
            started_at=interval.started_at,
            stopped_at=interval.stopped_at,
            state=interval.state,
            active=interval.state is SessionState.ACTIVE,
        )


class ReportRequest(BaseModel):
    """Half-open report window [from, to)."""
    model_config = ConfigDict(populate_by_name=True)

    window_from: AwareDatetime = Field(alias="from")
    window_to: AwareDatetime = Field(alias="to")


class ReportDuration(BaseModel):
    hours: int
    minutes: int

    @classmethod
    def from_timedelta(cls, duration: timedelta) -> "ReportDuration":
        total_minutes = int(duration.total_seconds()) // 60
        return cls(hours=total_minutes // 60, minutes=total_minutes % 60)


class ReportTaskRef(BaseModel):
    id: int
    description: str | None


class ReportTask(BaseModel):
    """One row of a user's report."""
    task: ReportTaskRef
    duration_seconds: float
    duration: ReportDuration
