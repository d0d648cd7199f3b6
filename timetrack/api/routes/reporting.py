"""Reporting Routes - per-task duration report for a user.

Invariants:
    - Row order is the aggregator's order (duration desc, task id asc); never re-sorted here
    - Rows for tasks that no longer exist keep their id with a null description
"""

from fastapi import APIRouter, Depends
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from timetrack.api.dependencies import get_report_aggregator
from timetrack.core.domain_types import UserId
from timetrack.infrastructure.database import get_db
from timetrack.models.task import Task as TaskModel
from timetrack.schemas.tracking import (
    ReportDuration, ReportRequest, ReportTask, ReportTaskRef,
)
from timetrack.services.report_service import ReportAggregator

router = APIRouter(prefix="/api/v1/users", tags=["reporting"])


async def _task_descriptions(
    db: AsyncSession, task_ids: list[int],
) -> dict[int, str]:
    if not task_ids:
        return {}
    result = await db.execute(
        select(TaskModel.id, TaskModel.description)
        .where(TaskModel.id.in_(task_ids)),
    )
    return {row.id: row.description for row in result}


@router.post("/{user_id}/report", response_model=list[ReportTask])
async def report(
    user_id: int,
    body: ReportRequest,
    aggregator: ReportAggregator = Depends(get_report_aggregator),
    db: AsyncSession = Depends(get_db),
):
    """Report time spent per task within [from, to)."""
    rows = await aggregator.report(
        UserId(user_id), body.window_from, body.window_to,
    )
    descriptions = await _task_descriptions(db, [r.task_id for r in rows])
    return [
        ReportTask(
            task=ReportTaskRef(
                id=r.task_id, description=descriptions.get(r.task_id),
            ),
            duration_seconds=r.duration.total_seconds(),
            duration=ReportDuration.from_timedelta(r.duration),
        )
        for r in rows
    ]
