"""Tracking Routes - start and stop work on a task for a user.

Invariants:
    - Routes only bind path parameters and shape responses; transitions belong to
      SessionController
    - AlreadyStartedError / NotStartedError reach the global handler as 409
"""

from fastapi import APIRouter, Depends, status

from timetrack.api.dependencies import get_session_controller
from timetrack.core.domain_types import TaskId, UserId
from timetrack.schemas.tracking import WorkIntervalResponse
from timetrack.services.session_controller import SessionController

router = APIRouter(
    prefix="/api/v1/users/{user_id}/tasks/{task_id}", tags=["tracking"],
)


@router.post(
    "/start", response_model=WorkIntervalResponse,
    status_code=status.HTTP_201_CREATED,
)
async def start_task(
    user_id: int, task_id: int,
    controller: SessionController = Depends(get_session_controller),
):
    """Open a work interval for (user, task)."""
    interval = await controller.start(UserId(user_id), TaskId(task_id))
    return WorkIntervalResponse.from_interval(interval)


@router.post("/stop", response_model=WorkIntervalResponse)
async def stop_task(
    user_id: int, task_id: int,
    controller: SessionController = Depends(get_session_controller),
):
    """Close the open work interval for (user, task)."""
    interval = await controller.stop(UserId(user_id), TaskId(task_id))
    return WorkIntervalResponse.from_interval(interval)
