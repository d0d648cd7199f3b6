"""Task Routes - CRUD for the tasks users track time against.

Invariants:
    - Missing task -> ResourceNotFoundError (404 via global handler)
    - List ordered by id; limit 1-100 (default 50), offset >= 0
"""

import logging

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from timetrack.core.errors import ResourceNotFoundError
from timetrack.infrastructure.database import get_db
from timetrack.models.task import Task as TaskModel
from timetrack.schemas.task import TaskCreate, TaskResponse, TaskUpdate

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/tasks", tags=["tasks"])


async def get_task_or_404(task_id: int, db: AsyncSession) -> TaskModel:
    task = await db.get(TaskModel, task_id)
    if not task:
        raise ResourceNotFoundError("Task", str(task_id))
    return task


@router.post(
    "", response_model=TaskResponse, status_code=status.HTTP_201_CREATED,
)
async def create_task(body: TaskCreate, db: AsyncSession = Depends(get_db)):
    task = TaskModel(description=body.description)
    db.add(task)
    await db.commit()
    await db.refresh(task)
    logger.info("Task created", extra={"task_id": task.id})
    return task


@router.get("", response_model=list[TaskResponse])
async def list_tasks(
    limit: int = Query(50, ge=1, le=100),
    offset: int = Query(0, ge=0),
    db: AsyncSession = Depends(get_db),
):
    result = await db.execute(
        select(TaskModel).order_by(TaskModel.id).limit(limit).offset(offset),
    )
    return result.scalars().all()


@router.get("/{task_id}", response_model=TaskResponse)
async def get_task(task_id: int, db: AsyncSession = Depends(get_db)):
    return await get_task_or_404(task_id, db)


@router.patch("/{task_id}", response_model=TaskResponse)
async def update_task(
    task_id: int, body: TaskUpdate, db: AsyncSession = Depends(get_db),
):
    task = await get_task_or_404(task_id, db)
    if body.description is not None:
        task.description = body.description
    await db.commit()
    await db.refresh(task)
    return task


@router.delete("/{task_id}", response_model=TaskResponse)
async def delete_task(task_id: int, db: AsyncSession = Depends(get_db)):
    task = await get_task_or_404(task_id, db)
    deleted = TaskResponse.model_validate(task)
    await db.delete(task)
    await db.commit()
    logger.info("Task deleted", extra={"task_id": task_id})
    return deleted
