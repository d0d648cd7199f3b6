"""SQL Interval Store - IntervalStore implementation on SQLAlchemy async sessions.

Invariants:
    - Every primitive runs in its own session/transaction: all-or-nothing, rolled back on
      error or cancellation by DatabaseSessionManager
    - begin_interval relies on uq_work_intervals_open; a violation of that index is Conflict,
      any other integrity error is DatabaseError
    - close_interval is a conditional UPDATE (stopped_at IS NULL): at most one closer wins
    - Storage errors carry the primitive's name and the (user, task) key it was called with
    - No interval state cached between calls

Design Decisions:
    - Integrity errors classified by the violated constraint, never by re-reading: the key
      may be closed again between the rejected insert and any second read
    - ORM rows converted to frozen core WorkInterval values before leaving the store
"""

import logging
from datetime import datetime

from sqlalchemy import or_, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from timetrack.core.domain_types import (
    IntervalId, SessionKey, TaskId, UserId, WorkInterval,
)
from timetrack.core.errors import (
    DatabaseError, ErrorContext, InvariantViolationError,
)
from timetrack.core.repository_protocols import (
    BeginResult, CloseResult, Conflict, NotFound,
)
from timetrack.infrastructure.database import DatabaseSessionManager
from timetrack.models.work_interval import (
    OPEN_INTERVAL_INDEX, WorkInterval as WorkIntervalModel,
)

logger = logging.getLogger(__name__)

# SQLite reports unique violations by column list, not by index name
_SQLITE_OPEN_INTERVAL_MESSAGE = (
    "UNIQUE constraint failed: work_intervals.user_id, work_intervals.task_id"
)


def _to_domain(row: WorkIntervalModel) -> WorkInterval:
    return WorkInterval(
        id=IntervalId(row.id),
        user_id=UserId(row.user_id),
        task_id=TaskId(row.task_id),
        started_at=row.started_at,
        stopped_at=row.stopped_at,
    )


def violates_open_interval_index(error: IntegrityError) -> bool:
    """True when the rejected statement collided with uq_work_intervals_open.

    asyncpg raises UniqueViolationError (chained as __cause__ of the DBAPI
    adapter error) with constraint_name set; sqlite3 only gives a message.
    """
    for exc in (error.orig, getattr(error.orig, "__cause__", None)):
        if exc is None:
            continue
        if getattr(exc, "constraint_name", None) == OPEN_INTERVAL_INDEX:
            return True
        if _SQLITE_OPEN_INTERVAL_MESSAGE in str(exc):
            return True
    return False


class SqlIntervalStore:
    """Durable interval store backed by the work_intervals table."""

    def __init__(self, db: DatabaseSessionManager):
        self._db = db

    async def open_interval(
        self, user_id: UserId, task_id: TaskId,
    ) -> WorkInterval | None:
        context = ErrorContext(
            user_id=user_id, task_id=task_id, operation="open_interval",
        )
        async with self._db.session(context) as db:
            return await self._select_open(db, user_id, task_id)

    async def begin_interval(
        self, user_id: UserId, task_id: TaskId, started_at: datetime,
    ) -> BeginResult:
        context = ErrorContext(
            user_id=user_id, task_id=task_id, operation="begin_interval",
        )
        async with self._db.session(context) as db:
            row = WorkIntervalModel(
                user_id=user_id, task_id=task_id, started_at=started_at,
            )
            db.add(row)
            try:
                await db.commit()
            except IntegrityError as e:
                await db.rollback()
                if violates_open_interval_index(e):
                    return Conflict(SessionKey(user_id, task_id))
                logger.error(
                    f"Insert rejected: {e}",
                    extra={"user_id": user_id, "task_id": task_id},
                )
                raise DatabaseError(
                    "Integrity constraint violated", "begin_interval", context,
                ) from e
            return _to_domain(row)

    async def close_interval(
        self, interval_id: IntervalId, stopped_at: datetime,
    ) -> CloseResult:
        context = ErrorContext(
            operation="close_interval",
            debug_info={"interval_id": str(interval_id)},
        )
        async with self._db.session(context) as db:
            try:
                result = await db.execute(
                    update(WorkIntervalModel)
                    .where(WorkIntervalModel.id == interval_id)
                    .where(WorkIntervalModel.stopped_at.is_(None))
                    .values(stopped_at=stopped_at)
                    .execution_options(synchronize_session=False),
                )
            except IntegrityError as e:
                await db.rollback()
                raise DatabaseError(
                    "Integrity constraint violated", "close_interval", context,
                ) from e
            if result.rowcount == 0:
                await db.rollback()
                return NotFound(interval_id)
            row = await db.get(WorkIntervalModel, interval_id)
            await db.commit()
            return _to_domain(row)

    async def intervals_overlapping(
        self, user_id: UserId, window_from: datetime, window_to: datetime,
    ) -> list[WorkInterval]:
        context = ErrorContext(user_id=user_id, operation="intervals_overlapping")
        async with self._db.session(context) as db:
            result = await db.execute(
                select(WorkIntervalModel)
                .where(WorkIntervalModel.user_id == user_id)
                .where(WorkIntervalModel.started_at < window_to)
                .where(or_(
                    WorkIntervalModel.stopped_at.is_(None),
                    WorkIntervalModel.stopped_at > window_from,
                )),
            )
            return [_to_domain(row) for row in result.scalars().all()]

    async def _select_open(
        self, db: AsyncSession, user_id: UserId, task_id: TaskId,
    ) -> WorkInterval | None:
        result = await db.execute(
            select(WorkIntervalModel)
            .where(WorkIntervalModel.user_id == user_id)
            .where(WorkIntervalModel.task_id == task_id)
            .where(WorkIntervalModel.stopped_at.is_(None)),
        )
        rows = result.scalars().all()
        if len(rows) > 1:
            raise InvariantViolationError(
                f"{len(rows)} open intervals for one key",
                ErrorContext(
                    user_id=user_id, task_id=task_id, operation="open_interval",
                ),
            )
        return _to_domain(rows[0]) if rows else None
