"""WorkInterval ORM - persisted span of time a user spent on a task.

Invariants:
    - At most one row per (user_id, task_id) with stopped_at IS NULL
      (partial unique index uq_work_intervals_open)
    - stopped_at, once set, is not before started_at (check constraint)
    - Rows are inserted open and closed exactly once; never deleted by the tracking code

Design Decisions:
    - Partial unique index over a status row locked FOR UPDATE: a racing duplicate
      start is rejected by the database itself, no pre-seeded row is needed
    - postgresql_where and sqlite_where both set: tests on SQLite enforce the same rule
"""

import uuid
from datetime import datetime

from sqlalchemy import CheckConstraint, ForeignKey, Index, Integer, text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from timetrack.db.base import Base
from timetrack.db.types import UTCDateTime

OPEN_INTERVAL_INDEX = "uq_work_intervals_open"


class WorkInterval(Base):
    """Work interval row. Open while stopped_at is NULL."""
    __tablename__ = "work_intervals"
    __table_args__ = (
        Index(
            OPEN_INTERVAL_INDEX, "user_id", "task_id", unique=True,
            postgresql_where=text("stopped_at IS NULL"),
            sqlite_where=text("stopped_at IS NULL"),
        ),
        Index("ix_work_intervals_user_started", "user_id", "started_at"),
        CheckConstraint(
            "stopped_at IS NULL OR stopped_at >= started_at",
            name="ck_work_intervals_stop_after_start",
        ),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    user_id: Mapped[int] = mapped_column(Integer, nullable=False)
    task_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("tasks.id", ondelete="CASCADE"), nullable=False,
    )
    started_at: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False)
    stopped_at: Mapped[datetime | None] = mapped_column(
        UTCDateTime, nullable=True,
    )
