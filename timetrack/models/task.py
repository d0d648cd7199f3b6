"""Task ORM - a unit of work users log time against.

Invariants:
    - id is an autoincrement integer primary key
    - description is non-nullable text

Design Decisions:
    - No relationship() to intervals: the report path reads intervals through the
      interval store, never by walking from a task
"""

from datetime import datetime, timezone

from sqlalchemy import Integer, Text
from sqlalchemy.orm import Mapped, mapped_column

from timetrack.db.base import Base
from timetrack.db.types import UTCDateTime


class Task(Base):
    """Task entity."""
    __tablename__ = "tasks"

    id: Mapped[int] = mapped_column(
        Integer, primary_key=True, autoincrement=True,
    )
    description: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        UTCDateTime,
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
