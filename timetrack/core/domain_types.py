"""Domain Types - identity wrappers and the WorkInterval value shared by core and shell.

Invariants:
    - UserId and TaskId wrap ints, IntervalId wraps a UUID: never bare primitives in domain logic
    - WorkInterval timestamps are timezone-aware UTC
    - WorkInterval is immutable: a stop produces a new value, never mutates the old one

Design Decisions:
    - NewType over dataclass wrappers: zero runtime cost, full type-checker support
    - WorkInterval is a frozen dataclass, not the ORM row: core never imports from shell
"""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import NewType
from uuid import UUID


# ─── Identity Types ──────────────────────────────────────────────

UserId = NewType("UserId", int)
TaskId = NewType("TaskId", int)
IntervalId = NewType("IntervalId", UUID)


# ─── Enums ───────────────────────────────────────────────────────

class SessionState(str, Enum):
    """Work-session state of a (user, task) key."""
    INACTIVE = "inactive"
    ACTIVE = "active"


# ─── Values ──────────────────────────────────────────────────────

@dataclass(frozen=True)
class SessionKey:
    """Unit of exclusivity: at most one open interval per key."""
    user_id: UserId
    task_id: TaskId


@dataclass(frozen=True)
class WorkInterval:
    """A span of time a user spent on a task. Open while stopped_at is None."""
    id: IntervalId
    user_id: UserId
    task_id: TaskId
    started_at: datetime
    stopped_at: datetime | None = None

    @property
    def key(self) -> SessionKey:
        return SessionKey(self.user_id, self.task_id)

    @property
    def state(self) -> SessionState:
        if self.stopped_at is None:
            return SessionState.ACTIVE
        return SessionState.INACTIVE

    @property
    def is_open(self) -> bool:
        return self.stopped_at is None


@dataclass(frozen=True)
class TaskDuration:
    """One report row: total in-window time spent on a task."""
    task_id: TaskId
    duration: timedelta


def utc_now() -> datetime:
    return datetime.now(timezone.utc)
