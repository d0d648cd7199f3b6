"""Boundary Protocols - contracts between core and shell.

Invariants:
    - Core NEVER imports from shell: dependency arrows point inward only
    - begin_interval / close_interval are atomic per key and report races as tagged results
    - intervals_overlapping is a single snapshot read (finite, unordered)

Design Decisions:
    - Protocol over ABC: structural subtyping, the SQL store and test fakes need no common base
    - Conflict / NotFound returned, not raised: the caller branches on a value, so the
      session controller stays agnostic of how the store detects the race
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Protocol

from timetrack.core.domain_types import (
    IntervalId, SessionKey, TaskId, UserId, WorkInterval,
)


@dataclass(frozen=True)
class Conflict:
    """begin_interval lost: the key already has an open interval."""
    key: SessionKey


@dataclass(frozen=True)
class NotFound:
    """close_interval lost: the interval is gone or already closed."""
    interval_id: IntervalId


BeginResult = WorkInterval | Conflict
CloseResult = WorkInterval | NotFound


class IntervalStore(Protocol):
    """Contract for work interval persistence - implemented by shell."""

    async def open_interval(
        self, user_id: UserId, task_id: TaskId,
    ) -> WorkInterval | None: ...

    async def begin_interval(
        self, user_id: UserId, task_id: TaskId, started_at: datetime,
    ) -> BeginResult: ...

    async def close_interval(
        self, interval_id: IntervalId, stopped_at: datetime,
    ) -> CloseResult: ...

    async def intervals_overlapping(
        self, user_id: UserId, window_from: datetime, window_to: datetime,
    ) -> list[WorkInterval]: ...
