"""SQL Interval Store under racing callers - the database arbitrates, not a pre-check.

Invariants:
    - Two starts on a fresh key: the unique open-interval index lets exactly one through
    - Two stops that both observed the open interval: the conditional close lets exactly
      one through, the other sees NotStartedError
    - A start rejected by the index is AlreadyStartedError even if the winner's interval
      is closed before the loser gets to look at the key again

Design Decisions:
    - LockstepStore forces the worst interleaving deterministically: every stop reads
      before any stop writes. Store calls are serialized because the in-memory SQLite
      database shares one connection between sessions
"""

import asyncio
from datetime import datetime, timezone

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from timetrack.core.domain_types import TaskId, UserId, WorkInterval
from timetrack.core.errors import AlreadyStartedError, NotStartedError
from timetrack.infrastructure.interval_store import SqlIntervalStore
from timetrack.services.session_controller import SessionController

from tests.fakes import FixedClock

USER = UserId(42)
TASK = TaskId(7)


class LockstepStore:
    """Delegates to a real store; readers wait for each other before returning."""

    def __init__(self, inner: SqlIntervalStore, readers: int):
        self.inner = inner
        self.readers = readers
        self._arrived = 0
        self._all_read = asyncio.Event()
        self._io = asyncio.Lock()

    async def open_interval(self, user_id, task_id):
        async with self._io:
            found = await self.inner.open_interval(user_id, task_id)
        self._arrived += 1
        if self._arrived >= self.readers:
            self._all_read.set()
        await self._all_read.wait()
        return found

    async def begin_interval(self, user_id, task_id, started_at):
        async with self._io:
            return await self.inner.begin_interval(user_id, task_id, started_at)

    async def close_interval(self, interval_id, stopped_at):
        async with self._io:
            return await self.inner.close_interval(interval_id, stopped_at)

    async def intervals_overlapping(self, user_id, window_from, window_to):
        async with self._io:
            return await self.inner.intervals_overlapping(
                user_id, window_from, window_to,
            )


@pytest.fixture
def clock():
    return FixedClock(datetime(2024, 1, 1, 10, tzinfo=timezone.utc))


async def test_racing_starts_one_wins(db_manager, clock):
    sql_store = SqlIntervalStore(db_manager)
    controller = SessionController(LockstepStore(sql_store, readers=2), clock)

    results = await asyncio.gather(
        controller.start(USER, TASK), controller.start(USER, TASK),
        return_exceptions=True,
    )

    assert sum(isinstance(r, WorkInterval) for r in results) == 1
    assert sum(isinstance(r, AlreadyStartedError) for r in results) == 1
    assert (await sql_store.open_interval(USER, TASK)) is not None


async def test_racing_stops_after_shared_read_one_wins(db_manager, clock):
    sql_store = SqlIntervalStore(db_manager)
    opened = await sql_store.begin_interval(USER, TASK, clock())
    controller = SessionController(LockstepStore(sql_store, readers=2), clock)

    results = await asyncio.gather(
        controller.stop(USER, TASK), controller.stop(USER, TASK),
        return_exceptions=True,
    )

    winners = [r for r in results if isinstance(r, WorkInterval)]
    assert len(winners) == 1
    assert winners[0].id == opened.id
    assert sum(isinstance(r, NotStartedError) for r in results) == 1
    assert await sql_store.open_interval(USER, TASK) is None


async def test_rejected_start_stays_refused_when_winner_stops_meanwhile(
    db_manager, clock, monkeypatch,
):
    sql_store = SqlIntervalStore(db_manager)
    controller = SessionController(sql_store, clock)
    winner = await controller.start(USER, TASK)

    # The stop lands right after the loser's insert is rolled back
    real_rollback = AsyncSession.rollback
    stopped: list[WorkInterval] = []

    async def rollback_then_stop(session):
        await real_rollback(session)
        if not stopped:
            stopped.append(await controller.stop(USER, TASK))

    monkeypatch.setattr(AsyncSession, "rollback", rollback_then_stop)

    with pytest.raises(AlreadyStartedError):
        await controller.start(USER, TASK)

    assert stopped[0].id == winner.id
    assert stopped[0].stopped_at is not None
    assert await sql_store.open_interval(USER, TASK) is None


async def test_start_start_stop_interleaved(db_manager, clock):
    sql_store = SqlIntervalStore(db_manager)
    controller = SessionController(LockstepStore(sql_store, readers=1), clock)

    first, second, stop = await asyncio.gather(
        controller.start(USER, TASK),
        controller.start(USER, TASK),
        controller.stop(USER, TASK),
        return_exceptions=True,
    )

    assert isinstance(first, WorkInterval)
    assert isinstance(second, AlreadyStartedError)
    if isinstance(stop, WorkInterval):
        assert stop.id == first.id
        assert await sql_store.open_interval(USER, TASK) is None
    else:
        assert isinstance(stop, NotStartedError)
        assert await sql_store.open_interval(USER, TASK) == first
