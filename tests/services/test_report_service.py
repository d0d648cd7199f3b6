"""Report Aggregator service - range validation, snapshot read, accrual.

Invariants:
    - from > to raises before any storage access
    - Empty window returns [] without storage access
    - Open intervals accrue to the clock captured for the report
    - Repeated reports without Start/Stop are identical
"""

from datetime import datetime, timedelta, timezone

import pytest

from timetrack.core.domain_types import TaskDuration, TaskId, UserId
from timetrack.core.errors import (
    AlreadyStartedError, DatabaseError, InvalidTimeRangeError,
)
from timetrack.services.report_service import ReportAggregator
from timetrack.services.session_controller import SessionController

from tests.fakes import FixedClock, InMemoryIntervalStore, unavailable


def at(hour: int, minute: int = 0) -> datetime:
    return datetime(2024, 1, 1, hour, minute, tzinfo=timezone.utc)


USER = UserId(42)


@pytest.fixture
def store():
    return InMemoryIntervalStore()


@pytest.fixture
def clock():
    return FixedClock(at(10))


@pytest.fixture
def controller(store, clock):
    return SessionController(store, clock)


@pytest.fixture
def aggregator(store, clock):
    return ReportAggregator(store, clock)


async def _work(controller, clock, task, start, stop):
    clock.now = start
    await controller.start(USER, TaskId(task))
    clock.now = stop
    await controller.stop(USER, TaskId(task))


async def test_invalid_range_raises_before_storage(aggregator, store):
    with pytest.raises(InvalidTimeRangeError):
        await aggregator.report(USER, at(12), at(9))
    assert store.calls == []


async def test_empty_window_skips_storage(aggregator, store):
    assert await aggregator.report(USER, at(10), at(10)) == []
    assert store.calls == []


async def test_concrete_scenario(controller, aggregator, clock):
    clock.now = at(10)
    await controller.start(USER, TaskId(7))
    with pytest.raises(AlreadyStartedError):
        await controller.start(USER, TaskId(7))
    clock.now = at(10, 30)
    await controller.stop(USER, TaskId(7))

    rows = await aggregator.report(USER, at(9), at(12))
    assert rows == [TaskDuration(TaskId(7), timedelta(minutes=30))]


async def test_clipping_against_three_windows(controller, aggregator, clock):
    await _work(controller, clock, 1, at(10), at(11, 30))

    assert await aggregator.report(USER, at(9), at(12)) == [
        TaskDuration(TaskId(1), timedelta(minutes=90)),
    ]
    assert await aggregator.report(USER, at(10, 30), at(11)) == [
        TaskDuration(TaskId(1), timedelta(minutes=30)),
    ]
    assert await aggregator.report(USER, at(12), at(13)) == []


async def test_open_interval_accrues_to_now(controller, aggregator, clock):
    clock.now = at(10)
    await controller.start(USER, TaskId(1))
    clock.now = at(10, 45)
    assert await aggregator.report(USER, at(9), at(12)) == [
        TaskDuration(TaskId(1), timedelta(minutes=45)),
    ]
    clock.now = at(11)
    assert await aggregator.report(USER, at(9), at(12)) == [
        TaskDuration(TaskId(1), timedelta(hours=1)),
    ]


async def test_aggregation_and_ordering(controller, aggregator, clock):
    await _work(controller, clock, 2, at(9), at(9, 30))
    await _work(controller, clock, 1, at(10), at(11, 30))
    rows = await aggregator.report(USER, at(9), at(12))
    assert rows == [
        TaskDuration(TaskId(1), timedelta(minutes=90)),
        TaskDuration(TaskId(2), timedelta(minutes=30)),
    ]


async def test_tied_durations_ordered_by_task_id(controller, aggregator, clock):
    await _work(controller, clock, 5, at(9), at(9, 30))
    await _work(controller, clock, 3, at(10), at(10, 30))
    rows = await aggregator.report(USER, at(9), at(12))
    assert [r.task_id for r in rows] == [3, 5]


async def test_repeated_reports_are_identical(controller, aggregator, clock):
    await _work(controller, clock, 1, at(9), at(10))
    await _work(controller, clock, 2, at(10), at(10, 20))
    first = await aggregator.report(USER, at(9), at(12))
    second = await aggregator.report(USER, at(9), at(12))
    assert first == second


async def test_other_users_are_excluded(controller, aggregator, clock, store):
    await _work(controller, clock, 1, at(9), at(10))
    other = SessionController(store, clock)
    clock.now = at(9)
    await other.start(UserId(99), TaskId(1))
    clock.now = at(11)
    await other.stop(UserId(99), TaskId(1))
    rows = await aggregator.report(USER, at(9), at(12))
    assert rows == [TaskDuration(TaskId(1), timedelta(hours=1))]


async def test_storage_error_propagates(aggregator, store):
    store.fail_with = unavailable()
    with pytest.raises(DatabaseError):
        await aggregator.report(USER, at(9), at(12))
