"""API Dependencies - FastAPI providers for the clock, the interval store and services.

Invariants:
    - A fresh store and service per request: no interval state outlives a call
    - db_manager looked up at request time, so lifespan init and test patches both apply

Design Decisions:
    - Clock is its own dependency: tests override it to pin "now"
"""

from datetime import datetime
from typing import Callable

from fastapi import Depends

from timetrack.core.domain_types import utc_now
from timetrack.infrastructure import database
from timetrack.infrastructure.interval_store import SqlIntervalStore
from timetrack.services.report_service import ReportAggregator
from timetrack.services.session_controller import SessionController


def get_clock() -> Callable[[], datetime]:
    return utc_now


def get_interval_store() -> SqlIntervalStore:
    return SqlIntervalStore(database.get_db_manager())


def get_session_controller(
    store: SqlIntervalStore = Depends(get_interval_store),
    clock: Callable[[], datetime] = Depends(get_clock),
) -> SessionController:
    return SessionController(store, clock)


def get_report_aggregator(
    store: SqlIntervalStore = Depends(get_interval_store),
    clock: Callable[[], datetime] = Depends(get_clock),
) -> ReportAggregator:
    return ReportAggregator(store, clock)
