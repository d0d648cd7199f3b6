"""Session Controller - Start/Stop transitions for a (user, task) key.

Invariants:
    - At most one open interval per (user, task), under any interleaving of callers
    - start: Inactive -> Active, else AlreadyStartedError
    - stop: Active -> Inactive, else NotStartedError
    - Storage errors propagate with the (user, task) key attached; nothing is retried here

Design Decisions:
    - Compare-and-act delegated to the store (unique open-interval index, conditional
      close): keys never contend with each other and no process-wide lock exists
    - Store races come back as Conflict / NotFound values and are mapped to domain errors
    - Clock injected: timestamps come from the application, tests pin them
"""

import logging
from contextlib import contextmanager
from datetime import datetime
from typing import Callable, Iterator

from timetrack.core.domain_types import TaskId, UserId, WorkInterval, utc_now
from timetrack.core.errors import (
    AlreadyStartedError, DatabaseError, NotStartedError,
)
from timetrack.core.repository_protocols import Conflict, IntervalStore, NotFound

logger = logging.getLogger(__name__)


@contextmanager
def _keyed_storage_errors(user_id: UserId, task_id: TaskId) -> Iterator[None]:
    """Fill in the key on DatabaseErrors from primitives that only see an interval id."""
    try:
        yield
    except DatabaseError as e:
        if e.context.user_id is None:
            e.context.user_id = user_id
        if e.context.task_id is None:
            e.context.task_id = task_id
        raise


class SessionController:
    """Enacts work-session transitions against an IntervalStore."""

    def __init__(
        self, store: IntervalStore, clock: Callable[[], datetime] = utc_now,
    ):
        self.store = store
        self.clock = clock

    async def start(self, user_id: UserId, task_id: TaskId) -> WorkInterval:
        """Open a new interval for the key. Raises AlreadyStartedError."""
        with _keyed_storage_errors(user_id, task_id):
            result = await self.store.begin_interval(
                user_id, task_id, self.clock(),
            )
        if isinstance(result, Conflict):
            logger.info(
                "Start refused: task already started",
                extra={"user_id": user_id, "task_id": task_id},
            )
            raise AlreadyStartedError(user_id, task_id)

        logger.info(
            "Work started",
            extra={
                "user_id": user_id, "task_id": task_id,
                "interval_id": result.id,
            },
        )
        return result

    async def stop(self, user_id: UserId, task_id: TaskId) -> WorkInterval:
        """Close the key's open interval. Raises NotStartedError."""
        with _keyed_storage_errors(user_id, task_id):
            interval = await self.store.open_interval(user_id, task_id)
        if interval is None:
            logger.info(
                "Stop refused: task not started",
                extra={"user_id": user_id, "task_id": task_id},
            )
            raise NotStartedError(user_id, task_id)

        with _keyed_storage_errors(user_id, task_id):
            result = await self.store.close_interval(interval.id, self.clock())
        if isinstance(result, NotFound):
            # A concurrent stop closed it between the read and the update.
            logger.info(
                "Stop refused: interval closed concurrently",
                extra={
                    "user_id": user_id, "task_id": task_id,
                    "interval_id": interval.id,
                },
            )
            raise NotStartedError(user_id, task_id)

        logger.info(
            "Work stopped",
            extra={
                "user_id": user_id, "task_id": task_id,
                "interval_id": result.id,
            },
        )
        return result
