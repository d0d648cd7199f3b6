"""API test fixtures - FastAPI app over the per-test SQLite database.

Invariants:
    - get_db overridden to use the test session factory
    - db_manager patched so the interval store dependency reaches the test database
    - get_clock overridden with a FixedClock the test can move
"""

from datetime import datetime, timezone

import pytest
from httpx import ASGITransport, AsyncClient

import timetrack.infrastructure.database as db_module
from timetrack.api.dependencies import get_clock
from timetrack.infrastructure.database import get_db
from timetrack.main import app
from timetrack.models.task import Task as TaskModel

from tests.fakes import FixedClock


@pytest.fixture
def clock():
    return FixedClock(datetime(2024, 1, 1, 10, tzinfo=timezone.utc))


@pytest.fixture
async def client(test_session_factory, db_manager, clock):
    """FastAPI test client with DB and clock dependencies overridden."""
    async def override_get_db():
        async with test_session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_clock] = lambda: clock

    original_manager = db_module.db_manager
    db_module.db_manager = db_manager

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test",
    ) as c:
        yield c

    app.dependency_overrides.clear()
    db_module.db_manager = original_manager


@pytest.fixture
async def seed_tasks(test_db):
    """Insert tasks 1-8 with descriptions "Task <id>"."""
    tasks = [TaskModel(id=i, description=f"Task {i}") for i in range(1, 9)]
    test_db.add_all(tasks)
    await test_db.commit()
    return tasks
