"""ORM Models - SQLAlchemy declarative models for all persisted entities.

Invariants:
    - All models inherit from Base (db/base.py)
    - WorkInterval rows reference tasks; users are opaque integer ids

Design Decisions:
    - One file per entity for locality
    - All models imported here so SQLAlchemy resolves string-based relationship()
      references before any query runs
"""

from timetrack.models.task import Task  # noqa: F401
from timetrack.models.work_interval import WorkInterval  # noqa: F401
