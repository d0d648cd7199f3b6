"""Column Types - timezone-aware UTC timestamps on every backend.

Invariants:
    - Values bound to the database are converted to UTC
    - Values loaded from the database always carry tzinfo=UTC

Design Decisions:
    - TypeDecorator over DateTime(timezone=True) alone: SQLite has no timestamptz and
      hands back naive values, which cannot be compared with aware ones
"""

from datetime import datetime, timezone

from sqlalchemy import DateTime
from sqlalchemy.types import TypeDecorator


class UTCDateTime(TypeDecorator):
    """DateTime that rejects naive input and always returns aware UTC."""

    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value: datetime | None, dialect):
        if value is None:
            return None
        if value.tzinfo is None:
            raise ValueError("naive datetime cannot be stored as UTC")
        value = value.astimezone(timezone.utc)
        if dialect.name == "sqlite":
            return value.replace(tzinfo=None)
        return value

    def process_result_value(self, value: datetime | None, dialect):
        if value is None:
            return None
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)
