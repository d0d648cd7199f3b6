"""Initial schema - tasks and work_intervals.

Revision ID: 001_initial
Revises: None
Create Date: 2024-01-01

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import UUID

revision: str = "001_initial"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "tasks",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("description", sa.Text, nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )

    op.create_table(
        "work_intervals",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("user_id", sa.Integer, nullable=False),
        sa.Column(
            "task_id", sa.Integer,
            sa.ForeignKey("tasks.id", ondelete="CASCADE"), nullable=False,
        ),
        sa.Column("started_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("stopped_at", sa.DateTime(timezone=True), nullable=True),
        sa.CheckConstraint(
            "stopped_at IS NULL OR stopped_at >= started_at",
            name="ck_work_intervals_stop_after_start",
        ),
    )
    # At most one open interval per (user, task)
    op.create_index(
        "uq_work_intervals_open", "work_intervals", ["user_id", "task_id"],
        unique=True,
        postgresql_where=sa.text("stopped_at IS NULL"),
        sqlite_where=sa.text("stopped_at IS NULL"),
    )
    op.create_index(
        "ix_work_intervals_user_started", "work_intervals",
        ["user_id", "started_at"],
    )


def downgrade() -> None:
    op.drop_index("ix_work_intervals_user_started", table_name="work_intervals")
    op.drop_index("uq_work_intervals_open", table_name="work_intervals")
    op.drop_table("work_intervals")
    op.drop_table("tasks")
