"""Create students and notifications tables

Revision ID: 001
Revises: None
Create Date: 2024-03-04 00:00:00.000000+00:00

What:  Initial schema: `students` (one row per document request, unique per
       email and request type) and `notifications` (append-only record of
       "ready" emails).

Rollback: downgrade() drops both tables (all data lost).
"""

from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa

# revision identifiers
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "students",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column(
            "request_type",
            sa.String(32),
            nullable=False,
            comment="transcript or recommendation_letter",
        ),
        sa.Column(
            "request_ready",
            sa.Boolean(),
            nullable=False,
            server_default=sa.false(),
        ),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("email", "request_type", name="uq_students_email_request_type"),
    )

    # No foreign key on student_id: notification history outlives deleted requests
    op.create_table(
        "notifications",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("student_id", sa.Integer(), nullable=False),
        sa.Column("email_sent", sa.Boolean(), nullable=False),
        sa.Column(
            "sent_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.Column("request_type", sa.String(32), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_notifications_student_id", "notifications", ["student_id"])


def downgrade() -> None:
    op.drop_index("ix_notifications_student_id", table_name="notifications")
    op.drop_table("notifications")
    op.drop_table("students")
