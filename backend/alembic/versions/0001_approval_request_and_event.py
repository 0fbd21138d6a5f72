"""Create approval_request and approval_event tables.

Revision ID: 0001
Revises:
Create Date: 2026-10-19
"""

from __future__ import annotations

import sqlalchemy as sa

from alembic import op

revision = "0001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "approval_request",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("kind", sa.String(length=20), nullable=False),
        sa.Column("owner_id", sa.Uuid(), nullable=False),
        sa.Column("submitted_by", sa.Uuid(), nullable=False),
        sa.Column("leave_type", sa.String(length=20), nullable=True),
        sa.Column("leave_format", sa.String(length=20), nullable=True),
        sa.Column("start_date", sa.Date(), nullable=False),
        sa.Column("end_date", sa.Date(), nullable=False),
        sa.Column("start_time", sa.Time(), nullable=True),
        sa.Column("end_time", sa.Time(), nullable=True),
        sa.Column("total_days", sa.Float(), nullable=True),
        sa.Column("total_hours", sa.Float(), nullable=True),
        sa.Column("reason", sa.Text(), nullable=False),
        sa.Column("attachments", sa.JSON(), nullable=True),
        sa.Column("status", sa.String(length=20), server_default="WAITING", nullable=False),
        sa.Column("cancel_state", sa.String(length=20), server_default="NONE", nullable=False),
        sa.Column("last_sequence", sa.Integer(), server_default="0", nullable=False),
        sa.Column("idempotency_key", sa.String(length=255), nullable=True),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("owner_id", "idempotency_key", name="uq_request_idempotency"),
    )
    op.create_index("ix_approval_request_kind", "approval_request", ["kind"])
    op.create_index("ix_approval_request_owner_id", "approval_request", ["owner_id"])
    op.create_index("ix_approval_request_status", "approval_request", ["status"])
    op.create_index("ix_request_owner_status", "approval_request", ["owner_id", "status"])
    op.create_index("ix_request_period", "approval_request", ["start_date", "end_date"])

    op.create_table(
        "approval_event",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("request_id", sa.Uuid(), nullable=False),
        sa.Column("actor_id", sa.Uuid(), nullable=False),
        sa.Column("actor_role", sa.String(length=20), nullable=False),
        sa.Column("event_type", sa.String(length=30), nullable=False),
        sa.Column("comment", sa.Text(), nullable=True),
        sa.Column("sequence", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.ForeignKeyConstraint(["request_id"], ["approval_request.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("request_id", "sequence", name="uq_event_request_sequence"),
    )
    op.create_index("ix_approval_event_request_id", "approval_event", ["request_id"])
    op.create_index("ix_event_request_order", "approval_event", ["request_id", "created_at", "sequence"])


def downgrade() -> None:
    op.drop_index("ix_event_request_order", table_name="approval_event")
    op.drop_index("ix_approval_event_request_id", table_name="approval_event")
    op.drop_table("approval_event")
    op.drop_index("ix_request_period", table_name="approval_request")
    op.drop_index("ix_request_owner_status", table_name="approval_request")
    op.drop_index("ix_approval_request_status", table_name="approval_request")
    op.drop_index("ix_approval_request_owner_id", table_name="approval_request")
    op.drop_index("ix_approval_request_kind", table_name="approval_request")
    op.drop_table("approval_request")
