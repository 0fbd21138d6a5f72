# ruff: noqa: TC003
from __future__ import annotations

import uuid

import sqlalchemy as sa
from sqlmodel import Field

from approvals.models.base import TimestampMixin, UUIDBase


class ApprovalEvent(UUIDBase, TimestampMixin, table=True):
    """Append-only decision record. Never updated or deleted once written.

    ``sequence`` is allocated per request from ``approval_request.last_sequence``
    and breaks ties between events with equal ``created_at``.
    """

    __tablename__ = "approval_event"
    __table_args__ = (
        sa.Index("ix_event_request_order", "request_id", "created_at", "sequence"),
        sa.UniqueConstraint("request_id", "sequence", name="uq_event_request_sequence"),
    )

    request_id: uuid.UUID = Field(
        sa_column=sa.Column(sa.Uuid, sa.ForeignKey("approval_request.id"), nullable=False, index=True),
    )
    actor_id: uuid.UUID
    actor_role: str = Field(max_length=20)
    event_type: str = Field(max_length=30)
    comment: str | None = Field(default=None, sa_type=sa.Text)
    sequence: int
