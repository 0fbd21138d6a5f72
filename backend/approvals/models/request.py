# ruff: noqa: TC003
from __future__ import annotations

import uuid
from datetime import date, time
from typing import Any

import sqlalchemy as sa
from sqlmodel import Field

from approvals.models.base import TimestampMixin, UUIDBase
from approvals.models.enums import CancelState, RequestStatus


class ApprovalRequest(UUIDBase, TimestampMixin, table=True):
    """A leave or overtime submission with its cached workflow status.

    ``status`` and ``cancel_state`` are a denormalized copy of what the
    approval log resolves to. They are rewritten in the same transaction
    as every event append and are never authoritative.
    """

    __tablename__ = "approval_request"
    __table_args__ = (
        sa.Index("ix_request_owner_status", "owner_id", "status"),
        sa.Index("ix_request_period", "start_date", "end_date"),
        sa.UniqueConstraint("owner_id", "idempotency_key", name="uq_request_idempotency"),
    )

    kind: str = Field(max_length=20, index=True)
    owner_id: uuid.UUID = Field(index=True)
    submitted_by: uuid.UUID
    leave_type: str | None = Field(default=None, max_length=20)
    leave_format: str | None = Field(default=None, max_length=20)
    start_date: date
    end_date: date
    start_time: time | None = None
    end_time: time | None = None
    total_days: float | None = None
    total_hours: float | None = None
    reason: str = Field(sa_type=sa.Text)
    attachments: list[Any] | None = Field(default=None, sa_type=sa.JSON)
    status: str = Field(
        default=RequestStatus.WAITING, max_length=20, index=True, sa_column_kwargs={"server_default": "WAITING"}
    )
    cancel_state: str = Field(default=CancelState.NONE, max_length=20, sa_column_kwargs={"server_default": "NONE"})
    last_sequence: int = Field(default=0, sa_column_kwargs={"server_default": "0"})
    idempotency_key: str | None = Field(default=None, max_length=255)
