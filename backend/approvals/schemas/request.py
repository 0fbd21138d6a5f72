# ruff: noqa: TC001, TC003
from __future__ import annotations

import uuid
from datetime import date, datetime, time
from typing import Self

from pydantic import BaseModel, Field, field_validator, model_validator

from approvals.models.enums import CancelState, LeaveFormat, LeaveType, RequestKind, RequestStatus

# ---------------------------------------------------------------------------
# Request payloads
# ---------------------------------------------------------------------------


class SubmitRequestPayload(BaseModel):
    """Request body for submitting a leave or overtime request.

    Leave requests need ``leave_type``, ``start_date`` and ``end_date``;
    ``leave_format`` defaults to whole days and a half day covers one date.
    Overtime requests need ``work_date``, ``start_time`` and ``end_time``.
    ``owner_id`` defaults to the submitting actor.
    """

    kind: RequestKind
    owner_id: uuid.UUID | None = None
    leave_type: LeaveType | None = None
    leave_format: LeaveFormat | None = None
    start_date: date | None = None
    end_date: date | None = None
    work_date: date | None = None
    start_time: time | None = None
    end_time: time | None = None
    reason: str = Field(max_length=2000)
    attachments: list[str] = Field(default_factory=list, max_length=10)
    idempotency_key: str | None = Field(default=None, max_length=255)

    @field_validator("reason")
    @classmethod
    def _reason_not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            msg = "reason is required"
            raise ValueError(msg)
        return value

    @model_validator(mode="after")
    def _validate_period(self) -> Self:
        if self.kind == RequestKind.LEAVE:
            if self.leave_type is None or self.start_date is None or self.end_date is None:
                msg = "leave requests require leave_type, start_date and end_date"
                raise ValueError(msg)
            if self.end_date < self.start_date:
                msg = "end_date must not be before start_date"
                raise ValueError(msg)
            if self.leave_format is not None and self.leave_format.is_half_day and self.end_date != self.start_date:
                msg = "half-day leave must start and end on the same date"
                raise ValueError(msg)
        else:
            if self.work_date is None or self.start_time is None or self.end_time is None:
                msg = "overtime requests require work_date, start_time and end_time"
                raise ValueError(msg)
            if self.end_time <= self.start_time:
                msg = "end_time must be after start_time"
                raise ValueError(msg)
        return self


class DecisionPayload(BaseModel):
    """Request body for approve/reject and the cancel decisions."""

    comment: str | None = Field(default=None, max_length=1000)


class CancelRequestPayload(BaseModel):
    """Request body for asking to cancel an approved request."""

    reason: str = Field(min_length=1, max_length=1000)

    @field_validator("reason")
    @classmethod
    def _reason_not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            msg = "reason is required"
            raise ValueError(msg)
        return value


class WithdrawPayload(BaseModel):
    """Optional body for withdrawing a waiting request."""

    comment: str | None = Field(default=None, max_length=1000)


class UpdateRequestPayload(BaseModel):
    """Partial edit of a waiting request. Omitted fields keep their stored value.

    The kind and owner of a request never change.
    """

    leave_type: LeaveType | None = None
    leave_format: LeaveFormat | None = None
    start_date: date | None = None
    end_date: date | None = None
    work_date: date | None = None
    start_time: time | None = None
    end_time: time | None = None
    reason: str | None = Field(default=None, max_length=2000)
    attachments: list[str] | None = Field(default=None, max_length=10)

    @field_validator("reason")
    @classmethod
    def _reason_not_blank(cls, value: str | None) -> str | None:
        if value is None:
            return None
        value = value.strip()
        if not value:
            msg = "reason is required"
            raise ValueError(msg)
        return value

    @model_validator(mode="after")
    def _has_changes(self) -> Self:
        if not self.model_fields_set:
            msg = "no fields to update"
            raise ValueError(msg)
        return self


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class EventResponse(BaseModel):
    """One entry of a request's approval history."""

    id: uuid.UUID
    request_id: uuid.UUID
    actor_id: uuid.UUID
    actor_role: str
    event_type: str
    comment: str | None
    sequence: int
    created_at: datetime


class EventListResponse(BaseModel):
    """Ordered approval history of a request."""

    items: list[EventResponse]
    total: int


class RequestResponse(BaseModel):
    """Response schema for a single request."""

    id: uuid.UUID
    kind: RequestKind
    owner_id: uuid.UUID
    submitted_by: uuid.UUID
    leave_type: LeaveType | None
    leave_format: LeaveFormat | None
    start_date: date
    end_date: date
    start_time: time | None
    end_time: time | None
    total_days: float | None
    total_hours: float | None
    reason: str
    attachments: list[str]
    status: RequestStatus
    cancel_state: CancelState
    status_label: str
    idempotency_key: str | None
    created_at: datetime


class RequestDetailResponse(RequestResponse):
    """A request with its status recomputed from the log and its full history."""

    events: list[EventResponse]


class RequestListResponse(BaseModel):
    """Paginated list of requests."""

    items: list[RequestResponse]
    total: int
