# ruff: noqa: TC003
from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time
from typing import TYPE_CHECKING

from approvals.exceptions import ValidationFailedError
from approvals.models.enums import LeaveFormat, RequestKind

if TYPE_CHECKING:
    from approvals.schemas.request import SubmitRequestPayload

HALF_DAY = 0.5


@dataclass(frozen=True)
class RequestPeriod:
    """Normalized period of a request plus its computed length."""

    start_date: date
    end_date: date
    leave_format: LeaveFormat | None = None
    start_time: time | None = None
    end_time: time | None = None
    total_days: float | None = None
    total_hours: float | None = None


def leave_days(start_date: date, end_date: date, leave_format: LeaveFormat = LeaveFormat.FULL_DAY) -> float:
    """Calendar days covered by a leave, inclusive; 0.5 for a half day."""
    if end_date < start_date:
        raise ValidationFailedError("end_date must not be before start_date")
    if leave_format.is_half_day:
        if end_date != start_date:
            raise ValidationFailedError("half-day leave must start and end on the same date")
        return HALF_DAY
    return float((end_date - start_date).days + 1)


def overtime_hours(start_time: time, end_time: time) -> float:
    """Hours between two times on the same day, rounded to two places."""
    if end_time <= start_time:
        raise ValidationFailedError("end_time must be after start_time")
    anchor = date.min
    elapsed = datetime.combine(anchor, end_time) - datetime.combine(anchor, start_time)
    return round(elapsed.total_seconds() / 3600, 2)


def period_for(payload: SubmitRequestPayload) -> RequestPeriod:
    """Build the stored period for a submit payload."""
    if payload.kind == RequestKind.LEAVE:
        if payload.start_date is None or payload.end_date is None:
            raise ValidationFailedError("leave requests require start_date and end_date")
        leave_format = payload.leave_format or LeaveFormat.FULL_DAY
        return RequestPeriod(
            start_date=payload.start_date,
            end_date=payload.end_date,
            leave_format=leave_format,
            total_days=leave_days(payload.start_date, payload.end_date, leave_format),
        )

    if payload.work_date is None or payload.start_time is None or payload.end_time is None:
        raise ValidationFailedError("overtime requests require work_date, start_time and end_time")
    return RequestPeriod(
        start_date=payload.work_date,
        end_date=payload.work_date,
        start_time=payload.start_time,
        end_time=payload.end_time,
        total_hours=overtime_hours(payload.start_time, payload.end_time),
    )
