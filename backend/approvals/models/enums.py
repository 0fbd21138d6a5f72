from __future__ import annotations

import enum


class RequestKind(enum.StrEnum):
    """What an employee is asking for."""

    LEAVE = "LEAVE"
    OVERTIME = "OVERTIME"


class LeaveType(enum.StrEnum):
    """Category of a leave request."""

    SICK = "SICK"
    PERSONAL = "PERSONAL"
    VACATION = "VACATION"
    MATERNITY = "MATERNITY"
    OTHER = "OTHER"


class LeaveFormat(enum.StrEnum):
    """Whole days, or half of a single day."""

    FULL_DAY = "FULL_DAY"
    MORNING_HALF = "MORNING_HALF"
    AFTERNOON_HALF = "AFTERNOON_HALF"

    @property
    def is_half_day(self) -> bool:
        return self is not LeaveFormat.FULL_DAY


class RequestStatus(enum.StrEnum):
    """Primary status resolved from a request's approval events."""

    WAITING = "WAITING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"
    CANCELED = "CANCELED"
    WITHDRAWN = "WITHDRAWN"


TERMINAL_STATUSES = frozenset({RequestStatus.REJECTED, RequestStatus.CANCELED, RequestStatus.WITHDRAWN})


class CancelState(enum.StrEnum):
    """Progress of the two-step cancellation of an approved request."""

    NONE = "NONE"
    PENDING = "PENDING"
    REJECTED = "REJECTED"
    APPROVED = "APPROVED"


class ApprovalEventType(enum.StrEnum):
    """Decision recorded in the approval log."""

    APPROVE = "approve"
    REJECT = "reject"
    REQUEST_CANCEL = "request_cancel"
    APPROVE_CANCEL = "approve_cancel"
    REJECT_CANCEL = "reject_cancel"
    WITHDRAWN = "withdrawn"


class ActorRole(enum.StrEnum):
    """Role label supplied by the identity provider."""

    EMPLOYEE = "employee"
    TEAM_LEAD = "team_lead"
    SUPERVISOR = "supervisor"
    ADMIN = "admin"
