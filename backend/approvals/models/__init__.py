from sqlmodel import SQLModel

from approvals.models.base import TimestampMixin, UUIDBase
from approvals.models.enums import (
    ActorRole,
    ApprovalEventType,
    CancelState,
    LeaveFormat,
    LeaveType,
    RequestKind,
    RequestStatus,
)
from approvals.models.event import ApprovalEvent
from approvals.models.request import ApprovalRequest

__all__ = [
    "ActorRole",
    "ApprovalEvent",
    "ApprovalEventType",
    "ApprovalRequest",
    "CancelState",
    "LeaveFormat",
    "LeaveType",
    "RequestKind",
    "RequestStatus",
    "SQLModel",
    "TimestampMixin",
    "UUIDBase",
]
