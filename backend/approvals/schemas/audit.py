# ruff: noqa: TC001
from __future__ import annotations

from pydantic import BaseModel

from approvals.models.enums import CancelState, RequestStatus
from approvals.schemas.request import EventResponse, RequestResponse


class AuditExportResponse(BaseModel):
    """Request history with its status recomputed from the approval log.

    ``request`` carries the cached status as stored; ``resolved_*`` is the
    authoritative value.
    """

    request: RequestResponse
    events: list[EventResponse]
    resolved_status: RequestStatus
    resolved_cancel_state: CancelState
    cache_consistent: bool


class RepairResponse(BaseModel):
    """Outcome of recomputing a request's cached status."""

    request: RequestResponse
    repaired: bool
    previous_status: str
    previous_cancel_state: str
