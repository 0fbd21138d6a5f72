# ruff: noqa: B008, TC001, TC003
from __future__ import annotations

import uuid
from datetime import date

from fastapi import APIRouter, Query, status

from approvals.api.deps import AuthDep
from approvals.db import SessionDep
from approvals.models.enums import RequestKind, RequestStatus
from approvals.schemas.request import (
    CancelRequestPayload,
    DecisionPayload,
    EventListResponse,
    RequestDetailResponse,
    RequestListResponse,
    RequestResponse,
    SubmitRequestPayload,
    UpdateRequestPayload,
    WithdrawPayload,
)
from approvals.services import workflow

requests_router = APIRouter(prefix="/requests", tags=["requests"])


@requests_router.post("", response_model=RequestResponse, status_code=status.HTTP_201_CREATED)
async def submit_request(
    payload: SubmitRequestPayload,
    session: SessionDep,
    auth: AuthDep,
) -> RequestResponse:
    """Submit a new leave or overtime request."""
    return await workflow.submit_request(session, auth, payload)


@requests_router.get("", response_model=RequestListResponse)
async def list_requests(
    session: SessionDep,
    auth: AuthDep,
    owner_id: uuid.UUID | None = Query(default=None),
    status_filter: RequestStatus | None = Query(default=None, alias="status"),
    kind: RequestKind | None = Query(default=None),
    date_from: date | None = Query(default=None, alias="from"),
    date_to: date | None = Query(default=None, alias="to"),
    offset: int = Query(default=0, ge=0),
    limit: int = Query(default=50, ge=1, le=100),
) -> RequestListResponse:
    """List requests with optional filters."""
    return await workflow.list_requests(
        session,
        auth,
        owner_id=owner_id,
        status=status_filter,
        kind=kind,
        date_from=date_from,
        date_to=date_to,
        offset=offset,
        limit=limit,
    )


@requests_router.get("/{request_id}", response_model=RequestDetailResponse)
async def get_request(
    request_id: uuid.UUID,
    session: SessionDep,
    auth: AuthDep,
) -> RequestDetailResponse:
    """Get a single request with its approval history."""
    return await workflow.get_request(session, auth, request_id)


@requests_router.patch("/{request_id}", response_model=RequestResponse)
async def update_request(
    request_id: uuid.UUID,
    payload: UpdateRequestPayload,
    session: SessionDep,
    auth: AuthDep,
) -> RequestResponse:
    """Edit a request that is still waiting for a decision."""
    return await workflow.update_request(session, auth, request_id, payload)


@requests_router.get("/{request_id}/events", response_model=EventListResponse)
async def list_request_events(
    request_id: uuid.UUID,
    session: SessionDep,
    auth: AuthDep,
) -> EventListResponse:
    """List a request's approval events in order."""
    return await workflow.list_request_events(session, auth, request_id)


@requests_router.post("/{request_id}/approve", response_model=RequestResponse)
async def approve_request(
    request_id: uuid.UUID,
    session: SessionDep,
    auth: AuthDep,
    payload: DecisionPayload | None = None,
) -> RequestResponse:
    """Approve a waiting request."""
    return await workflow.approve_request(session, auth, request_id, payload)


@requests_router.post("/{request_id}/reject", response_model=RequestResponse)
async def reject_request(
    request_id: uuid.UUID,
    session: SessionDep,
    auth: AuthDep,
    payload: DecisionPayload | None = None,
) -> RequestResponse:
    """Reject a waiting request."""
    return await workflow.reject_request(session, auth, request_id, payload)


@requests_router.post("/{request_id}/cancel-request", response_model=RequestResponse)
async def request_cancel(
    request_id: uuid.UUID,
    payload: CancelRequestPayload,
    session: SessionDep,
    auth: AuthDep,
) -> RequestResponse:
    """Ask to cancel an approved request."""
    return await workflow.request_cancel(session, auth, request_id, payload)


@requests_router.post("/{request_id}/cancel-approve", response_model=RequestResponse)
async def approve_cancel(
    request_id: uuid.UUID,
    session: SessionDep,
    auth: AuthDep,
    payload: DecisionPayload | None = None,
) -> RequestResponse:
    """Approve a pending cancellation."""
    return await workflow.approve_cancel(session, auth, request_id, payload)


@requests_router.post("/{request_id}/cancel-reject", response_model=RequestResponse)
async def reject_cancel(
    request_id: uuid.UUID,
    session: SessionDep,
    auth: AuthDep,
    payload: DecisionPayload | None = None,
) -> RequestResponse:
    """Reject a pending cancellation."""
    return await workflow.reject_cancel(session, auth, request_id, payload)


@requests_router.delete("/{request_id}", response_model=RequestResponse)
async def withdraw_request(
    request_id: uuid.UUID,
    session: SessionDep,
    auth: AuthDep,
    payload: WithdrawPayload | None = None,
) -> RequestResponse:
    """Withdraw a waiting request. The request and its history are kept."""
    return await workflow.withdraw_request(session, auth, request_id, payload)
