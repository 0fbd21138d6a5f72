# ruff: noqa: TC003
"""Workflow controller: the only writer of approval events.

Every transition runs as one transaction:

1. Claim the request row (row lock + next event sequence).
2. Load its events and resolve the current status.
3. Refuse terminal requests, then check the actor's capability, then the
   status guard.
4. Append exactly one event.
5. Resolve again and store the cached status.
6. Commit, then fire notifications.

Guard or capability failures roll the transaction back, so a refused
transition leaves no trace. Storage failures roll back and surface as
``StorageError``. Editing a waiting request takes the same row lock but
appends no event.
"""

from __future__ import annotations

import logging
import uuid
from contextlib import asynccontextmanager
from dataclasses import dataclass
from datetime import date
from typing import TYPE_CHECKING, Any

from pydantic import ValidationError
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from approvals.config import get_settings
from approvals.exceptions import (
    AppError,
    ForbiddenError,
    IdempotencyConflictError,
    InvalidStateError,
    StorageError,
    ValidationFailedError,
)
from approvals.models.enums import ApprovalEventType, CancelState, RequestKind, RequestStatus
from approvals.models.request import ApprovalRequest
from approvals.schemas.request import (
    EventListResponse,
    EventResponse,
    RequestDetailResponse,
    RequestListResponse,
    RequestResponse,
    SubmitRequestPayload,
)
from approvals.services import approval_log, request_store
from approvals.services.capabilities import Capability, can, require
from approvals.services.duration import RequestPeriod, period_for
from approvals.services.notification import RequestNotification, dispatch_notification
from approvals.services.presentation import status_label
from approvals.services.status import INITIAL_STATUS, ResolvedStatus, resolve

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Callable

    from sqlalchemy.ext.asyncio import AsyncSession

    from approvals.models.event import ApprovalEvent
    from approvals.schemas.auth import AuthContext
    from approvals.schemas.request import (
        CancelRequestPayload,
        DecisionPayload,
        UpdateRequestPayload,
        WithdrawPayload,
    )

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Transition table
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Transition:
    """One guarded workflow step."""

    event_type: ApprovalEventType
    capability: Capability
    guard: Callable[[ResolvedStatus], bool]
    refusal: str
    notify: bool = False


def _is_waiting(current: ResolvedStatus) -> bool:
    return current.status == RequestStatus.WAITING


def _may_request_cancel(current: ResolvedStatus) -> bool:
    return current.status == RequestStatus.APPROVED and current.cancel_state in (
        CancelState.NONE,
        CancelState.REJECTED,
    )


def _cancel_pending(current: ResolvedStatus) -> bool:
    return current.status == RequestStatus.APPROVED and current.cancel_state == CancelState.PENDING


TRANSITIONS: dict[ApprovalEventType, Transition] = {
    ApprovalEventType.APPROVE: Transition(
        ApprovalEventType.APPROVE,
        Capability.DECIDE,
        _is_waiting,
        "Only waiting requests can be approved",
        notify=True,
    ),
    ApprovalEventType.REJECT: Transition(
        ApprovalEventType.REJECT,
        Capability.DECIDE,
        _is_waiting,
        "Only waiting requests can be rejected",
    ),
    ApprovalEventType.REQUEST_CANCEL: Transition(
        ApprovalEventType.REQUEST_CANCEL,
        Capability.REQUEST_CANCEL,
        _may_request_cancel,
        "Cancellation can only be requested for an approved request with no cancellation in progress",
    ),
    ApprovalEventType.APPROVE_CANCEL: Transition(
        ApprovalEventType.APPROVE_CANCEL,
        Capability.DECIDE_CANCEL,
        _cancel_pending,
        "There is no pending cancellation to approve",
        notify=True,
    ),
    ApprovalEventType.REJECT_CANCEL: Transition(
        ApprovalEventType.REJECT_CANCEL,
        Capability.DECIDE_CANCEL,
        _cancel_pending,
        "There is no pending cancellation to reject",
    ),
    ApprovalEventType.WITHDRAWN: Transition(
        ApprovalEventType.WITHDRAWN,
        Capability.WITHDRAW,
        _is_waiting,
        "Only waiting requests can be withdrawn",
    ),
}


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def build_event_response(event: ApprovalEvent) -> EventResponse:
    """Map an event model to its response schema."""
    return EventResponse(
        id=event.id,
        request_id=event.request_id,
        actor_id=event.actor_id,
        actor_role=event.actor_role,
        event_type=event.event_type,
        comment=event.comment,
        sequence=event.sequence,
        created_at=event.created_at,
    )


def build_request_response(request: ApprovalRequest, resolved: ResolvedStatus | None = None) -> RequestResponse:
    """Map a request model to its response schema.

    Without ``resolved`` the cached status columns are reported.
    """
    if resolved is None:
        resolved = ResolvedStatus(RequestStatus(request.status), CancelState(request.cancel_state))
    return RequestResponse(
        id=request.id,
        kind=RequestKind(request.kind),
        owner_id=request.owner_id,
        submitted_by=request.submitted_by,
        leave_type=request.leave_type,  # type: ignore[arg-type]
        leave_format=request.leave_format,  # type: ignore[arg-type]
        start_date=request.start_date,
        end_date=request.end_date,
        start_time=request.start_time,
        end_time=request.end_time,
        total_days=request.total_days,
        total_hours=request.total_hours,
        reason=request.reason,
        attachments=list(request.attachments or []),
        status=resolved.status,
        cancel_state=resolved.cancel_state,
        status_label=status_label(resolved.status, resolved.cancel_state, get_settings().display_locale),
        idempotency_key=request.idempotency_key,
        created_at=request.created_at,
    )


@asynccontextmanager
async def write_transaction(session: AsyncSession) -> AsyncIterator[None]:
    """Commit on success; roll back on any failure.

    Domain errors are re-raised unchanged. Storage errors become ``StorageError``.
    """
    try:
        yield
        await session.commit()
    except AppError:
        await session.rollback()
        raise
    except SQLAlchemyError as exc:
        await session.rollback()
        logger.exception("Storage failure, transaction rolled back")
        raise StorageError from exc


def _refusal(
    action: str,
    refusal: str,
    request: ApprovalRequest,
    auth: AuthContext,
    current: ResolvedStatus,
) -> InvalidStateError:
    logger.info("Refused %s on request %s by %s: status is %s", action, request.id, auth.user_id, current.describe())
    return InvalidStateError(f"{refusal}; request is {current.describe()}", current.status, current.cancel_state)


def _period_columns(payload: SubmitRequestPayload, period: RequestPeriod) -> dict[str, Any]:
    """Column values a request stores for its kind and period."""
    return {
        "leave_type": payload.leave_type.value if payload.leave_type and payload.kind == RequestKind.LEAVE else None,
        "leave_format": period.leave_format.value if period.leave_format else None,
        "start_date": period.start_date,
        "end_date": period.end_date,
        "start_time": period.start_time,
        "end_time": period.end_time,
        "total_days": period.total_days,
        "total_hours": period.total_hours,
    }


_COMPARED_COLUMNS = ("leave_type", "leave_format", "start_date", "end_date", "start_time", "end_time")


def _is_same_submission(existing: ApprovalRequest, payload: SubmitRequestPayload, period: RequestPeriod) -> bool:
    columns = _period_columns(payload, period)
    return (
        existing.kind == payload.kind.value
        and existing.reason == payload.reason
        and all(getattr(existing, name) == columns[name] for name in _COMPARED_COLUMNS)
    )


def _replayed_request(
    existing: ApprovalRequest,
    payload: SubmitRequestPayload,
    period: RequestPeriod,
) -> RequestResponse:
    if not _is_same_submission(existing, payload, period):
        logger.info(
            "Idempotency key %r replayed with a different body for %s", payload.idempotency_key, existing.owner_id
        )
        raise IdempotencyConflictError
    return build_request_response(existing)


def _merged_submission(request: ApprovalRequest, payload: UpdateRequestPayload) -> SubmitRequestPayload:
    """The stored request as a submit payload with the edited fields laid over it."""
    kind = RequestKind(request.kind)
    merged: dict[str, Any] = {
        "kind": kind,
        "owner_id": request.owner_id,
        "reason": request.reason,
        "attachments": list(request.attachments or []),
    }
    if kind == RequestKind.LEAVE:
        merged.update(
            leave_type=request.leave_type,
            leave_format=request.leave_format,
            start_date=request.start_date,
            end_date=request.end_date,
        )
    else:
        merged.update(work_date=request.start_date, start_time=request.start_time, end_time=request.end_time)
    merged.update(payload.model_dump(exclude_unset=True))

    try:
        return SubmitRequestPayload.model_validate(merged)
    except ValidationError as exc:
        raise ValidationFailedError("; ".join(error["msg"] for error in exc.errors())) from None


async def _apply_transition(
    session: AsyncSession,
    auth: AuthContext,
    request_id: uuid.UUID,
    transition: Transition,
    comment: str | None,
) -> RequestResponse:
    async with write_transaction(session):
        request = await request_store.claim_request(session, request_id)
        events = await approval_log.list_events(session, request.id)
        current = resolve(events)

        # Terminal requests answer 409 to everyone, whatever their capabilities.
        if current.is_terminal:
            raise _refusal(transition.event_type.value, transition.refusal, request, auth, current)
        require(auth, transition.capability, request)
        if not transition.guard(current):
            raise _refusal(transition.event_type.value, transition.refusal, request, auth, current)

        entry = approval_log.append_event(session, request, auth, transition.event_type, comment, events)
        resolved = resolve([*events, entry])
        request_store.store_resolved_status(request, resolved)
        await session.flush()

    logger.info(
        "Request %s: %s by %s (%s) -> %s",
        request.id,
        transition.event_type.value,
        auth.user_id,
        auth.role.value,
        resolved.describe(),
    )

    if transition.notify:
        await dispatch_notification(
            RequestNotification(
                request_id=request.id,
                owner_id=request.owner_id,
                kind=request.kind,
                event_type=transition.event_type.value,
                actor_id=auth.user_id,
                status=resolved.status.value,
                cancel_state=resolved.cancel_state.value,
                comment=comment,
            )
        )

    return build_request_response(request, resolved)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


async def submit_request(
    session: AsyncSession,
    auth: AuthContext,
    payload: SubmitRequestPayload,
) -> RequestResponse:
    """Create a request with an empty approval log (implicitly WAITING).

    Replaying an ``idempotency_key`` for the same owner returns the request
    created the first time; replaying it with a different period or reason
    is a conflict.
    """
    owner_id = payload.owner_id or auth.user_id
    if owner_id != auth.user_id:
        require(auth, Capability.SUBMIT_ON_BEHALF)

    period = period_for(payload)
    if payload.idempotency_key is not None:
        existing = await request_store.find_by_idempotency_key(session, owner_id, payload.idempotency_key)
        if existing is not None:
            return _replayed_request(existing, payload, period)

    request = ApprovalRequest(
        kind=payload.kind.value,
        owner_id=owner_id,
        submitted_by=auth.user_id,
        **_period_columns(payload, period),
        reason=payload.reason,
        attachments=list(payload.attachments) or None,
        status=INITIAL_STATUS.status.value,
        cancel_state=INITIAL_STATUS.cancel_state.value,
        idempotency_key=payload.idempotency_key,
    )
    session.add(request)

    try:
        await session.commit()
    except IntegrityError:
        await session.rollback()
        # Lost an idempotency race: hand back the winner.
        if payload.idempotency_key is not None:
            existing = await request_store.find_by_idempotency_key(session, owner_id, payload.idempotency_key)
            if existing is not None:
                return _replayed_request(existing, payload, period)
        raise AppError("Duplicate request", status_code=409) from None
    except SQLAlchemyError as exc:
        await session.rollback()
        logger.exception("Storage failure while submitting request for %s", owner_id)
        raise StorageError from exc

    logger.info("Request %s submitted: %s for %s by %s", request.id, request.kind, owner_id, auth.user_id)
    return build_request_response(request, INITIAL_STATUS)


async def update_request(
    session: AsyncSession,
    auth: AuthContext,
    request_id: uuid.UUID,
    payload: UpdateRequestPayload,
) -> RequestResponse:
    """Edit the period, reason or attachments of a waiting request.

    The owner (or an admin) may edit until the first decision. The period is
    recomputed; the approval log is untouched.
    """
    async with write_transaction(session):
        request = await request_store.claim_request(session, request_id, advance=False)
        current = resolve(await approval_log.list_events(session, request.id))

        if current.is_terminal:
            raise _refusal("edit", "Only waiting requests can be edited", request, auth, current)
        require(auth, Capability.EDIT, request)
        if not _is_waiting(current):
            raise _refusal("edit", "Only waiting requests can be edited", request, auth, current)

        merged = _merged_submission(request, payload)
        for name, value in _period_columns(merged, period_for(merged)).items():
            setattr(request, name, value)
        request.reason = merged.reason
        request.attachments = list(merged.attachments) or None
        await session.flush()

    logger.info("Request %s edited by %s (%s)", request.id, auth.user_id, auth.role.value)
    return build_request_response(request, current)


async def approve_request(
    session: AsyncSession,
    auth: AuthContext,
    request_id: uuid.UUID,
    payload: DecisionPayload | None = None,
) -> RequestResponse:
    """Approve a waiting request."""
    comment = payload.comment if payload else None
    return await _apply_transition(session, auth, request_id, TRANSITIONS[ApprovalEventType.APPROVE], comment)


async def reject_request(
    session: AsyncSession,
    auth: AuthContext,
    request_id: uuid.UUID,
    payload: DecisionPayload | None = None,
) -> RequestResponse:
    """Reject a waiting request."""
    comment = payload.comment if payload else None
    return await _apply_transition(session, auth, request_id, TRANSITIONS[ApprovalEventType.REJECT], comment)


async def request_cancel(
    session: AsyncSession,
    auth: AuthContext,
    request_id: uuid.UUID,
    payload: CancelRequestPayload,
) -> RequestResponse:
    """Ask to cancel an approved request.

    Allowed again after a previous cancellation was rejected; refused while
    one is still pending.
    """
    return await _apply_transition(
        session, auth, request_id, TRANSITIONS[ApprovalEventType.REQUEST_CANCEL], payload.reason
    )


async def approve_cancel(
    session: AsyncSession,
    auth: AuthContext,
    request_id: uuid.UUID,
    payload: DecisionPayload | None = None,
) -> RequestResponse:
    """Approve a pending cancellation. The request becomes CANCELED."""
    comment = payload.comment if payload else None
    return await _apply_transition(
        session, auth, request_id, TRANSITIONS[ApprovalEventType.APPROVE_CANCEL], comment
    )


async def reject_cancel(
    session: AsyncSession,
    auth: AuthContext,
    request_id: uuid.UUID,
    payload: DecisionPayload | None = None,
) -> RequestResponse:
    """Reject a pending cancellation. The request stays APPROVED."""
    comment = payload.comment if payload else None
    return await _apply_transition(session, auth, request_id, TRANSITIONS[ApprovalEventType.REJECT_CANCEL], comment)


async def withdraw_request(
    session: AsyncSession,
    auth: AuthContext,
    request_id: uuid.UUID,
    payload: WithdrawPayload | None = None,
) -> RequestResponse:
    """Withdraw a waiting request by logging a terminal ``withdrawn`` event.

    The request row and its history are kept.
    """
    comment = payload.comment if payload else None
    return await _apply_transition(session, auth, request_id, TRANSITIONS[ApprovalEventType.WITHDRAWN], comment)


async def get_request(
    session: AsyncSession,
    auth: AuthContext,
    request_id: uuid.UUID,
) -> RequestDetailResponse:
    """Get a request with its status recomputed from the log and its history."""
    request = await request_store.get_request_or_404(session, request_id)
    require(auth, Capability.VIEW, request)
    events = await approval_log.list_events(session, request.id)
    summary = build_request_response(request, resolve(events))
    return RequestDetailResponse(
        **summary.model_dump(),
        events=[build_event_response(e) for e in events],
    )


async def list_request_events(
    session: AsyncSession,
    auth: AuthContext,
    request_id: uuid.UUID,
) -> EventListResponse:
    """Return a request's approval history in resolution order."""
    request = await request_store.get_request_or_404(session, request_id)
    require(auth, Capability.VIEW, request)
    events = await approval_log.list_events(session, request.id)
    return EventListResponse(items=[build_event_response(e) for e in events], total=len(events))


async def list_requests(
    session: AsyncSession,
    auth: AuthContext,
    *,
    owner_id: uuid.UUID | None = None,
    status: RequestStatus | None = None,
    kind: RequestKind | None = None,
    date_from: date | None = None,
    date_to: date | None = None,
    offset: int = 0,
    limit: int = 50,
) -> RequestListResponse:
    """List requests by cached status.

    Actors without VIEW_ALL only ever see their own requests.
    """
    if not can(auth, Capability.VIEW_ALL):
        if owner_id is not None and owner_id != auth.user_id:
            raise ForbiddenError("Not authorized to view other employees' requests")
        owner_id = auth.user_id

    requests, total = await request_store.list_requests(
        session,
        owner_id=owner_id,
        status=status,
        kind=kind,
        date_from=date_from,
        date_to=date_to,
        offset=offset,
        limit=limit,
    )
    return RequestListResponse(items=[build_request_response(r) for r in requests], total=total)
