"""Append-only storage of approval events.

Nothing here commits: appends join the caller's transaction so the event
and the request's cached status land together or not at all.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from sqlalchemy import event as sa_event
from sqlalchemy import select
from sqlmodel import col

from approvals.exceptions import AppError
from approvals.models.base import now_utc
from approvals.models.event import ApprovalEvent
from approvals.services.status import order_events

if TYPE_CHECKING:
    import uuid
    from collections.abc import Sequence

    from sqlalchemy.ext.asyncio import AsyncSession

    from approvals.models.enums import ApprovalEventType
    from approvals.models.request import ApprovalRequest
    from approvals.schemas.auth import AuthContext

logger = logging.getLogger(__name__)


class ImmutableEventError(AppError):
    """Raised when something tries to change or remove a logged event."""

    def __init__(self) -> None:
        super().__init__("Approval events are immutable", status_code=500)


@sa_event.listens_for(ApprovalEvent, "before_update")
def _reject_update(mapper: object, connection: object, target: ApprovalEvent) -> None:
    raise ImmutableEventError


@sa_event.listens_for(ApprovalEvent, "before_delete")
def _reject_delete(mapper: object, connection: object, target: ApprovalEvent) -> None:
    raise ImmutableEventError


async def list_events(session: AsyncSession, request_id: uuid.UUID) -> list[ApprovalEvent]:
    """Return a request's events in resolution order."""
    result = await session.execute(
        select(ApprovalEvent)
        .where(col(ApprovalEvent.request_id) == request_id)
        .order_by(col(ApprovalEvent.created_at), col(ApprovalEvent.sequence))
    )
    # Same total order the resolver applies.
    return order_events(result.scalars().all())


def append_event(
    session: AsyncSession,
    request: ApprovalRequest,
    auth: AuthContext,
    event_type: ApprovalEventType,
    comment: str | None,
    existing: Sequence[ApprovalEvent],
) -> ApprovalEvent:
    """Stage a new event for ``request`` in the caller's transaction.

    The request must already be claimed, so ``request.last_sequence`` holds
    the sequence reserved for this event. The timestamp never precedes the
    latest existing event, which keeps append order and resolve order equal.
    """
    created_at = now_utc()
    if existing:
        created_at = max(created_at, existing[-1].created_at)

    entry = ApprovalEvent(
        request_id=request.id,
        actor_id=auth.user_id,
        actor_role=auth.role.value,
        event_type=event_type.value,
        comment=comment,
        sequence=request.last_sequence,
        created_at=created_at,
    )
    session.add(entry)
    logger.debug("Staged %s event #%d for request %s", event_type.value, entry.sequence, request.id)
    return entry
