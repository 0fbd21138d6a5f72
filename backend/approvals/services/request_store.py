# ruff: noqa: TC003
"""Request rows and their cached status.

The cached ``status``/``cancel_state`` columns serve listing and filtering.
Anything that needs a correct answer recomputes from the approval log.
"""

from __future__ import annotations

import uuid
from datetime import date
from typing import TYPE_CHECKING

from sqlalchemy import func, select, update
from sqlmodel import col

from approvals.exceptions import NotFoundError
from approvals.models.request import ApprovalRequest

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from approvals.models.enums import RequestKind, RequestStatus
    from approvals.services.status import ResolvedStatus


async def get_request_or_404(session: AsyncSession, request_id: uuid.UUID) -> ApprovalRequest:
    """Fetch a request by ID. Raises 404 if not found."""
    result = await session.execute(select(ApprovalRequest).where(col(ApprovalRequest.id) == request_id))
    request = result.scalar_one_or_none()
    if request is None:
        raise NotFoundError
    return request


async def claim_request(session: AsyncSession, request_id: uuid.UUID, *, advance: bool = True) -> ApprovalRequest:
    """Lock a request row for the rest of the transaction and return it fresh.

    The lock is taken by writing the row before anything is read, so a
    concurrent writer on the same request waits until this transaction ends
    and then sees its result. With ``advance`` the write also reserves the
    next event sequence.
    """
    next_sequence = ApprovalRequest.last_sequence + 1 if advance else ApprovalRequest.last_sequence
    result = await session.execute(
        update(ApprovalRequest)
        .where(col(ApprovalRequest.id) == request_id)
        .values(last_sequence=next_sequence)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount == 0:  # type: ignore[attr-defined]
        raise NotFoundError

    locked = await session.execute(
        select(ApprovalRequest).where(col(ApprovalRequest.id) == request_id).execution_options(populate_existing=True)
    )
    return locked.scalar_one()


async def find_by_idempotency_key(
    session: AsyncSession,
    owner_id: uuid.UUID,
    idempotency_key: str,
) -> ApprovalRequest | None:
    result = await session.execute(
        select(ApprovalRequest).where(
            col(ApprovalRequest.owner_id) == owner_id,
            col(ApprovalRequest.idempotency_key) == idempotency_key,
        )
    )
    return result.scalar_one_or_none()


def store_resolved_status(request: ApprovalRequest, resolved: ResolvedStatus) -> None:
    """Copy a freshly resolved status onto the request's cache columns."""
    request.status = resolved.status.value
    request.cancel_state = resolved.cancel_state.value


def cache_matches(request: ApprovalRequest, resolved: ResolvedStatus) -> bool:
    return request.status == resolved.status.value and request.cancel_state == resolved.cancel_state.value


async def list_requests(
    session: AsyncSession,
    *,
    owner_id: uuid.UUID | None = None,
    status: RequestStatus | None = None,
    kind: RequestKind | None = None,
    date_from: date | None = None,
    date_to: date | None = None,
    offset: int = 0,
    limit: int = 50,
) -> tuple[list[ApprovalRequest], int]:
    """List requests by cached status, newest first.

    ``date_from``/``date_to`` keep requests whose period overlaps the window.
    """
    filters = []
    if owner_id is not None:
        filters.append(col(ApprovalRequest.owner_id) == owner_id)
    if status is not None:
        filters.append(col(ApprovalRequest.status) == status.value)
    if kind is not None:
        filters.append(col(ApprovalRequest.kind) == kind.value)
    if date_from is not None:
        filters.append(col(ApprovalRequest.end_date) >= date_from)
    if date_to is not None:
        filters.append(col(ApprovalRequest.start_date) <= date_to)

    count_result = await session.execute(select(func.count()).select_from(ApprovalRequest).where(*filters))
    total = count_result.scalar_one()

    result = await session.execute(
        select(ApprovalRequest)
        .where(*filters)
        .order_by(col(ApprovalRequest.created_at).desc(), col(ApprovalRequest.id))
        .offset(offset)
        .limit(limit)
    )
    return list(result.scalars().all()), total
