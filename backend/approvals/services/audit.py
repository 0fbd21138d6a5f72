"""Audit export, cache verification and repair.

These never trust the cached status: they always recompute it from the
approval log.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from approvals.schemas.audit import AuditExportResponse, RepairResponse
from approvals.services import approval_log, request_store
from approvals.services.capabilities import Capability, require
from approvals.services.status import resolve
from approvals.services.workflow import build_event_response, build_request_response, write_transaction

if TYPE_CHECKING:
    import uuid

    from sqlalchemy.ext.asyncio import AsyncSession

    from approvals.schemas.auth import AuthContext

logger = logging.getLogger(__name__)


async def export_request_audit(
    session: AsyncSession,
    auth: AuthContext,
    request_id: uuid.UUID,
) -> AuditExportResponse:
    """Export a request's full history with its status recomputed from the log."""
    request = await request_store.get_request_or_404(session, request_id)
    require(auth, Capability.VIEW, request)
    events = await approval_log.list_events(session, request.id)
    resolved = resolve(events)
    consistent = request_store.cache_matches(request, resolved)
    if not consistent:
        logger.warning(
            "Cached status drift on request %s: cache=%s/%s log=%s/%s",
            request.id,
            request.status,
            request.cancel_state,
            resolved.status.value,
            resolved.cancel_state.value,
        )
    return AuditExportResponse(
        request=build_request_response(request),
        events=[build_event_response(e) for e in events],
        resolved_status=resolved.status,
        resolved_cancel_state=resolved.cancel_state,
        cache_consistent=consistent,
    )


async def repair_cached_status(
    session: AsyncSession,
    auth: AuthContext,
    request_id: uuid.UUID,
) -> RepairResponse:
    """Recompute a request's status from its log and rewrite the cache if it drifted.

    Runs under the same row lock as the workflow transitions and never
    appends events.
    """
    async with write_transaction(session):
        request = await request_store.claim_request(session, request_id, advance=False)
        require(auth, Capability.REPAIR, request)
        events = await approval_log.list_events(session, request.id)
        resolved = resolve(events)
        previous_status, previous_cancel_state = request.status, request.cancel_state
        repaired = not request_store.cache_matches(request, resolved)
        if repaired:
            request_store.store_resolved_status(request, resolved)
            await session.flush()

    if repaired:
        logger.warning(
            "Repaired cached status on request %s: %s/%s -> %s/%s",
            request.id,
            previous_status,
            previous_cancel_state,
            resolved.status.value,
            resolved.cancel_state.value,
        )
    return RepairResponse(
        request=build_request_response(request),
        repaired=repaired,
        previous_status=previous_status,
        previous_cancel_state=previous_cancel_state,
    )
