# ruff: noqa: TC003
from __future__ import annotations

import uuid

from fastapi import APIRouter

from approvals.api.deps import AuthDep
from approvals.db import SessionDep
from approvals.schemas.audit import AuditExportResponse, RepairResponse
from approvals.services import audit as audit_service

audit_router = APIRouter(prefix="/requests", tags=["audit"])


@audit_router.get("/{request_id}/audit", response_model=AuditExportResponse)
async def export_request_audit(
    request_id: uuid.UUID,
    session: SessionDep,
    auth: AuthDep,
) -> AuditExportResponse:
    """Export a request's history with its status recomputed from the log."""
    return await audit_service.export_request_audit(session, auth, request_id)


@audit_router.post("/{request_id}/repair", response_model=RepairResponse)
async def repair_cached_status(
    request_id: uuid.UUID,
    session: SessionDep,
    auth: AuthDep,
) -> RepairResponse:
    """Rewrite a request's cached status from its log (admin only)."""
    return await audit_service.repair_cached_status(session, auth, request_id)
