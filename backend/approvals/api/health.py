import logging
from typing import Literal

from fastapi import APIRouter
from pydantic import BaseModel
from sqlalchemy import select
from sqlmodel import col

from approvals.config import get_settings
from approvals.db import SessionDep
from approvals.models.event import ApprovalEvent

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])

DatabaseState = Literal["ok", "unreachable"]


class HealthResponse(BaseModel):
    """Liveness plus whether the approval log can be read."""

    status: Literal["ok", "degraded"]
    database: DatabaseState
    version: str
    environment: str


@router.get("/health", response_model=HealthResponse)
async def health(session: SessionDep) -> HealthResponse:
    """Always answers 200; a missing or unreachable approval log reports ``degraded``."""
    settings = get_settings()
    database: DatabaseState = "ok"

    try:
        await session.execute(select(col(ApprovalEvent.id)).limit(1))
    except Exception:
        logger.exception("Health check: approval log not readable")
        database = "unreachable"

    return HealthResponse(
        status="ok" if database == "ok" else "degraded",
        database=database,
        version=settings.app_version,
        environment=settings.environment,
    )
