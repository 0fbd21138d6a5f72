from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

from fastapi import FastAPI

from approvals.api.health import router as health_router
from approvals.api.router import api_router
from approvals.config import get_settings
from approvals.db import dispose_engine
from approvals.exceptions import setup_exception_handlers
from approvals.logging_config import configure_logging
from approvals.middleware import setup_middleware

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

logger = logging.getLogger(__name__)

OPENAPI_TAGS = [
    {"name": "requests", "description": "Submit leave and overtime requests and move them through approval."},
    {"name": "audit", "description": "Approval history export and cached status repair."},
    {"name": "health", "description": "Service and approval log availability."},
]


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
    """Configure logging on startup; release database connections on shutdown."""
    settings = get_settings()
    configure_logging(settings)
    logger.info(
        "Starting %s v%s [%s] locale=%s notifications=%s",
        settings.app_name,
        settings.app_version,
        settings.environment,
        settings.display_locale,
        "on" if settings.notifications_enabled else "off",
    )
    yield
    await dispose_engine()
    logger.info("Shut down %s", settings.app_name)


def create_app() -> FastAPI:
    """Application factory."""
    settings = get_settings()
    show_docs = settings.environment != "production"

    application = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        debug=settings.debug,
        lifespan=lifespan,
        openapi_tags=OPENAPI_TAGS,
        docs_url="/docs" if show_docs else None,
        redoc_url="/redoc" if show_docs else None,
    )

    setup_middleware(application, settings)
    setup_exception_handlers(application)

    application.include_router(health_router)
    application.include_router(api_router)

    return application


app = create_app()
