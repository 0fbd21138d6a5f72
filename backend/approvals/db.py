"""Async engine and session wiring.

Workflow transitions serialize on the request row, so the engine is set up
to bound how long a transaction waits for that lock: PostgreSQL through
``lock_timeout``, SQLite through its busy timeout.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Annotated, Any

from fastapi import Depends
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from approvals.config import get_settings

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    from approvals.config import Settings

_engine: AsyncEngine | None = None
_session_factory: async_sessionmaker[AsyncSession] | None = None


def engine_options(settings: Settings) -> dict[str, Any]:
    """Backend-specific ``create_async_engine`` keyword arguments."""
    backend = make_url(settings.database_url).get_backend_name()
    if backend == "sqlite":
        return {"connect_args": {"timeout": settings.db_lock_timeout_seconds}}
    if backend == "postgresql":
        lock_timeout_ms = int(settings.db_lock_timeout_seconds * 1000)
        return {
            "pool_size": settings.db_pool_size,
            "connect_args": {
                "server_settings": {
                    "application_name": settings.app_name,
                    "lock_timeout": str(lock_timeout_ms),
                },
            },
        }
    return {}


def get_engine() -> AsyncEngine:
    """Return the singleton async engine, creating it on first call."""
    global _engine
    if _engine is None:
        settings = get_settings()
        _engine = create_async_engine(
            settings.database_url,
            echo=settings.debug,
            pool_pre_ping=True,
            **engine_options(settings),
        )
    return _engine


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    """Return the singleton session factory.

    Objects stay loaded after commit so responses and notifications can be
    built from them once the transaction has ended.
    """
    global _session_factory
    if _session_factory is None:
        _session_factory = async_sessionmaker(get_engine(), expire_on_commit=False)
    return _session_factory


async def get_session() -> AsyncIterator[AsyncSession]:
    """FastAPI dependency: one session per HTTP request."""
    async with get_session_factory()() as session:
        yield session


SessionDep = Annotated[AsyncSession, Depends(get_session)]


async def dispose_engine() -> None:
    """Dispose the engine and reset singletons. Call on app shutdown."""
    global _engine, _session_factory
    if _engine is not None:
        await _engine.dispose()
        _engine = None
        _session_factory = None
