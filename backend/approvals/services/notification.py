# ruff: noqa: TC003
from __future__ import annotations

import logging
import uuid
from typing import Protocol, runtime_checkable

from pydantic import BaseModel

from approvals.config import get_settings

logger = logging.getLogger(__name__)


class RequestNotification(BaseModel):
    """Message handed to the notification service after a decision commits."""

    request_id: uuid.UUID
    owner_id: uuid.UUID
    kind: str
    event_type: str
    actor_id: uuid.UUID
    status: str
    cancel_state: str
    comment: str | None = None


@runtime_checkable
class NotificationService(Protocol):
    """Interface for the external notification service."""

    async def notify(self, notification: RequestNotification) -> None:
        """Deliver a notification. May raise; callers treat failures as non-fatal."""
        ...


class InMemoryNotificationService:
    """In-memory stub implementation for development."""

    def __init__(self) -> None:
        self.sent: list[RequestNotification] = []

    async def notify(self, notification: RequestNotification) -> None:
        """Record the notification."""
        self.sent.append(notification)


_notification_service: NotificationService = InMemoryNotificationService()


def get_notification_service() -> NotificationService:
    """Return the configured notification service."""
    return _notification_service


def set_notification_service(service: NotificationService) -> None:
    """Override the service (for testing or production wiring)."""
    global _notification_service
    _notification_service = service


async def dispatch_notification(notification: RequestNotification) -> bool:
    """Send a notification without letting a failure reach the caller.

    Returns True when the service accepted it. Called only after the
    triggering transaction has committed.
    """
    if not get_settings().notifications_enabled:
        return False
    try:
        await get_notification_service().notify(notification)
    except Exception:
        logger.exception(
            "Notification dispatch failed for request %s (%s)", notification.request_id, notification.event_type
        )
        return False
    return True
