"""Status resolution: derive a request's effective state from its approval log.

The log is the only source of truth. Events are put in a total order by
``(created_at, sequence)``; ``sequence`` breaks ties when timestamps collide.

1. The latest ``approve``/``reject``/``withdrawn`` event sets the primary
   status; with none of them the request is WAITING.
2. Only an APPROVED request has a cancellation sub-state. It is NONE unless
   a ``request_cancel`` exists. After the most recent one, an
   ``approve_cancel`` makes the request CANCELED, a ``reject_cancel`` leaves
   it APPROVED with the cancellation REJECTED, and neither leaves it PENDING.

Unknown event types are ignored, so malformed data can never read as an
approval.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import TYPE_CHECKING, NamedTuple, Protocol, TypeVar

from approvals.models.enums import TERMINAL_STATUSES, ApprovalEventType, CancelState, RequestStatus

if TYPE_CHECKING:
    from collections.abc import Iterable

_PRIMARY_DECISIONS = {
    ApprovalEventType.APPROVE: RequestStatus.APPROVED,
    ApprovalEventType.REJECT: RequestStatus.REJECTED,
    ApprovalEventType.WITHDRAWN: RequestStatus.WITHDRAWN,
}


class LoggedEvent(Protocol):
    """The fields of an approval event that resolution depends on."""

    event_type: str
    created_at: datetime
    sequence: int


E = TypeVar("E", bound=LoggedEvent)


class ResolvedStatus(NamedTuple):
    """Primary status plus cancellation sub-state of a request."""

    status: RequestStatus
    cancel_state: CancelState

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES

    def describe(self) -> str:
        if self.status == RequestStatus.APPROVED and self.cancel_state != CancelState.NONE:
            return f"{self.status.value} (cancellation {self.cancel_state.value})"
        return self.status.value


INITIAL_STATUS = ResolvedStatus(RequestStatus.WAITING, CancelState.NONE)


def ordering_key(event: LoggedEvent) -> tuple[datetime, int]:
    """Total-order key for an event. Naive timestamps are read as UTC."""
    created_at = event.created_at
    if created_at.tzinfo is None:
        created_at = created_at.replace(tzinfo=UTC)
    return created_at, event.sequence


def order_events(events: Iterable[E]) -> list[E]:
    """Return events in resolution order."""
    return sorted(events, key=ordering_key)


def _parse_event_type(value: str) -> ApprovalEventType | None:
    try:
        return ApprovalEventType(value)
    except ValueError:
        return None


def resolve(events: Iterable[LoggedEvent]) -> ResolvedStatus:
    """Resolve the effective status of a request from its events.

    Pure and deterministic: the input order does not matter and nothing
    is mutated.
    """
    typed: list[ApprovalEventType] = []
    for event in order_events(events):
        event_type = _parse_event_type(event.event_type)
        if event_type is not None:
            typed.append(event_type)

    status = RequestStatus.WAITING
    for event_type in typed:
        decided = _PRIMARY_DECISIONS.get(event_type)
        if decided is not None:
            status = decided

    if status != RequestStatus.APPROVED:
        return ResolvedStatus(status, CancelState.NONE)

    last_cancel_request: int | None = None
    for index, event_type in enumerate(typed):
        if event_type == ApprovalEventType.REQUEST_CANCEL:
            last_cancel_request = index

    if last_cancel_request is None:
        return ResolvedStatus(RequestStatus.APPROVED, CancelState.NONE)

    outcomes = set(typed[last_cancel_request + 1 :])
    if ApprovalEventType.APPROVE_CANCEL in outcomes:
        return ResolvedStatus(RequestStatus.CANCELED, CancelState.APPROVED)
    if ApprovalEventType.REJECT_CANCEL in outcomes:
        return ResolvedStatus(RequestStatus.APPROVED, CancelState.REJECTED)
    return ResolvedStatus(RequestStatus.APPROVED, CancelState.PENDING)
