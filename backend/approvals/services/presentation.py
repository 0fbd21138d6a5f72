"""Display labels for request statuses.

Kept apart from the status enums: nothing in the workflow reads these.
"""

from __future__ import annotations

from approvals.models.enums import CancelState, RequestStatus

_W = RequestStatus.WAITING
_A = RequestStatus.APPROVED

STATUS_LABELS: dict[str, dict[tuple[RequestStatus, CancelState], str]] = {
    "en": {
        (_W, CancelState.NONE): "Waiting for approval",
        (_A, CancelState.NONE): "Approved",
        (_A, CancelState.PENDING): "Approved, cancellation requested",
        (_A, CancelState.REJECTED): "Approved, cancellation rejected",
        (RequestStatus.REJECTED, CancelState.NONE): "Rejected",
        (RequestStatus.CANCELED, CancelState.APPROVED): "Canceled",
        (RequestStatus.WITHDRAWN, CancelState.NONE): "Withdrawn",
    },
    "th": {
        (_W, CancelState.NONE): "รออนุมัติ",
        (_A, CancelState.NONE): "อนุมัติ",
        (_A, CancelState.PENDING): "รอยกเลิก",
        (_A, CancelState.REJECTED): "อนุมัติ (ไม่อนุมัติการยกเลิก)",
        (RequestStatus.REJECTED, CancelState.NONE): "ไม่อนุมัติ",
        (RequestStatus.CANCELED, CancelState.APPROVED): "ยกเลิกแล้ว",
        (RequestStatus.WITHDRAWN, CancelState.NONE): "ถอนคำขอ",
    },
}

DEFAULT_LOCALE = "en"


def status_label(status: RequestStatus, cancel_state: CancelState, locale: str = DEFAULT_LOCALE) -> str:
    """Return the display label, falling back to English and then the raw value."""
    labels = STATUS_LABELS.get(locale, STATUS_LABELS[DEFAULT_LOCALE])
    label = labels.get((status, cancel_state)) or labels.get((status, CancelState.NONE))
    if label is None:
        label = STATUS_LABELS[DEFAULT_LOCALE].get((status, cancel_state), status.value)
    return label
