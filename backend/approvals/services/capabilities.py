"""Role and ownership capability checks for workflow operations.

Every operation asks for exactly one capability. What an actor holds is the
union of what its role grants and, when it owns the request, what ownership
grants, less the right to decide on that request.
"""

from __future__ import annotations

import enum
from typing import TYPE_CHECKING

from approvals.exceptions import ForbiddenError
from approvals.models.enums import ActorRole

if TYPE_CHECKING:
    from approvals.models.request import ApprovalRequest
    from approvals.schemas.auth import AuthContext


class Capability(enum.StrEnum):
    """Something an actor may do to a request."""

    DECIDE = "DECIDE"
    REQUEST_CANCEL = "REQUEST_CANCEL"
    DECIDE_CANCEL = "DECIDE_CANCEL"
    WITHDRAW = "WITHDRAW"
    EDIT = "EDIT"
    SUBMIT_ON_BEHALF = "SUBMIT_ON_BEHALF"
    VIEW = "VIEW"
    VIEW_ALL = "VIEW_ALL"
    REPAIR = "REPAIR"


_ROLE_CAPABILITIES: dict[ActorRole, frozenset[Capability]] = {
    ActorRole.EMPLOYEE: frozenset(),
    ActorRole.TEAM_LEAD: frozenset({Capability.DECIDE, Capability.VIEW, Capability.VIEW_ALL}),
    ActorRole.SUPERVISOR: frozenset(
        {
            Capability.DECIDE,
            Capability.REQUEST_CANCEL,
            Capability.DECIDE_CANCEL,
            Capability.SUBMIT_ON_BEHALF,
            Capability.VIEW,
            Capability.VIEW_ALL,
        }
    ),
    ActorRole.ADMIN: frozenset(Capability),
}

_OWNER_CAPABILITIES = frozenset({Capability.REQUEST_CANCEL, Capability.WITHDRAW, Capability.EDIT, Capability.VIEW})

# Nobody decides on their own request, whatever their role.
_WITHHELD_FROM_OWNER = frozenset({Capability.DECIDE, Capability.DECIDE_CANCEL})

_DENIED_MESSAGES = {
    Capability.DECIDE: "Not authorized to approve or reject requests",
    Capability.REQUEST_CANCEL: "Not authorized to request cancellation of this request",
    Capability.DECIDE_CANCEL: "Not authorized to decide on cancellation requests",
    Capability.WITHDRAW: "Not authorized to withdraw this request",
    Capability.EDIT: "Not authorized to edit this request",
    Capability.SUBMIT_ON_BEHALF: "Not authorized to submit requests for other employees",
    Capability.VIEW: "Not authorized to view this request",
    Capability.VIEW_ALL: "Not authorized to view other employees' requests",
    Capability.REPAIR: "Not authorized to repair request status",
}


def capabilities_for(auth: AuthContext, request: ApprovalRequest | None = None) -> frozenset[Capability]:
    """All capabilities the actor holds, optionally with respect to one request."""
    granted = _ROLE_CAPABILITIES[auth.role]
    if request is not None and request.owner_id == auth.user_id:
        granted = (granted | _OWNER_CAPABILITIES) - _WITHHELD_FROM_OWNER
    return granted


def can(auth: AuthContext, capability: Capability, request: ApprovalRequest | None = None) -> bool:
    return capability in capabilities_for(auth, request)


def require(auth: AuthContext, capability: Capability, request: ApprovalRequest | None = None) -> None:
    """Raise ForbiddenError unless the actor holds ``capability``."""
    if not can(auth, capability, request):
        raise ForbiddenError(_DENIED_MESSAGES[capability])
