# ruff: noqa: B008, TC003
from __future__ import annotations

import uuid
from typing import Annotated

from fastapi import Depends, Header

from approvals.models.enums import ActorRole
from approvals.schemas.auth import AuthContext


async def get_auth_context(
    x_user_id: uuid.UUID = Header(),
    x_role: ActorRole = Header(default=ActorRole.EMPLOYEE),
) -> AuthContext:
    """Read the actor supplied by the identity provider from request headers."""
    return AuthContext(user_id=x_user_id, role=x_role)


AuthDep = Annotated[AuthContext, Depends(get_auth_context)]
