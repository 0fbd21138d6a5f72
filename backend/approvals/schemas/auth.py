# ruff: noqa: TC003
from __future__ import annotations

import uuid

from pydantic import BaseModel

from approvals.models.enums import ActorRole


class AuthContext(BaseModel):
    """Actor identity supplied by the external identity provider."""

    user_id: uuid.UUID
    role: ActorRole = ActorRole.EMPLOYEE
