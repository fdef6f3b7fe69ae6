# ruff: noqa: B008, TC003
from __future__ import annotations

import uuid
from typing import Annotated

from fastapi import Depends, Header

from hr_leave.exceptions import AuthorizationError
from hr_leave.models.enums import Role
from hr_leave.schemas.auth import AuthContext


async def get_auth_context(
    x_user_id: uuid.UUID = Header(),
    x_role: Role = Header(default=Role.EMPLOYEE),
) -> AuthContext:
    """Extract dev auth context from request headers."""
    return AuthContext(user_id=x_user_id, role=x_role)


AuthDep = Annotated[AuthContext, Depends(get_auth_context)]


async def require_hr_admin(
    auth: AuthDep,
) -> AuthContext:
    """Require the HR admin role for the request."""
    if not auth.is_hr_admin:
        raise AuthorizationError("HR admin access required")
    return auth


AdminDep = Annotated[AuthContext, Depends(require_hr_admin)]
