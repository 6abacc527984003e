import os
from typing import Annotated

from fastapi import Depends, Header, HTTPException

from session_context import SessionContext, SessionRegistry, get_registry


def require_teacher(
    x_admin_token: Annotated[str | None, Header(alias="x-admin-token")] = None,
) -> None:
    """
    Teacher-only guard. Requires the X-Admin-Token header to match TEACHER_TOKEN.
    """
    expected = os.getenv("TEACHER_TOKEN", "")
    if not expected:
        raise HTTPException(status_code=500, detail="TEACHER_TOKEN not configured on server.")
    if x_admin_token != expected:
        raise HTTPException(status_code=401, detail="Unauthorized.")


def require_student(
    x_session_token: Annotated[str | None, Header(alias="x-session-token")] = None,
    registry: SessionRegistry = Depends(get_registry),
) -> SessionContext:
    """
    Resolve the X-Session-Token header (issued by /auth/login) to the student's session context.
    """
    ctx = registry.get(x_session_token)
    if ctx is None:
        raise HTTPException(status_code=401, detail="Not logged in.")
    return ctx
