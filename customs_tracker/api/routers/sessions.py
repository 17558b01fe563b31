"""
Operator work session endpoints.
"""

from fastapi import APIRouter, Depends

from ...services import SessionManager, AccessControl
from ..auth import AuthenticatedUser
from ..deps import get_current_user, get_session_manager, get_access_control

router = APIRouter(prefix="/api/sessions", tags=["sessions"])


@router.post("/start", status_code=201)
async def start_session(
    user: AuthenticatedUser = Depends(get_current_user),
    sessions: SessionManager = Depends(get_session_manager)
):
    """Open a work session for the authenticated user."""
    session = await sessions.start_session(user.id)
    return session.to_dict()


@router.put("/end/{session_id}")
async def end_session(
    session_id: str,
    user: AuthenticatedUser = Depends(get_current_user),
    sessions: SessionManager = Depends(get_session_manager)
):
    session = await sessions.end_session(session_id)
    return session.to_dict()


@router.get("/active/{user_id}")
async def get_active_session(
    user_id: str,
    user: AuthenticatedUser = Depends(get_current_user),
    sessions: SessionManager = Depends(get_session_manager),
    access: AccessControl = Depends(get_access_control)
):
    """Active session of a user, or null. Other users' sessions need admin."""
    if user_id != user.id:
        await access.require_admin(user.id)

    session = await sessions.get_active_session(user_id)
    return session.to_dict() if session else None
