"""
SessionManager service for Customs Process Tracker

Opens and closes operator work sessions. A user holds at most one active
session, and process executions can only start inside one.
"""

from typing import Optional
from uuid import uuid4

from ..models.session import WorkSession
from ..utils.database import DatabaseManager
from ..utils.logger import get_logger
from ..core.exceptions import SessionAlreadyActiveError, SessionNotFoundError


class SessionManager:
    """Manages the lifecycle of operator work sessions."""

    def __init__(self, database_manager: DatabaseManager):
        self.db = database_manager
        self.logger = get_logger(__name__)

    async def start_session(self, user_id: str) -> WorkSession:
        """
        Open a new work session.

        Raises:
            SessionAlreadyActiveError: the user already has an open session;
                the existing session is carried in the error details
        """
        async with self.db.transaction() as conn:
            existing = await self.db.get_active_session(user_id, conn=conn)
            if existing:
                self.logger.info("Session already active", extra={
                    "user_id": user_id,
                    "session_id": existing.id
                })
                raise SessionAlreadyActiveError(user_id, existing.to_dict())

            session = WorkSession(id=str(uuid4()), user_id=user_id)
            await self.db.insert_session(session, conn=conn)

        self.logger.info("Session started", extra={"user_id": user_id, "session_id": session.id})
        return session

    async def end_session(self, session_id: str) -> WorkSession:
        """Close a work session."""
        session = await self.db.get_session(session_id)
        if not session:
            raise SessionNotFoundError(session_id)

        session.end()
        await self.db.update_session(session)

        self.logger.info("Session ended", extra={
            "user_id": session.user_id,
            "session_id": session.id,
            "duration_seconds": session.get_duration()
        })
        return session

    async def get_active_session(self, user_id: str) -> Optional[WorkSession]:
        """Get the user's open session, or None."""
        return await self.db.get_active_session(user_id)
