"""
Role checks for administrator-only operations.
"""

from ..models.session import Profile
from ..utils.database import DatabaseManager
from ..utils.logger import get_logger
from ..core.exceptions import AuthorizationError


class AccessControl:
    """Resolves user profiles and enforces the admin role."""

    def __init__(self, database_manager: DatabaseManager):
        self.db = database_manager
        self.logger = get_logger(__name__)

    async def require_admin(self, user_id: str) -> Profile:
        """
        Return the user's profile if it has the admin role.

        Raises:
            AuthorizationError: no profile exists or the role is not admin
        """
        profile = await self.db.get_profile(user_id)
        if profile is None or not profile.is_admin:
            self.logger.warning("Admin access denied", extra={
                "user_id": user_id,
                "role": profile.role.value if profile else None
            })
            raise AuthorizationError(user_id)
        return profile
