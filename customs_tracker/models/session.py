"""
Operator session and profile models for Customs Process Tracker
"""

from enum import Enum
from datetime import datetime
from typing import Optional, Dict, Any
from dataclasses import dataclass, field

from .process import utcnow, parse_datetime, format_datetime


class UserRole(Enum):
    OPERATOR = "operator"
    ADMIN = "admin"


@dataclass
class WorkSession:
    """A bounded period of operator activity gating execution operations."""

    id: str
    user_id: str
    started_at: datetime = field(default_factory=utcnow)
    ended_at: Optional[datetime] = None
    active: bool = True

    def end(self):
        """Close the session."""
        self.active = False
        self.ended_at = utcnow()

    def get_duration(self) -> Optional[float]:
        if self.ended_at:
            return (self.ended_at - self.started_at).total_seconds()
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "started_at": format_datetime(self.started_at),
            "ended_at": format_datetime(self.ended_at),
            "active": self.active
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "WorkSession":
        return cls(
            id=str(data["id"]),
            user_id=str(data["user_id"]),
            started_at=parse_datetime(data.get("started_at")) or utcnow(),
            ended_at=parse_datetime(data.get("ended_at")),
            active=bool(data.get("active", True))
        )


@dataclass
class Profile:
    """Application profile attached to an authenticated user."""

    id: str
    email: str
    role: UserRole = UserRole.OPERATOR
    first_name: str = ""
    last_name: str = ""
    created_at: datetime = field(default_factory=utcnow)

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "email": self.email,
            "role": self.role.value,
            "first_name": self.first_name,
            "last_name": self.last_name,
            "created_at": format_datetime(self.created_at)
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Profile":
        return cls(
            id=str(data["id"]),
            email=data.get("email") or "",
            role=UserRole(data.get("role", "operator")),
            first_name=data.get("first_name") or "",
            last_name=data.get("last_name") or "",
            created_at=parse_datetime(data.get("created_at")) or utcnow()
        )
