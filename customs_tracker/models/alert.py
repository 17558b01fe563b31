"""
Alert model for Customs Process Tracker

Alerts are raised when an operator reports a step failure and are resolved
by an administrator.
"""

from enum import Enum
from datetime import datetime
from typing import Optional, Dict, Any
from dataclasses import dataclass, field

from .process import utcnow, parse_datetime, format_datetime


class AlertType(Enum):
    """Alert type enumeration."""
    ERROR = "error"
    WARNING = "warning"
    INFO = "info"


def format_step_error_message(step_title: str, error_description: str) -> str:
    """Build the administrator-facing message for a failed step."""
    return f'Error in step "{step_title}": {error_description}'


@dataclass
class Alert:
    """Administrator-facing notification raised on step failure."""

    id: str
    process_execution_id: str
    user_id: str
    message: str
    step_execution_id: Optional[str] = None
    type: AlertType = AlertType.ERROR
    resolved: bool = False
    created_at: datetime = field(default_factory=utcnow)
    resolved_at: Optional[datetime] = None
    resolved_by: Optional[str] = None

    def resolve(self, user_id: str):
        """Resolve the alert."""
        self.resolved = True
        self.resolved_at = utcnow()
        self.resolved_by = user_id

    def to_dict(self) -> Dict[str, Any]:
        """Convert alert to dictionary."""
        return {
            "id": self.id,
            "process_execution_id": self.process_execution_id,
            "step_execution_id": self.step_execution_id,
            "user_id": self.user_id,
            "type": self.type.value,
            "message": self.message,
            "resolved": self.resolved,
            "created_at": format_datetime(self.created_at),
            "resolved_at": format_datetime(self.resolved_at),
            "resolved_by": self.resolved_by
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Alert":
        step_execution_id = data.get("step_execution_id")
        return cls(
            id=str(data["id"]),
            process_execution_id=str(data["process_execution_id"]),
            step_execution_id=str(step_execution_id) if step_execution_id else None,
            user_id=str(data["user_id"]),
            type=AlertType(data.get("type", "error")),
            message=data["message"],
            resolved=bool(data.get("resolved", False)),
            created_at=parse_datetime(data.get("created_at")) or utcnow(),
            resolved_at=parse_datetime(data.get("resolved_at")),
            resolved_by=data.get("resolved_by")
        )
