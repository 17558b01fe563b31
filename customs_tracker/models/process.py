"""
Process catalog models for Customs Process Tracker

Defines process templates and their ordered steps. These are reference data:
the tracker reads them but never creates or mutates them.
"""

from enum import Enum
from datetime import datetime, timezone
from typing import Optional, Dict, Any, List
from dataclasses import dataclass, field


def utcnow() -> datetime:
    """Timezone-aware current UTC time."""
    return datetime.now(timezone.utc)


def parse_datetime(value: Any) -> Optional[datetime]:
    """Accept datetimes from the driver or ISO strings from JSON payloads."""
    if value is None or isinstance(value, datetime):
        return value
    return datetime.fromisoformat(str(value).replace("Z", "+00:00"))


def format_datetime(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


class ProcessType(Enum):
    """Which shipments a process applies to."""
    IMPORT = "import"
    EXPORT = "export"
    BOTH = "both"


@dataclass
class ProcessStep:
    """One ordered step of a process template."""

    id: str
    process_id: str
    order: int
    title: str
    description: str = ""
    image_url: Optional[str] = None

    # Stored but not consulted by any transition
    is_critical: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "process_id": self.process_id,
            "order": self.order,
            "title": self.title,
            "description": self.description,
            "image_url": self.image_url,
            "is_critical": self.is_critical
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ProcessStep":
        return cls(
            id=str(data["id"]),
            process_id=str(data["process_id"]),
            order=int(data["order"]),
            title=data["title"],
            description=data.get("description") or "",
            image_url=data.get("image_url"),
            is_critical=bool(data.get("is_critical", False))
        )


@dataclass
class Process:
    """Named process template applicable to a shipment category."""

    id: str
    name: str
    type: ProcessType
    description: str = ""
    steps: List[ProcessStep] = field(default_factory=list)
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)

    @property
    def total_steps(self) -> int:
        """Number of steps; orders are dense so this is also the last order."""
        return len(self.steps)

    def applies_to(self, shipment_type: str) -> bool:
        """Check whether this process can run against a shipment type."""
        return self.type == ProcessType.BOTH or self.type.value == shipment_type

    def get_step(self, step_id: str) -> Optional[ProcessStep]:
        for step in self.steps:
            if step.id == step_id:
                return step
        return None

    def to_dict(self, include_steps: bool = True) -> Dict[str, Any]:
        """Convert process to dictionary, optionally with its ordered steps."""
        data = {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "type": self.type.value,
            "created_at": format_datetime(self.created_at),
            "updated_at": format_datetime(self.updated_at)
        }
        if include_steps:
            data["steps"] = [step.to_dict() for step in self.steps]
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Process":
        steps = [
            step if isinstance(step, ProcessStep) else ProcessStep.from_dict(step)
            for step in data.get("steps") or []
        ]
        steps.sort(key=lambda s: s.order)

        return cls(
            id=str(data["id"]),
            name=data["name"],
            type=ProcessType(data["type"]),
            description=data.get("description") or "",
            steps=steps,
            created_at=parse_datetime(data.get("created_at")) or utcnow(),
            updated_at=parse_datetime(data.get("updated_at")) or utcnow()
        )
