"""
Process execution and step ledger models for Customs Process Tracker

Defines the execution state machine and the per-step ledger rows that are
created together when a shipment enters a process.
"""

from enum import Enum
from datetime import datetime
from typing import Optional, Dict, Any, List
from dataclasses import dataclass, field

from .process import utcnow, parse_datetime, format_datetime
from ..core.exceptions import InvalidStatusTransitionError


class ExecutionStatus(Enum):
    """Process execution status enumeration."""
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    ERROR = "error"


class StepStatus(Enum):
    """Ledger row status enumeration."""
    PENDING = "pending"
    COMPLETED = "completed"
    ERROR = "error"


# Execution status transition rules. Advancing current_step is the
# IN_PROGRESS -> IN_PROGRESS self-transition.
EXECUTION_STATUS_TRANSITIONS = {
    ExecutionStatus.IN_PROGRESS: [
        ExecutionStatus.IN_PROGRESS,
        ExecutionStatus.COMPLETED,
        ExecutionStatus.ERROR
    ],
    ExecutionStatus.COMPLETED: [],  # Terminal state
    ExecutionStatus.ERROR: []  # Terminal state
}

STEP_STATUS_TRANSITIONS = {
    StepStatus.PENDING: [StepStatus.COMPLETED, StepStatus.ERROR],
    # A completed step can still be found faulty later in the walk
    StepStatus.COMPLETED: [StepStatus.ERROR],
    StepStatus.ERROR: []
}


def can_transition_to(current_status: Enum, target_status: Enum) -> bool:
    """Check if an execution or ledger row can move to target status."""
    if isinstance(current_status, StepStatus):
        return target_status in STEP_STATUS_TRANSITIONS.get(current_status, [])
    return target_status in EXECUTION_STATUS_TRANSITIONS.get(current_status, [])


def get_valid_transitions(current_status: Enum) -> List[Enum]:
    """Get list of valid status transitions from current status."""
    if isinstance(current_status, StepStatus):
        return STEP_STATUS_TRANSITIONS.get(current_status, []).copy()
    return EXECUTION_STATUS_TRANSITIONS.get(current_status, []).copy()


def transition(entity: str, entity_id: str, current_status: Enum, target_status: Enum) -> Enum:
    """Validate a status change, raising InvalidStatusTransitionError if illegal."""
    if not can_transition_to(current_status, target_status):
        raise InvalidStatusTransitionError(
            entity, entity_id, current_status.value, target_status.value
        )
    return target_status


@dataclass
class ProcessExecution:
    """One traversal of a process for one shipment."""

    # Primary identification
    id: str
    process_id: str
    shipment_id: str
    user_id: str
    session_id: str

    # Execution state
    status: ExecutionStatus = ExecutionStatus.IN_PROGRESS
    current_step: int = 1

    # Timing
    started_at: datetime = field(default_factory=utcnow)
    completed_at: Optional[datetime] = None

    notes: Optional[str] = None

    def advance(self, total_steps: int) -> bool:
        """
        Move past the current step.

        Completes the execution when current_step is the last step, otherwise
        increments the pointer. Returns True when this call completed the
        execution.
        """
        if self.current_step >= total_steps:
            self.status = transition(
                "process_execution", self.id, self.status, ExecutionStatus.COMPLETED
            )
            self.completed_at = utcnow()
            return True

        self.status = transition(
            "process_execution", self.id, self.status, ExecutionStatus.IN_PROGRESS
        )
        self.current_step += 1
        return False

    def mark_error(self):
        """Stop the execution on a reported step failure; current_step is kept."""
        self.status = transition(
            "process_execution", self.id, self.status, ExecutionStatus.ERROR
        )

    def get_duration(self) -> Optional[float]:
        """Get execution duration in seconds if completed."""
        if self.completed_at:
            return (self.completed_at - self.started_at).total_seconds()
        return None

    def to_dict(self) -> Dict[str, Any]:
        """Convert execution to dictionary."""
        return {
            "id": self.id,
            "process_id": self.process_id,
            "shipment_id": self.shipment_id,
            "user_id": self.user_id,
            "session_id": self.session_id,
            "status": self.status.value,
            "current_step": self.current_step,
            "started_at": format_datetime(self.started_at),
            "completed_at": format_datetime(self.completed_at),
            "notes": self.notes
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ProcessExecution":
        """Create execution from a database row or JSON dictionary."""
        return cls(
            id=str(data["id"]),
            process_id=str(data["process_id"]),
            shipment_id=str(data["shipment_id"]),
            user_id=str(data["user_id"]),
            session_id=str(data["session_id"]),
            status=ExecutionStatus(data.get("status", "in_progress")),
            current_step=int(data.get("current_step", 1)),
            started_at=parse_datetime(data.get("started_at")) or utcnow(),
            completed_at=parse_datetime(data.get("completed_at")),
            notes=data.get("notes")
        )


@dataclass
class ProcessStepExecution:
    """Ledger row: status of one process step within one execution."""

    id: str
    process_execution_id: str
    step_id: str

    status: StepStatus = StepStatus.PENDING
    completed_at: Optional[datetime] = None
    error_description: Optional[str] = None
    image_url: Optional[str] = None

    def complete(self):
        """Mark the step as completed."""
        self.status = transition("process_step_execution", self.id, self.status, StepStatus.COMPLETED)
        self.completed_at = utcnow()

    def fail(self, error_description: str):
        """Mark the step as failed with the operator's description."""
        self.status = transition("process_step_execution", self.id, self.status, StepStatus.ERROR)
        self.error_description = error_description

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "process_execution_id": self.process_execution_id,
            "step_id": self.step_id,
            "status": self.status.value,
            "completed_at": format_datetime(self.completed_at),
            "error_description": self.error_description,
            "image_url": self.image_url
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ProcessStepExecution":
        return cls(
            id=str(data["id"]),
            process_execution_id=str(data["process_execution_id"]),
            step_id=str(data["step_id"]),
            status=StepStatus(data.get("status", "pending")),
            completed_at=parse_datetime(data.get("completed_at")),
            error_description=data.get("error_description"),
            image_url=data.get("image_url")
        )


@dataclass
class StepCompletionResult:
    """Outcome of completing a step."""

    execution: ProcessExecution
    completed: bool

    def to_dict(self) -> Dict[str, Any]:
        return {"success": True, "completed": self.completed}


@dataclass
class ErrorReportResult:
    """Outcome of reporting a step error."""

    execution: ProcessExecution
    alert: Any

    def to_dict(self) -> Dict[str, Any]:
        return {"success": True, "alert": self.alert.to_dict()}
