"""
Data models for Customs Process Tracker

This module contains the data models used throughout the tracker, including
process templates, executions and their step ledger, alerts, sessions,
shipments and reference content.
"""

# Process catalog models
from .process import (
    Process,
    ProcessStep,
    ProcessType
)

# Execution models
from .execution import (
    ProcessExecution,
    ProcessStepExecution,
    ExecutionStatus,
    StepStatus,
    StepCompletionResult,
    ErrorReportResult,
    EXECUTION_STATUS_TRANSITIONS,
    STEP_STATUS_TRANSITIONS,
    can_transition_to,
    get_valid_transitions
)

# Alert models
from .alert import Alert, AlertType, format_step_error_message

# Session and profile models
from .session import WorkSession, Profile, UserRole

# Shipment models
from .shipment import Shipment, ShipmentItem, ShipmentStatus, ShipmentType

# Reference content models
from .exemplary import ExemplaryProcess, AssistantAnswer, AssistantLog

__all__ = [
    # Process catalog models
    "Process",
    "ProcessStep",
    "ProcessType",

    # Execution models
    "ProcessExecution",
    "ProcessStepExecution",
    "ExecutionStatus",
    "StepStatus",
    "StepCompletionResult",
    "ErrorReportResult",
    "EXECUTION_STATUS_TRANSITIONS",
    "STEP_STATUS_TRANSITIONS",
    "can_transition_to",
    "get_valid_transitions",

    # Alert models
    "Alert",
    "AlertType",
    "format_step_error_message",

    # Session and profile models
    "WorkSession",
    "Profile",
    "UserRole",

    # Shipment models
    "Shipment",
    "ShipmentItem",
    "ShipmentStatus",
    "ShipmentType",

    # Reference content models
    "ExemplaryProcess",
    "AssistantAnswer",
    "AssistantLog"
]
