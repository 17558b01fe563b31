"""
Core package for Customs Process Tracker

Contains the exception hierarchy and the process execution controller. The
controller lives in ``customs_tracker.core.controller`` and is imported from
there so the models can depend on the exceptions without a cycle.
"""

from .exceptions import (
    TrackerError,
    NoActiveSessionError,
    SessionAlreadyActiveError,
    SessionNotFoundError,
    ShipmentNotFoundError,
    NoApplicableProcessError,
    ProcessNotFoundError,
    ExecutionNotFoundError,
    StepExecutionNotFoundError,
    AlertNotFoundError,
    ExemplaryProcessNotFoundError,
    InvalidStatusTransitionError,
    StepOutOfOrderError,
    AlertAlreadyResolvedError,
    AuthenticationError,
    AuthorizationError,
    DatabaseError,
    ConfigurationError,
    AssistantServiceError,
    error_registry
)

__all__ = [
    "TrackerError",
    "NoActiveSessionError",
    "SessionAlreadyActiveError",
    "SessionNotFoundError",
    "ShipmentNotFoundError",
    "NoApplicableProcessError",
    "ProcessNotFoundError",
    "ExecutionNotFoundError",
    "StepExecutionNotFoundError",
    "AlertNotFoundError",
    "ExemplaryProcessNotFoundError",
    "InvalidStatusTransitionError",
    "StepOutOfOrderError",
    "AlertAlreadyResolvedError",
    "AuthenticationError",
    "AuthorizationError",
    "DatabaseError",
    "ConfigurationError",
    "AssistantServiceError",
    "error_registry"
]
