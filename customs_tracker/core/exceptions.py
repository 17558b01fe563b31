"""
Exception classes for Customs Process Tracker

Provides the hierarchy of exceptions raised by the execution controller and
the supporting services. Each exception carries the HTTP status the API
layer reports it with.
"""

from typing import Optional, Dict, Any


class TrackerError(Exception):
    """Base exception for all tracker errors."""

    http_status = 500

    def __init__(self, message: str, error_code: Optional[str] = None, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for JSON serialization."""
        return {
            "error": self.message,
            "error_code": self.error_code,
            "details": self.details
        }


# Precondition failures

class NoActiveSessionError(TrackerError):
    """Raised when the acting user has no open work session."""

    http_status = 400

    def __init__(self, user_id: str):
        super().__init__(
            "No active session found",
            error_code="NO_ACTIVE_SESSION",
            details={"user_id": user_id}
        )


class SessionAlreadyActiveError(TrackerError):
    """Raised when a user tries to open a second work session."""

    http_status = 400

    def __init__(self, user_id: str, session: Optional[Dict[str, Any]] = None):
        super().__init__(
            "User already has an active session",
            error_code="SESSION_ALREADY_ACTIVE",
            details={"user_id": user_id, "session": session}
        )


class SessionNotFoundError(TrackerError):
    http_status = 404

    def __init__(self, session_id: str):
        super().__init__(
            f"Session {session_id} not found",
            error_code="SESSION_NOT_FOUND",
            details={"session_id": session_id}
        )


class ShipmentNotFoundError(TrackerError):
    """Raised when a shipment cannot be found by id or tracking code."""

    http_status = 404

    def __init__(self, shipment_ref: str):
        super().__init__(
            "Shipment not found",
            error_code="SHIPMENT_NOT_FOUND",
            details={"shipment": shipment_ref}
        )


class NoApplicableProcessError(TrackerError):
    """Raised when no process template matches the shipment type."""

    http_status = 404

    def __init__(self, shipment_type: str):
        super().__init__(
            "No suitable process found for this shipment type",
            error_code="NO_APPLICABLE_PROCESS",
            details={"shipment_type": shipment_type}
        )


class ProcessNotFoundError(TrackerError):
    http_status = 404

    def __init__(self, process_id: str):
        super().__init__(
            f"Process {process_id} not found",
            error_code="PROCESS_NOT_FOUND",
            details={"process_id": process_id}
        )


class ExecutionNotFoundError(TrackerError):
    """Raised when a process execution cannot be found."""

    http_status = 404

    def __init__(self, execution_id: str):
        super().__init__(
            "Process execution not found",
            error_code="EXECUTION_NOT_FOUND",
            details={"execution_id": execution_id}
        )


class StepExecutionNotFoundError(TrackerError):
    """Raised when a step has no ledger row in the given execution."""

    http_status = 404

    def __init__(self, execution_id: str, step_id: str):
        super().__init__(
            f"Step {step_id} is not part of execution {execution_id}",
            error_code="STEP_EXECUTION_NOT_FOUND",
            details={"execution_id": execution_id, "step_id": step_id}
        )


class AlertNotFoundError(TrackerError):
    http_status = 404

    def __init__(self, alert_id: str):
        super().__init__(
            f"Alert {alert_id} not found",
            error_code="ALERT_NOT_FOUND",
            details={"alert_id": alert_id}
        )


class ExemplaryProcessNotFoundError(TrackerError):
    http_status = 404

    def __init__(self, exemplary_id: str):
        super().__init__(
            f"Exemplary process {exemplary_id} not found",
            error_code="EXEMPLARY_PROCESS_NOT_FOUND",
            details={"exemplary_process_id": exemplary_id}
        )


# State machine violations

class InvalidStatusTransitionError(TrackerError):
    """Raised when an execution or ledger row is moved to an illegal status."""

    http_status = 409

    def __init__(self, entity: str, entity_id: str, current_status: str, target_status: str):
        super().__init__(
            f"Cannot move {entity} {entity_id} from '{current_status}' to '{target_status}'",
            error_code="INVALID_STATUS_TRANSITION",
            details={
                "entity": entity,
                "entity_id": entity_id,
                "current_status": current_status,
                "target_status": target_status
            }
        )


class StepOutOfOrderError(TrackerError):
    """Raised when a step other than the current one is completed."""

    http_status = 409

    def __init__(self, execution_id: str, step_id: str, current_step: int, step_order: Optional[int]):
        super().__init__(
            f"Step {step_id} is not the current step ({current_step}) of execution {execution_id}",
            error_code="STEP_OUT_OF_ORDER",
            details={
                "execution_id": execution_id,
                "step_id": step_id,
                "current_step": current_step,
                "step_order": step_order
            }
        )


class AlertAlreadyResolvedError(TrackerError):
    http_status = 409

    def __init__(self, alert_id: str):
        super().__init__(
            f"Alert {alert_id} is already resolved",
            error_code="ALERT_ALREADY_RESOLVED",
            details={"alert_id": alert_id}
        )


# Access

class AuthenticationError(TrackerError):
    """Raised when a bearer token is missing or rejected."""

    http_status = 401

    def __init__(self, message: str = "Authentication failed"):
        super().__init__(message, error_code="AUTHENTICATION_ERROR")


class AuthorizationError(TrackerError):
    """Raised when a non-admin calls an admin-only operation."""

    http_status = 403

    def __init__(self, user_id: str, required_role: str = "admin"):
        super().__init__(
            "Unauthorized",
            error_code="AUTHORIZATION_ERROR",
            details={"user_id": user_id, "required_role": required_role}
        )


# Infrastructure

class DatabaseError(TrackerError):
    """Raised when database operations fail."""

    def __init__(self, operation: str, message: str, table: Optional[str] = None):
        super().__init__(
            f"Database operation '{operation}' failed: {message}",
            error_code="DATABASE_ERROR",
            details={"operation": operation, "table": table}
        )


class ConfigurationError(TrackerError):
    """Raised when there's an error in configuration."""

    def __init__(self, config_key: str, message: str):
        super().__init__(
            f"Configuration error for {config_key}: {message}",
            error_code="CONFIGURATION_ERROR",
            details={"config_key": config_key}
        )


class AssistantServiceError(TrackerError):
    """Raised when the external NLP service cannot answer."""

    http_status = 502

    def __init__(self, message: str):
        super().__init__(
            f"Assistant service error: {message}",
            error_code="ASSISTANT_SERVICE_ERROR"
        )


class ErrorRegistry:
    """Registry for tracking and analyzing errors."""

    def __init__(self):
        self.error_counts = {}

    def record_error(self, error: TrackerError):
        """Record an error for analysis."""
        error_type = error.__class__.__name__
        self.error_counts[error_type] = self.error_counts.get(error_type, 0) + 1

    def get_error_statistics(self) -> Dict[str, Any]:
        """Get error statistics for monitoring."""
        return {
            "total_errors": sum(self.error_counts.values()),
            "error_counts": dict(self.error_counts),
            "most_common_error": max(self.error_counts.items(), key=lambda x: x[1])[0] if self.error_counts else None
        }

    def reset(self):
        self.error_counts.clear()


# Global error registry instance
error_registry = ErrorRegistry()
