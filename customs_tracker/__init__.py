"""
Customs Process Tracker

Backend for a customs-logistics workflow tracker. Operators open a work
session, scan a shipment code and walk the shipment through the ordered steps
of a customs process, reporting errors along the way. Administrators monitor
the alerts those errors raise and curate exemplary process examples.

Key Features:
- Process execution state machine with a per-step ledger
- Transactional PostgreSQL persistence through asyncpg
- REST API (FastAPI) secured by a hosted identity provider
- Structured JSON logging with per-request context
- Command-line interface for serving and operations

Usage:
    from customs_tracker import ProcessExecutionController
    from customs_tracker.utils import DatabaseManager

    db_manager = DatabaseManager("postgresql://localhost/customs_tracker")
    await db_manager.initialize()

    controller = ProcessExecutionController(db_manager)
    execution = await controller.start(shipment_id, user_id)

    result = await controller.complete_step(execution.id, step_id, user_id)
    print(f"Process completed: {result.completed}")
"""

__version__ = "1.0.0"
__author__ = "Customs Process Tracker Team"
__license__ = "MIT"

# Core controller
from .core.controller import ProcessExecutionController

# Data models
from .models.process import Process, ProcessStep, ProcessType
from .models.execution import ProcessExecution, ProcessStepExecution, ExecutionStatus, StepStatus
from .models.alert import Alert, AlertType
from .models.shipment import Shipment, ShipmentStatus, ShipmentType

# Services
from .services.session_manager import SessionManager
from .services.alert_service import AlertService

# Utilities
from .utils.database import DatabaseManager
from .utils.config import TrackerSettings, load_settings
from .utils.logger import setup_logger, get_logger

# Exceptions
from .core.exceptions import (
    TrackerError,
    NoActiveSessionError,
    ShipmentNotFoundError,
    NoApplicableProcessError,
    ExecutionNotFoundError,
    InvalidStatusTransitionError,
    StepOutOfOrderError,
    DatabaseError,
    ConfigurationError
)

__all__ = [
    # Core
    "ProcessExecutionController",

    # Models
    "Process",
    "ProcessStep",
    "ProcessType",
    "ProcessExecution",
    "ProcessStepExecution",
    "ExecutionStatus",
    "StepStatus",
    "Alert",
    "AlertType",
    "Shipment",
    "ShipmentStatus",
    "ShipmentType",

    # Services
    "SessionManager",
    "AlertService",

    # Utilities
    "DatabaseManager",
    "TrackerSettings",
    "load_settings",
    "setup_logger",
    "get_logger",

    # Exceptions
    "TrackerError",
    "NoActiveSessionError",
    "ShipmentNotFoundError",
    "NoApplicableProcessError",
    "ExecutionNotFoundError",
    "InvalidStatusTransitionError",
    "StepOutOfOrderError",
    "DatabaseError",
    "ConfigurationError",

    # Package metadata
    "__version__",
    "__author__",
    "__license__"
]

# Package-level configuration
import logging
logging.getLogger(__name__).addHandler(logging.NullHandler())
