"""
Services package for Customs Process Tracker

Contains the services that surround the execution controller: work sessions,
shipment lookup, the process catalog, alerts, exemplary processes and the
operator assistant.
"""

from .session_manager import SessionManager
from .shipment_service import ShipmentService
from .process_catalog import ProcessCatalog
from .access_control import AccessControl
from .alert_service import AlertService
from .exemplary_service import ExemplaryProcessService
from .assistant_service import AssistantService

__all__ = [
    "SessionManager",
    "ShipmentService",
    "ProcessCatalog",
    "AccessControl",
    "AlertService",
    "ExemplaryProcessService",
    "AssistantService"
]
