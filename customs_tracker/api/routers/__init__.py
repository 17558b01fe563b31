"""
HTTP routers, one per resource.
"""

from . import processes, sessions, shipments, alerts, exemplary, assistant

ALL_ROUTERS = [
    processes.router,
    sessions.router,
    shipments.router,
    alerts.router,
    exemplary.router,
    assistant.router
]

__all__ = ["ALL_ROUTERS"]
