"""
Utilities package for Customs Process Tracker

Contains utility modules for database management, configuration and logging.
"""

from .database import DatabaseManager
from .config import TrackerSettings, load_settings
from .logger import setup_logger, get_logger, set_log_context, LoggerContext

__all__ = [
    "DatabaseManager",
    "TrackerSettings",
    "load_settings",
    "setup_logger",
    "get_logger",
    "set_log_context",
    "LoggerContext"
]
