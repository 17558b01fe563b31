"""
CLI package for Customs Process Tracker

Provides command-line interface for serving the API, preparing the database
and inspecting executions and alerts.
"""

from .main import main, cli

__all__ = ["main", "cli"]
