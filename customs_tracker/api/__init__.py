"""
HTTP API package for Customs Process Tracker
"""

from .app import create_app
from .auth import IdentityProvider, AuthenticatedUser

__all__ = ["create_app", "IdentityProvider", "AuthenticatedUser"]
