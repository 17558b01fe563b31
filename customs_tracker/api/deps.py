"""
FastAPI dependencies: the authenticated user and the services stored on
``app.state`` by ``create_app()``.
"""

from typing import Optional

from fastapi import Depends, Header, Request

from ..core.controller import ProcessExecutionController
from ..core.exceptions import AuthenticationError
from ..models.session import Profile
from ..services import (
    SessionManager,
    ShipmentService,
    ProcessCatalog,
    AccessControl,
    AlertService,
    ExemplaryProcessService,
    AssistantService
)
from ..utils.logger import set_log_context
from .auth import AuthenticatedUser


async def get_current_user(
    request: Request,
    authorization: Optional[str] = Header(default=None)
) -> AuthenticatedUser:
    """Verify the bearer token of the request."""
    scheme, _, token = (authorization or "").partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise AuthenticationError("No token provided")

    user = await request.app.state.identity_provider.verify_token(token.strip())
    set_log_context(user_id=user.id)
    return user


def get_controller(request: Request) -> ProcessExecutionController:
    return request.app.state.controller


def get_session_manager(request: Request) -> SessionManager:
    return request.app.state.session_manager


def get_shipment_service(request: Request) -> ShipmentService:
    return request.app.state.shipment_service


def get_process_catalog(request: Request) -> ProcessCatalog:
    return request.app.state.process_catalog


def get_access_control(request: Request) -> AccessControl:
    return request.app.state.access_control


def get_alert_service(request: Request) -> AlertService:
    return request.app.state.alert_service


def get_exemplary_service(request: Request) -> ExemplaryProcessService:
    return request.app.state.exemplary_service


def get_assistant_service(request: Request) -> AssistantService:
    return request.app.state.assistant_service


async def require_admin(
    user: AuthenticatedUser = Depends(get_current_user),
    access: AccessControl = Depends(get_access_control)
) -> Profile:
    """Authenticated user whose profile has the admin role."""
    return await access.require_admin(user.id)
