"""
FastAPI application factory for Customs Process Tracker

``create_app()`` builds the services around one DatabaseManager, stores them
on ``app.state`` for the dependencies in ``deps.py``, and maps tracker
exceptions to HTTP responses.
"""

from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Optional

import httpx
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .. import __version__
from ..core.controller import ProcessExecutionController
from ..core.exceptions import TrackerError, DatabaseError, ConfigurationError, error_registry
from ..services import (
    SessionManager,
    ShipmentService,
    ProcessCatalog,
    AccessControl,
    AlertService,
    ExemplaryProcessService,
    AssistantService
)
from ..utils.config import TrackerSettings, load_settings
from ..utils.database import DatabaseManager
from ..utils.logger import get_logger
from .auth import IdentityProvider
from .routers import ALL_ROUTERS

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Open the connection pool on startup and release clients on shutdown."""
    logger.info("Customs tracker API starting", extra={"version": app.version})
    await app.state.db.initialize()
    try:
        yield
    finally:
        logger.info("Customs tracker API shutting down")
        await app.state.assistant_service.close()
        await app.state.identity_provider.close()
        await app.state.db.close()


async def tracker_error_handler(request: Request, exc: TrackerError) -> JSONResponse:
    """Render a TrackerError with the status it maps to."""
    error_registry.record_error(exc)

    if isinstance(exc, (DatabaseError, ConfigurationError)):
        logger.error("Request failed", extra={
            "path": request.url.path,
            "method": request.method,
            "error_code": exc.error_code,
            "error": exc.message
        })
        # Store details stay in the logs
        return JSONResponse(
            status_code=exc.http_status,
            content={"error": "Internal server error", "error_code": exc.error_code, "details": {}}
        )

    logger.info("Request rejected", extra={
        "path": request.url.path,
        "method": request.method,
        "status_code": exc.http_status,
        "error_code": exc.error_code
    })
    return JSONResponse(status_code=exc.http_status, content=exc.to_dict())


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Render any other failure as a generic 500."""
    logger.error("Unhandled error", exc_info=exc, extra={
        "path": request.url.path,
        "method": request.method,
        "error_type": type(exc).__name__
    })
    return JSONResponse(
        status_code=500,
        content={"error": "Internal server error", "error_code": "INTERNAL_ERROR", "details": {}}
    )


def create_app(
    settings: Optional[TrackerSettings] = None,
    database_manager: Optional[DatabaseManager] = None,
    identity_provider: Optional[IdentityProvider] = None,
    assistant_http_client: Optional[httpx.AsyncClient] = None
) -> FastAPI:
    """
    Build a fully wired FastAPI application.

    Args:
        settings: Tracker settings; loaded from the environment when omitted
        database_manager: Store shared by every service
        identity_provider: Token verifier; built from settings when omitted
        assistant_http_client: Optional client for the NLP service

    Returns:
        Configured FastAPI instance
    """
    settings = settings or load_settings()

    if identity_provider is None:
        settings.require("auth_url", "auth_service_key")
        identity_provider = IdentityProvider(
            settings.auth_url,
            settings.auth_service_key,
            timeout=settings.auth_timeout
        )

    db = database_manager or DatabaseManager(
        settings.database_url,
        pool_size=settings.pool_size,
        max_overflow=settings.max_overflow,
        command_timeout=settings.command_timeout
    )

    app = FastAPI(
        title="Customs Process Tracker API",
        version=__version__,
        lifespan=lifespan
    )

    app.state.settings = settings
    app.state.db = db
    app.state.identity_provider = identity_provider
    app.state.controller = ProcessExecutionController(db)
    app.state.session_manager = SessionManager(db)
    app.state.shipment_service = ShipmentService(db)
    app.state.process_catalog = ProcessCatalog(db)
    app.state.access_control = AccessControl(db)
    app.state.alert_service = AlertService(db)
    app.state.exemplary_service = ExemplaryProcessService(db)
    app.state.assistant_service = AssistantService(
        db,
        service_url=settings.nlp_service_url,
        api_key=settings.nlp_service_api_key,
        timeout=settings.nlp_timeout,
        http_client=assistant_http_client
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"]
    )

    app.add_exception_handler(TrackerError, tracker_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)

    @app.get("/health")
    async def health():
        """Liveness probe with configuration flags."""
        return {
            "status": "ok",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "version": __version__,
            "port": settings.port,
            "allowed_origins": settings.cors_origins,
            "database_healthy": await db.is_healthy(),
            "auth_configured": bool(settings.auth_url and settings.auth_service_key),
            "assistant_remote_enabled": settings.assistant_enabled,
            "errors": error_registry.get_error_statistics()
        }

    for router in ALL_ROUTERS:
        app.include_router(router)

    return app
