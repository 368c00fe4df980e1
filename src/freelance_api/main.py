from __future__ import annotations

import logging
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .errors import FreelanceError, NotFoundError, UpstreamError, ValidationError
from .logging_config import configure_logging
from .repositories import Stores, build_stores_from_settings
from .routers import clients as clients_router
from .routers import dashboard as dashboard_router
from .routers import invoices as invoices_router
from .routers import projects as projects_router
from .routers import tasks as tasks_router
from .routers import time_tracking as time_tracking_router
from .settings import Settings, get_settings

logger = logging.getLogger(__name__)

openapi_tags = [
    {"name": "health", "description": "Service health and status endpoints."},
    {"name": "clients", "description": "CRUD operations for clients."},
    {"name": "projects", "description": "CRUD operations for client projects."},
    {"name": "tasks", "description": "Kanban tasks of projects."},
    {"name": "invoices", "description": "Invoices and their draft/sent/paid lifecycle."},
    {"name": "time-tracking", "description": "Per-task timers and time summaries."},
    {"name": "dashboard", "description": "Derived dashboard, project and client views."},
]

_STATUS_BY_ERROR = {
    NotFoundError: 404,
    ValidationError: 422,
    UpstreamError: 502,
}


# PUBLIC_INTERFACE
def create_app(stores: Optional[Stores] = None, settings: Optional[Settings] = None) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        stores: Stores to serve; built from settings (fixtures, latency) when omitted.
        settings: Settings to use; read from the environment when omitted.
    """
    settings = settings or get_settings()
    configure_logging(settings.log_level)

    app = FastAPI(
        title="Freelance Dashboard Backend",
        description="Clients, projects, kanban tasks, invoices and time tracking for a freelancer dashboard.",
        version="0.1.0",
        openapi_tags=openapi_tags,
    )
    app.state.stores = stores if stores is not None else build_stores_from_settings(settings)
    app.state.settings = settings

    # Configure CORS based on settings (.env -> CORS_ALLOW_ORIGINS), with '*' fallback
    allow_all = (settings.cors_allow_origins == ["*"]) or (len(settings.cors_allow_origins) == 0)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"] if allow_all else settings.cors_allow_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        """
        Return a consistent JSON structure for request validation errors.

        Response format:
            {
                "error": "ValidationError",
                "detail": [... pydantic/fastapi error details ...],
                "message": "Request validation failed"
            }
        """
        return JSONResponse(
            status_code=422,
            content={
                "error": "ValidationError",
                "message": "Request validation failed",
                "detail": jsonable_encoder(exc.errors()),
            },
        )

    @app.exception_handler(FreelanceError)
    async def domain_exception_handler(request: Request, exc: FreelanceError) -> JSONResponse:
        """
        Map domain errors onto HTTP statuses with the same body shape as
        request validation errors.
        """
        status_code = next((code for cls, code in _STATUS_BY_ERROR.items() if isinstance(exc, cls)), 400)
        if status_code >= 500:
            logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
        return JSONResponse(
            status_code=status_code,
            content={
                "error": type(exc).__name__,
                "message": exc.message,
                "detail": jsonable_encoder(exc.detail),
            },
        )

    # PUBLIC_INTERFACE
    @app.get("/", summary="Health Check", tags=["health"])
    def health_check():
        """
        Health check endpoint.

        Returns:
            A JSON object indicating service health.
        """
        return {"message": "Healthy", "simulated_latency": settings.simulate_latency}

    app.include_router(clients_router.router)
    app.include_router(projects_router.router)
    app.include_router(tasks_router.router)
    app.include_router(invoices_router.router)
    app.include_router(time_tracking_router.router)
    app.include_router(dashboard_router.router)
    return app


app = create_app()
