"""
Module: main.py
Description: FastAPI application entry point for HookRelay.

Initializes the FastAPI application with the receiver and trigger
routes, the health endpoint and JSON error handlers.
"""

from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse
from mangum import Mangum

from . import __version__
from .config.settings import get_settings
from .handlers.dependencies import get_dispatcher
from .handlers.trigger import router as trigger_router
from .handlers.webhook import router as webhook_router
from .models.payload import Payload
from .models.response import HealthResponse
from .utils.logger import get_logger, set_log_level

logger = get_logger(__name__)


def log_received_event(data: Any, payload: Payload) -> None:
    """Wildcard handler that records every dispatched event."""
    logger.info("Webhook event received", event_name=payload.event)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Apply settings and register the default handlers on startup."""
    settings = get_settings()
    set_log_level(settings.log_level)
    get_dispatcher().register_wildcard(log_received_event)

    logger.info(
        "Starting HookRelay",
        version=settings.app_version,
        stage=settings.stage,
        signature_scheme=settings.signature_scheme,
        parallel_handlers=settings.parallel_handlers,
    )
    yield
    get_dispatcher().unregister_wildcard(log_received_event)
    logger.info("Shutting down HookRelay")


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """
    Global HTTP exception handler.

    Logs HTTP exceptions and returns {"error": detail}.
    """
    logger.warning(
        "HTTP exception occurred",
        status_code=exc.status_code,
        detail=exc.detail,
        path=request.url.path,
        method=request.method
    )
    return JSONResponse(status_code=exc.status_code, content={"error": exc.detail})


async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Global exception handler for unhandled errors.

    Logs unexpected exceptions and returns a generic error response.
    """
    logger.error(
        "Unhandled exception occurred",
        error=str(exc),
        error_type=type(exc).__name__,
        path=request.url.path,
        method=request.method
    )
    return JSONResponse(status_code=500, content={"error": "Internal Server Error"})


def create_app() -> FastAPI:
    """Build the FastAPI application."""
    app = FastAPI(
        title="HookRelay",
        description="Signed webhook delivery and verification",
        version=__version__,
        lifespan=lifespan,
    )

    app.include_router(webhook_router)
    app.include_router(trigger_router)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(Exception, general_exception_handler)

    @app.get("/health", response_model=HealthResponse)
    async def health_check():
        """Health check endpoint."""
        return HealthResponse(status="ok", version=__version__)

    return app


app = create_app()

# Lambda handler; the lifespan applies LOG_LEVEL and registers default handlers
handler = Mangum(app, lifespan="auto")
