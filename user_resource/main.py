"""
FastAPI application for the user resource service.

Serves CRUD over an in-memory user store at /users, the enriched API
description document at /apidocs.json and, when configured, a static
documentation viewer at /apidocs/.
"""

from contextlib import asynccontextmanager
from datetime import datetime
from pathlib import Path
from typing import AsyncGenerator, Optional

import structlog
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from .apidocs import API_DESCRIPTION, API_TITLE, API_VERSION, install_openapi
from .config import Settings, settings as default_settings
from .exceptions import UserServiceException
from .logging_config import setup_logging
from .metrics import metrics_endpoint, track_request_metrics, update_store_size
from .middleware import PrometheusMiddleware, RequestLoggingMiddleware
from .models import HealthResponse
from .negotiation import write_error
from .routers import users
from .store import UserStore

logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager."""
    config: Settings = app.state.settings
    logger.info(
        "Starting User Service",
        service=config.SERVICE_NAME,
        host=config.HOST,
        port=config.PORT,
        apidocs_path=config.APIDOCS_PATH,
    )
    update_store_size(app.state.user_store.count())

    yield

    logger.info("Shutting down User Service", users=app.state.user_store.count())


def create_app(config: Optional[Settings] = None, store: Optional[UserStore] = None) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        config: Settings to use, defaults to the environment-derived settings
        store: User store to serve, defaults to a new empty store

    Returns:
        Configured FastAPI application
    """
    config = config or default_settings

    app = FastAPI(
        title=API_TITLE,
        description=API_DESCRIPTION,
        version=API_VERSION,
        openapi_url=config.APIDOCS_PATH,
        docs_url="/docs",
        redoc_url=None,
        separate_input_output_schemas=False,
        lifespan=lifespan,
    )
    app.state.settings = config
    app.state.user_store = store if store is not None else UserStore()

    # Add middleware (order matters - first added is last executed)
    app.add_middleware(RequestLoggingMiddleware)
    if config.METRICS_ENABLED:
        app.add_middleware(PrometheusMiddleware, track_func=track_request_metrics)

    @app.exception_handler(UserServiceException)
    async def user_service_exception_handler(request: Request, exc: UserServiceException):
        """Render domain errors in the negotiated media type."""
        logger.warning(
            "Request rejected",
            path=request.url.path,
            method=request.method,
            status_code=exc.status_code,
            error=exc.message,
            **exc.details,
        )
        return write_error(request, exc.message, exc.status_code)

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        """Handle all unhandled exceptions."""
        logger.error(
            "Unhandled exception",
            path=request.url.path,
            method=request.method,
            error=str(exc),
            exc_info=True,
        )
        return JSONResponse(
            status_code=500,
            content={"detail": "An unexpected error occurred"},
        )

    @app.get("/health", response_model=HealthResponse, tags=["health"])
    async def health_check(request: Request):
        """Health check endpoint."""
        return {
            "status": "healthy",
            "service": config.SERVICE_NAME,
            "version": config.SERVICE_VERSION,
            "timestamp": datetime.now().isoformat(),
            "users": request.app.state.user_store.count(),
        }

    if config.METRICS_ENABLED:
        app.add_api_route("/metrics", metrics_endpoint, include_in_schema=False)

    app.include_router(users.router)

    if config.APIDOCS_UI_DIR:
        ui_dir = Path(config.APIDOCS_UI_DIR)
        if ui_dir.is_dir():
            app.mount("/apidocs", StaticFiles(directory=str(ui_dir), html=True), name="apidocs")
            logger.info("Documentation viewer mounted", directory=str(ui_dir))
        else:
            logger.warning("Documentation viewer directory not found", directory=str(ui_dir))

    install_openapi(app)
    return app


setup_logging(log_level=default_settings.LOG_LEVEL, use_json=default_settings.LOG_JSON)

app = create_app()


def run() -> None:
    """Start the service with uvicorn."""
    import uvicorn

    uvicorn.run(
        "user_resource.main:app",
        host=default_settings.HOST,
        port=default_settings.PORT,
        log_level=default_settings.LOG_LEVEL.lower(),
    )


if __name__ == "__main__":
    run()
