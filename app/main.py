"""Project Tracker API - Main Application Module.

This module initializes the FastAPI application with configuration,
middleware, routing, and lifecycle management for the project collection.
"""

import logging
import sys
import uuid
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from pathlib import Path

# Add the project root to Python path if running directly
if __name__ == "__main__":
    project_root = Path(__file__).parent.parent
    sys.path.insert(0, str(project_root))

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.core.config import Settings, settings
from app.core.dependencies import create_project_store
from app.core.logging import configure_logging
from app.domains.project.service import create_project_service
from app.schemas.project import LoadState

logger = logging.getLogger(__name__)


def _timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Mount the project collection on startup and tear it down on shutdown."""
    config: Settings = app.state.settings
    logger.info("🚀 Starting %s...", config.app_name)

    store = getattr(app.state, "project_store", None)
    if store is None:
        store = await create_project_store(config)
        app.state.project_store = store

    service = create_project_service(store, config)
    app.state.project_service = service
    # A failed load leaves the collection empty and reported as failed
    await service.load()

    yield

    logger.info("🛑 Shutting down %s...", config.app_name)
    service.close()
    await store.close()
    logger.info("✅ Row-store connections closed")


def create_app(config: Settings | None = None, store=None) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        config: Settings to use instead of the environment-derived defaults
        store: Row-store to mount instead of building one from settings
    """
    config = config or settings
    configure_logging(config)

    app = FastAPI(
        title=config.app_name,
        description="Project tracking dashboard backend",
        version=config.version,
        lifespan=lifespan,
        docs_url="/docs" if config.is_development else None,
        redoc_url="/redoc" if config.is_development else None,
    )
    app.state.settings = config
    app.state.project_store = store

    # Add middleware
    setup_middleware(app, config)

    # Add exception handlers
    setup_exception_handlers(app)

    # Include routers
    setup_routers(app, config)

    return app


def setup_middleware(app: FastAPI, config: Settings):
    """Configure application middleware."""
    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.allowed_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Request ID middleware
    @app.middleware("http")
    async def add_request_id(request: Request, call_next):
        request_id = str(uuid.uuid4())
        request.state.request_id = request_id
        response = await call_next(request)
        response.headers["X-Request-ID"] = request_id
        return response


def setup_exception_handlers(app: FastAPI):
    """Configure global exception handlers."""

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        # Handle custom exceptions that have structured detail
        if isinstance(exc.detail, dict) and "message" in exc.detail:
            message = exc.detail["message"]
            error_code = exc.detail.get("error_code", "HTTP_ERROR")
            details = exc.detail.get("details")
        else:
            message = str(exc.detail) if exc.detail else "An error occurred"
            error_code = "HTTP_ERROR"
            details = None

        return JSONResponse(
            status_code=exc.status_code,
            content={
                "status": "error",
                "message": message,
                "error_code": error_code,
                "details": details,
                "timestamp": _timestamp(),
                "request_id": getattr(request.state, "request_id", None),
            },
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        # Convert errors to JSON-serializable format
        errors = []
        for error in exc.errors():
            error_dict = {
                "loc": list(error.get("loc", [])),
                "msg": str(error.get("msg", "Validation error")),
                "type": error.get("type", "value_error"),
            }
            if "input" in error:
                error_dict["input"] = str(error["input"])
            errors.append(error_dict)

        return JSONResponse(
            status_code=422,
            content={
                "status": "error",
                "message": "Validation error",
                "error_code": "REQUEST_VALIDATION_ERROR",
                "details": errors,
                "timestamp": _timestamp(),
                "request_id": getattr(request.state, "request_id", None),
            },
        )


def setup_routers(app: FastAPI, config: Settings):
    """Configure application routers."""
    from app.domains.project.controller import router as project_router

    @app.get("/health")
    async def health_check(request: Request):
        """Report the state of the project collection."""
        service = getattr(request.app.state, "project_service", None)
        load_state = service.load_state if service is not None else LoadState.loading
        healthy = load_state == LoadState.ready

        return JSONResponse(
            status_code=200 if healthy else 503,
            content={
                "status": "healthy" if healthy else "degraded",
                "version": config.version,
                "environment": config.environment.value,
                "timestamp": _timestamp(),
                "services": {
                    "store": config.store_backend.value,
                    "collection": load_state.value,
                    "load_error": service.load_error if service is not None else None,
                    "projects": len(service.projects) if service is not None else 0,
                },
            },
        )

    @app.get("/")
    async def root():
        """Root endpoint with API information."""
        return {
            "name": config.app_name,
            "version": config.version,
            "description": "Project tracking with filterable, sortable views",
            "docs_url": "/docs" if config.is_development else None,
        }

    app.include_router(project_router)


# Create the application instance
app = create_app()


def main():
    """Entry point for running the application directly."""
    import uvicorn

    uvicorn.run(
        "app.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.is_development,
        log_level=settings.log_level.value.lower(),
    )


if __name__ == "__main__":
    main()
