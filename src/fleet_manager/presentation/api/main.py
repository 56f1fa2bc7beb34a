"""FastAPI main application module."""

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException

from ...domain.exceptions import AuthenticationError, FleetManagementError, ValidationError
from ...infrastructure.logging import get_logger, setup_logging
from ...infrastructure.services import ServiceFactory
from .config import Settings, get_settings
from .middleware import RequestResponseLoggingMiddleware
from .routes import auth, dashboard, health, vehicle_marks, vehicles
from .schemas.common import envelope_response

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan management."""
    settings: Settings = app.state.settings
    setup_logging(
        log_level=settings.log_level,
        service_name=settings.service_name,
        log_dir=settings.log_dir,
        enable_file=settings.log_to_file
    )
    logger.info("Starting Fleet Management API")
    await app.state.service_factory.initialize()

    yield

    logger.info("Shutting down Fleet Management API")
    await app.state.service_factory.shutdown()


def _format_validation_error(error: dict) -> str:
    location = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
    return f"{location}: {error.get('msg')}" if location else str(error.get("msg"))


def add_exception_handlers(app: FastAPI) -> None:
    """Render every error in the response envelope."""

    @app.exception_handler(FleetManagementError)
    async def fleet_error_handler(request: Request, exc: FleetManagementError):
        if exc.status_code >= 500:
            logger.error(f"Unhandled domain error on {request.url.path}: {exc.message}", exc_info=exc)
        else:
            logger.warning(f"{type(exc).__name__} on {request.method} {request.url.path}: {exc.message}")

        errors = exc.errors if isinstance(exc, ValidationError) and exc.errors else None
        headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, AuthenticationError) else None
        return envelope_response(
            success=False,
            status_code=exc.status_code,
            message=exc.message,
            error=exc.message,
            errors=errors,
            headers=headers
        )

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        errors = [_format_validation_error(error) for error in exc.errors()]
        logger.warning(f"Request validation failed on {request.url.path}: {errors}")
        return envelope_response(
            success=False,
            status_code=400,
            message="Validation error",
            error="Invalid request",
            errors=errors
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        return envelope_response(
            success=False,
            status_code=exc.status_code,
            message=str(exc.detail),
            headers=getattr(exc, "headers", None)
        )

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        logger.error(f"Unhandled error on {request.method} {request.url.path}", exc_info=exc)
        return envelope_response(
            success=False,
            status_code=500,
            message="Internal server error",
            error="Internal server error"
        )


def create_app(
    settings: Optional[Settings] = None,
    service_factory: Optional[ServiceFactory] = None
) -> FastAPI:
    """Create and configure FastAPI application."""
    settings = settings or get_settings()

    app = FastAPI(
        title="Fleet Management API",
        description="Vehicle fleet management: vehicles, catalog, users and dashboard metrics",
        version="1.0.0",
        debug=settings.debug,
        lifespan=lifespan
    )
    app.state.settings = settings
    app.state.service_factory = service_factory or ServiceFactory(settings)

    add_exception_handlers(app)

    app.add_middleware(
        RequestResponseLoggingMiddleware,
        log_request_body=settings.log_request_body
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=settings.allowed_methods,
        allow_headers=settings.allowed_headers,
        expose_headers=["X-Correlation-ID"],
    )

    prefix = settings.api_prefix
    app.include_router(health.router, prefix=prefix, tags=["health"])
    app.include_router(auth.router, prefix=f"{prefix}/auth", tags=["authentication"])
    app.include_router(vehicles.router, prefix=f"{prefix}/vehicles", tags=["vehicles"])
    app.include_router(vehicle_marks.router, prefix=f"{prefix}/vehicle-marks", tags=["vehicle-marks"])
    app.include_router(dashboard.router, prefix=f"{prefix}/dashboard", tags=["dashboard"])

    return app


# Create app instance
app = create_app()
