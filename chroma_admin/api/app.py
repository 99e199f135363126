"""FastAPI application entry point.

Configures the application with logging, exception handling, metrics,
health checks and the collection/search routes.
"""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from datetime import UTC, datetime
from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, Response

from chroma_admin import __version__
from chroma_admin.api.dependencies import ServiceContainer
from chroma_admin.api.routes import router
from chroma_admin.config import Settings, get_settings
from chroma_admin.exceptions import (
    ChromaAdminError,
    ErrorCode,
    InternalError,
    InvalidArgumentError,
)
from chroma_admin.logging_config import get_logger, setup_logging
from chroma_admin.observability.metrics import (
    MetricsMiddleware,
    get_metrics,
    get_metrics_content_type,
)

logger = get_logger(__name__)

STATUS_CODES: dict[ErrorCode, int] = {
    ErrorCode.INVALID_ARGUMENT: 400,
    ErrorCode.INVALID_NAME: 400,
    ErrorCode.COLLECTION_NOT_FOUND: 404,
    ErrorCode.DOCUMENT_NOT_FOUND: 404,
    ErrorCode.REQUEST_TIMEOUT: 408,
    ErrorCode.COLLECTION_EXISTS: 409,
    ErrorCode.EMBEDDING_GENERATION_FAILED: 500,
    ErrorCode.INTERNAL_ERROR: 500,
    ErrorCode.UPSTREAM_UNAVAILABLE: 503,
}


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager.

    Handles startup and shutdown events.
    """
    settings: Settings = app.state.services.settings
    setup_logging(level=settings.log_level)
    logger.info(
        "Starting Chroma Admin",
        extra={
            "version": __version__,
            "environment": settings.environment.value,
            "chroma_url": settings.chroma.url,
        },
    )

    yield

    await app.state.services.aclose()
    logger.info("Shutting down Chroma Admin")


def create_app(services: ServiceContainer | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        services: Prebuilt services (for testing). Built from settings
            if not provided.

    Returns:
        Configured FastAPI application instance.
    """
    services = services or ServiceContainer.build()
    settings = services.settings

    app = FastAPI(
        title="Chroma Admin",
        description="Administrative API over a Chroma vector database",
        version=__version__,
        lifespan=lifespan,
        debug=settings.debug,
    )
    app.state.services = services

    app.add_middleware(MetricsMiddleware)

    app.add_exception_handler(ChromaAdminError, chroma_admin_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, chroma_admin_exception_handler)

    app.include_router(router)
    app.add_api_route("/health", health_check, methods=["GET"], tags=["Health"])
    app.add_api_route("/health/ready", readiness_check, methods=["GET"], tags=["Health"])
    app.add_api_route("/health/live", liveness_check, methods=["GET"], tags=["Health"])
    app.add_api_route(
        "/metrics",
        metrics_endpoint,
        methods=["GET"],
        tags=["Observability"],
        include_in_schema=False,
    )

    return app


def get_status_code(code: ErrorCode) -> int:
    """Map an error code to an HTTP status code."""
    return STATUS_CODES.get(code, 500)


async def chroma_admin_exception_handler(
    request: Request,
    exc: Exception,
) -> JSONResponse:
    """Handle ChromaAdminError exceptions.

    Converts exceptions to structured JSON responses. Anything outside the
    error taxonomy is reported as INTERNAL_ERROR.
    """
    if not isinstance(exc, ChromaAdminError):
        logger.error(f"Unhandled error: {exc}", exc_info=exc, extra={"path": request.url.path})
        exc = InternalError(str(exc) or type(exc).__name__)

    status_code = get_status_code(exc.code)
    log = logger.error if status_code >= 500 else logger.warning
    log(
        f"Request failed: {exc.message}",
        extra={
            "error_code": exc.code.value,
            "path": request.url.path,
            "details": exc.details,
        },
    )

    return JSONResponse(status_code=status_code, content=exc.to_dict())


async def validation_exception_handler(
    request: Request,
    exc: Exception,
) -> JSONResponse:
    """Report malformed request bodies as invalid-argument errors (400)."""
    errors: list[Any] = exc.errors() if isinstance(exc, RequestValidationError) else []
    error = InvalidArgumentError(
        "Invalid request",
        details={
            "errors": [
                {"loc": list(err.get("loc", ())), "msg": err.get("msg", "")}
                for err in errors
            ]
        },
    )
    return await chroma_admin_exception_handler(request, error)


async def health_check() -> dict[str, Any]:
    """Basic health check endpoint.

    Returns:
        Health status with version and timestamp.
    """
    return {
        "status": "healthy",
        "version": __version__,
        "timestamp": datetime.now(UTC).isoformat(),
    }


async def readiness_check(request: Request) -> dict[str, Any]:
    """Readiness probe.

    Reports whether the Chroma server answers a heartbeat.

    Returns:
        Readiness status with component checks.
    """
    checks: dict[str, str] = {"config": "ok"}

    services: ServiceContainer = request.app.state.services
    try:
        await services.gateway.heartbeat()
        checks["chroma"] = "ok"
    except ChromaAdminError as e:
        checks["chroma"] = e.code.value

    all_ok = all(v == "ok" for v in checks.values())

    return {
        "status": "ready" if all_ok else "not_ready",
        "checks": checks,
        "timestamp": datetime.now(UTC).isoformat(),
    }


async def liveness_check() -> dict[str, str]:
    """Liveness probe.

    Returns:
        Liveness status.
    """
    return {"status": "alive"}


async def metrics_endpoint() -> Response:
    """Expose Prometheus metrics."""
    return Response(content=get_metrics(), media_type=get_metrics_content_type())


def run() -> None:
    """Serve the application with uvicorn."""
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "chroma_admin.api.app:app",
        host=settings.api_host,
        port=settings.api_port,
        log_level=settings.log_level.lower(),
    )


# Create the application instance
app = create_app()
