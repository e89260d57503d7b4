"""FastAPI application for the Buckaroo push service.

This module provides:
- Application factory with structured logging setup
- /health liveness endpoint
- Error handling that hides internals from the provider
"""

from contextlib import asynccontextmanager
from datetime import UTC, datetime
from typing import Any

import structlog
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from buckaroo_push import __version__
from buckaroo_push.config import settings
from buckaroo_push.errors import ConfigurationError
from buckaroo_push.logging_config import configure_logging

logger = structlog.get_logger(__name__)


class ErrorResponse(BaseModel):
    """Error response model."""

    error: str = Field(..., description="Error message")
    detail: str | None = Field(default=None, description="Detailed error information")


@asynccontextmanager
async def lifespan(app: FastAPI):  # noqa: ARG001
    """Application lifespan handler."""
    configure_logging(settings.LOG_LEVEL, json_output=settings.LOG_JSON)
    logger.info("application_starting", environment=settings.ENVIRONMENT)

    yield

    logger.info("application_shutting_down")


def create_app(
    title: str = "Buckaroo Push Service",
    version: str = __version__,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        title: API title.
        version: API version.

    Returns:
        Configured FastAPI application.
    """
    app = FastAPI(title=title, version=version, lifespan=lifespan)

    @app.exception_handler(ConfigurationError)
    async def configuration_exception_handler(
        request: Request, exc: ConfigurationError  # noqa: ARG001
    ) -> JSONResponse:
        logger.error("configuration_error", **exc.to_dict())
        return JSONResponse(
            status_code=500,
            content=ErrorResponse(error="Service misconfigured").model_dump(),
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(
        request: Request, exc: Exception  # noqa: ARG001
    ) -> JSONResponse:
        logger.error("unhandled_exception", error=str(exc), exc_info=True)
        return JSONResponse(
            status_code=500,
            content=ErrorResponse(
                error="Internal server error",
                detail=str(exc) if app.debug else None,
            ).model_dump(),
        )

    register_routes(app)

    return app


def register_routes(app: FastAPI) -> None:
    """Register all routes on the application.

    Args:
        app: FastAPI application.
    """
    from buckaroo_push.api.push import router as push_router

    app.include_router(push_router)

    @app.get("/health", tags=["Health"])
    async def health() -> dict[str, Any]:
        """Basic liveness check."""
        return {"status": "ok", "timestamp": datetime.now(UTC).isoformat()}


# Default application instance
app = create_app()
