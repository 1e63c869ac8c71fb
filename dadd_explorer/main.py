"""
FastAPI Application

Main entry point for DADD Explorer.
"""

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import PlainTextResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException
import structlog

from dadd_explorer.config import Settings, get_settings
from dadd_explorer.config.logging import configure_logging
from dadd_explorer.database.connection import QueryGateway
from dadd_explorer.serving.middleware import (
    ErrorHandlingMiddleware,
    RequestLoggingMiddleware,
    SecurityHeadersMiddleware,
)
from dadd_explorer.serving.routes import (
    intermediate_regions_router,
    pages_router,
    regions_router,
    reports_router,
    subregions_router,
)
from dadd_explorer.serving.templating import STATIC_DIR

logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    settings: Settings = app.state.settings
    configure_logging(settings=settings)

    logger.info("Starting application", app=settings.app_name, environment=settings.app_env)

    owns_gateway = app.state.gateway is None
    if owns_gateway:
        app.state.gateway = QueryGateway.from_settings(settings.database)

    # An unreachable database must not stop the server; requests fail individually
    try:
        await app.state.gateway.ping()
        logger.info(
            "Database connection established",
            host=settings.database.host,
            database=settings.database.database,
        )
    except Exception as e:
        logger.warning("Database connection failed", error=str(e))

    yield

    logger.info("Shutting down...")
    if owns_gateway:
        await app.state.gateway.dispose()


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> PlainTextResponse:
    """Render HTTP errors (404, 405, ...) as plain text."""
    return PlainTextResponse(str(exc.detail), status_code=exc.status_code, headers=exc.headers)


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> PlainTextResponse:
    """Render unparseable path or form values as a plain-text 422."""
    fields = sorted({str(error["loc"][-1]) for error in exc.errors()})
    logger.info("Request validation failed", path=request.url.path, fields=fields)
    return PlainTextResponse(f"Invalid value for {', '.join(fields)}", status_code=422)


def create_app(
    settings: Optional[Settings] = None,
    gateway: Optional[QueryGateway] = None,
) -> FastAPI:
    """
    Create and configure the application.

    Args:
        settings: Application settings (cached environment settings when omitted)
        gateway: Query gateway to use; when omitted one is built from the
            database settings at startup and disposed at shutdown

    Returns:
        Configured FastAPI app instance
    """
    settings = settings or get_settings()

    app = FastAPI(
        title="DADD Explorer",
        description="Region hierarchy administration and DADD reports",
        version=settings.version,
        debug=settings.debug,
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.gateway = gateway

    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)

    # Last added runs first: logging wraps error handling
    app.add_middleware(ErrorHandlingMiddleware)
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(RequestLoggingMiddleware)

    app.include_router(pages_router, tags=["Pages"])
    app.include_router(regions_router, prefix="/regions", tags=["Regions"])
    app.include_router(subregions_router, prefix="/subregions", tags=["Sub-Regions"])
    app.include_router(intermediate_regions_router, tags=["Intermediate Regions"])
    app.include_router(reports_router, tags=["Reports"])

    app.mount("/static", StaticFiles(directory=STATIC_DIR), name="static")

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    settings = get_settings()
    uvicorn.run(app, host=settings.api_host, port=settings.api_port)
