"""
Landing Pages and Health Check
"""

from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse, PlainTextResponse
import structlog

from dadd_explorer.database.connection import QueryGateway
from dadd_explorer.serving.dependencies import get_gateway
from dadd_explorer.serving.templating import templates

router = APIRouter()
logger = structlog.get_logger(__name__)


@router.get("/", response_class=HTMLResponse)
async def index(request: Request):
    return templates.TemplateResponse(request, "index.html", {"title": "DADD Explorer"})


@router.get("/admin", response_class=HTMLResponse)
async def admin(request: Request):
    return templates.TemplateResponse(request, "admin.html", {"title": "Admin Panel"})


@router.get("/health", response_class=PlainTextResponse)
async def health_check(gateway: QueryGateway = Depends(get_gateway)) -> PlainTextResponse:
    """
    Liveness and readiness probe.

    Returns 200 when the database answers, 503 otherwise.
    """
    try:
        await gateway.ping()
    except Exception as e:
        logger.warning("Health check failed", error=str(e))
        return PlainTextResponse("unavailable", status_code=503)
    return PlainTextResponse("ok")
