"""
Intermediate Region Pages (read-only)
"""

from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse, RedirectResponse

from dadd_explorer.database import queries
from dadd_explorer.database.connection import QueryGateway
from dadd_explorer.serving.dependencies import get_gateway
from dadd_explorer.serving.templating import templates

router = APIRouter()


@router.get("/intermediate-regions", response_class=HTMLResponse)
async def list_intermediate_regions(request: Request, gateway: QueryGateway = Depends(get_gateway)):
    rows = await gateway.fetch_all(queries.list_intermediate_regions())
    return templates.TemplateResponse(
        request,
        "intermediate_regions.html",
        {"title": "Intermediate Region List", "intermediate_regions": rows},
    )


@router.get("/intermediate_regions")
async def intermediate_regions_alias():
    return RedirectResponse(url="/intermediate-regions", status_code=302)
