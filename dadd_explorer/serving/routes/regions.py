"""
Region Pages

List, add, edit and delete regions.
"""

from fastapi import APIRouter, Depends, Form, HTTPException, Request
from fastapi.responses import HTMLResponse, RedirectResponse
import structlog

from dadd_explorer.database import queries
from dadd_explorer.database.connection import QueryGateway
from dadd_explorer.serving.dependencies import get_gateway
from dadd_explorer.serving.templating import templates

router = APIRouter()
logger = structlog.get_logger(__name__)


async def _require_region(gateway: QueryGateway, region_id: int) -> dict:
    region = await gateway.fetch_one(queries.get_region(region_id))
    if region is None:
        logger.info("Region not found", region_id=region_id)
        raise HTTPException(status_code=404, detail="Region not found")
    return region


@router.get("", response_class=HTMLResponse)
async def list_regions(request: Request, gateway: QueryGateway = Depends(get_gateway)):
    regions = await gateway.fetch_all(queries.list_regions())
    return templates.TemplateResponse(
        request, "regions.html", {"title": "Region List", "regions": regions}
    )


@router.get("/add", response_class=HTMLResponse)
async def add_region_form(request: Request):
    return templates.TemplateResponse(
        request,
        "region_form.html",
        {
            "title": "Add Region",
            "is_add": True,
            "region": {"region_id": "", "region_name": ""},
        },
    )


@router.post("/add")
async def create_region(
    region_name: str = Form(""),
    gateway: QueryGateway = Depends(get_gateway),
):
    await gateway.execute(queries.insert_region(region_name))
    logger.info("Region created", region_name=region_name)
    return RedirectResponse(url="/regions", status_code=303)


@router.get("/{region_id}/edit", response_class=HTMLResponse)
async def edit_region_form(
    request: Request,
    region_id: int,
    gateway: QueryGateway = Depends(get_gateway),
):
    region = await _require_region(gateway, region_id)
    return templates.TemplateResponse(
        request,
        "region_form.html",
        {"title": "Edit Region", "is_add": False, "region": region},
    )


@router.post("/{region_id}/edit")
async def update_region(
    region_id: int,
    region_name: str = Form(""),
    gateway: QueryGateway = Depends(get_gateway),
):
    # MySQL reports zero affected rows for a no-op update, so check existence first
    await _require_region(gateway, region_id)
    await gateway.execute(queries.update_region(region_id, region_name))
    logger.info("Region updated", region_id=region_id, region_name=region_name)
    return RedirectResponse(url="/regions", status_code=303)


@router.post("/{region_id}/delete")
async def delete_region(region_id: int, gateway: QueryGateway = Depends(get_gateway)):
    deleted = await gateway.execute(queries.delete_region(region_id))
    if not deleted:
        raise HTTPException(status_code=404, detail="Region not found")
    logger.info("Region deleted", region_id=region_id)
    return RedirectResponse(url="/regions", status_code=303)
