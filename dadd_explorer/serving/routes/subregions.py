"""
Sub-Region Pages

List, add, edit and delete sub-regions. The forms offer every region as
the parent; an empty choice leaves the sub-region unassigned.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Form, HTTPException, Request
from fastapi.responses import HTMLResponse, RedirectResponse
import structlog

from dadd_explorer.database import queries
from dadd_explorer.database.connection import QueryGateway
from dadd_explorer.reporting import parse_selection
from dadd_explorer.serving.dependencies import get_gateway
from dadd_explorer.serving.templating import templates

router = APIRouter()
logger = structlog.get_logger(__name__)


async def _require_sub_region(gateway: QueryGateway, sub_region_id: int) -> dict:
    sub_region = await gateway.fetch_one(queries.get_sub_region(sub_region_id))
    if sub_region is None:
        logger.info("Sub-region not found", sub_region_id=sub_region_id)
        raise HTTPException(status_code=404, detail="Sub-region not found")
    return sub_region


@router.get("", response_class=HTMLResponse)
async def list_sub_regions(request: Request, gateway: QueryGateway = Depends(get_gateway)):
    subregions = await gateway.fetch_all(queries.list_sub_regions())
    return templates.TemplateResponse(
        request, "subregions.html", {"title": "Sub-Region List", "subregions": subregions}
    )


@router.get("/add", response_class=HTMLResponse)
async def add_sub_region_form(request: Request, gateway: QueryGateway = Depends(get_gateway)):
    regions = await gateway.fetch_all(queries.regions_by_name())
    return templates.TemplateResponse(
        request,
        "subregion_form.html",
        {"title": "Add Sub-Region", "is_add": True, "subregion": {}, "regions": regions},
    )


@router.post("/add")
async def create_sub_region(
    sub_region_name: str = Form(""),
    region_id: Optional[str] = Form(None),
    gateway: QueryGateway = Depends(get_gateway),
):
    parent_id = parse_selection(region_id)
    await gateway.execute(queries.insert_sub_region(sub_region_name, parent_id))
    logger.info("Sub-region created", sub_region_name=sub_region_name, region_id=parent_id)
    return RedirectResponse(url="/subregions", status_code=303)


@router.get("/{sub_region_id}/edit", response_class=HTMLResponse)
async def edit_sub_region_form(
    request: Request,
    sub_region_id: int,
    gateway: QueryGateway = Depends(get_gateway),
):
    subregion = await _require_sub_region(gateway, sub_region_id)
    regions = await gateway.fetch_all(queries.regions_by_name())
    return templates.TemplateResponse(
        request,
        "subregion_form.html",
        {"title": "Edit Sub-Region", "is_add": False, "subregion": subregion, "regions": regions},
    )


@router.post("/{sub_region_id}/edit")
async def update_sub_region(
    sub_region_id: int,
    sub_region_name: str = Form(""),
    region_id: Optional[str] = Form(None),
    gateway: QueryGateway = Depends(get_gateway),
):
    await _require_sub_region(gateway, sub_region_id)
    parent_id = parse_selection(region_id)
    await gateway.execute(queries.update_sub_region(sub_region_id, sub_region_name, parent_id))
    logger.info("Sub-region updated", sub_region_id=sub_region_id, region_id=parent_id)
    return RedirectResponse(url="/subregions", status_code=303)


@router.post("/{sub_region_id}/delete")
async def delete_sub_region(sub_region_id: int, gateway: QueryGateway = Depends(get_gateway)):
    deleted = await gateway.execute(queries.delete_sub_region(sub_region_id))
    if not deleted:
        raise HTTPException(status_code=404, detail="Sub-region not found")
    logger.info("Sub-region deleted", sub_region_id=sub_region_id)
    return RedirectResponse(url="/subregions", status_code=303)
