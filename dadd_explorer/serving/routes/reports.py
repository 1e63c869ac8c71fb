"""
Report Pages

Read-only analytical views over DADD_RECORD. Every report fills its
dropdowns first and only runs its main query once all of its selections
are present; otherwise it renders an empty result set.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import HTMLResponse
import structlog

from dadd_explorer.database import queries
from dadd_explorer.database.connection import QueryGateway
from dadd_explorer.reporting import (
    build_country_value,
    build_summary,
    build_trend,
    parse_selection,
)
from dadd_explorer.serving.dependencies import get_gateway
from dadd_explorer.serving.templating import templates

router = APIRouter()
logger = structlog.get_logger(__name__)


def _selected(value: Optional[str]) -> str:
    """Raw selection echoed back to the form so the dropdown keeps its choice."""
    return (value or "").strip()


@router.get("/feature1", response_class=HTMLResponse)
async def country_trend(
    request: Request,
    country_id: Optional[str] = None,
    gateway: QueryGateway = Depends(get_gateway),
):
    """Every decade recorded for one country, newest first."""
    selected_country = parse_selection(country_id)
    logger.debug("country_trend called", country_id=selected_country)

    countries = await gateway.fetch_all(queries.countries_by_name())

    results = []
    if selected_country is not None:
        results = await gateway.fetch_all(queries.country_trend(selected_country, newest_first=True))
        logger.info("Country trend loaded", country_id=selected_country, rows=len(results))

    return templates.TemplateResponse(
        request,
        "feature1.html",
        {
            "title": "Country DADD by Decade",
            "countries": countries,
            "selected_country": _selected(country_id),
            "results": results,
        },
    )


@router.get("/feature2", response_class=HTMLResponse)
async def sub_region_decade(
    request: Request,
    sub_region_id: Optional[str] = None,
    decade: Optional[str] = None,
    gateway: QueryGateway = Depends(get_gateway),
):
    """Countries of a sub-region ranked by their value in one decade."""
    selected_sub_region = parse_selection(sub_region_id)
    selected_decade = parse_selection(decade)
    logger.debug("sub_region_decade called", sub_region_id=selected_sub_region, decade=selected_decade)

    subregions = await gateway.fetch_all(queries.sub_regions_by_name())
    decades = await gateway.fetch_all(queries.distinct_decades())

    results = []
    if selected_sub_region is not None and selected_decade is not None:
        results = await gateway.fetch_all(
            queries.sub_region_decade_listing(selected_sub_region, selected_decade)
        )
        logger.info("Sub-region listing loaded", rows=len(results))

    return templates.TemplateResponse(
        request,
        "feature2.html",
        {
            "title": "Sub-Region & Decade",
            "subregions": subregions,
            "decades": decades,
            "selected_sub_region": _selected(sub_region_id),
            "selected_decade": _selected(decade),
            "results": results,
        },
    )


@router.get("/feature3", response_class=HTMLResponse)
async def region_decade(
    request: Request,
    region_id: Optional[str] = None,
    decade: Optional[str] = None,
    gateway: QueryGateway = Depends(get_gateway),
):
    """Sub-region averages within one region for one decade."""
    selected_region = parse_selection(region_id)
    selected_decade = parse_selection(decade)
    logger.debug("region_decade called", region_id=selected_region, decade=selected_decade)

    regions = await gateway.fetch_all(queries.regions_by_name())
    decades = await gateway.fetch_all(queries.distinct_decades())

    results = []
    if selected_region is not None and selected_decade is not None:
        results = await gateway.fetch_all(
            queries.region_decade_averages(selected_region, selected_decade)
        )
        logger.info("Region averages loaded", groups=len(results))

    return templates.TemplateResponse(
        request,
        "feature3.html",
        {
            "title": "Region & Decade (Sub-Region Averages)",
            "regions": regions,
            "decades": decades,
            "selected_region": _selected(region_id),
            "selected_decade": _selected(decade),
            "results": results,
        },
    )


@router.get("/feature4", response_class=HTMLResponse)
async def search_countries(
    request: Request,
    q: str = Query(""),
    gateway: QueryGateway = Depends(get_gateway),
):
    """Country search showing each country's most recent decade."""
    search = q.strip()
    logger.debug("search_countries called", q=search)

    results = await gateway.fetch_all(queries.latest_decade_search(search or None))
    logger.info("Country search completed", q=search, rows=len(results))

    return templates.TemplateResponse(
        request,
        "feature4.html",
        {
            "title": "Search Country (Latest Decade)",
            "query": search,
            "results": results,
            "show_default": not search,
            "default_limit": queries.DEFAULT_SEARCH_LIMIT,
        },
    )


@router.get("/feature8", response_class=HTMLResponse)
async def decade_summary(
    request: Request,
    summary_decade: Optional[str] = None,
    trend_country_id: Optional[str] = None,
    gateway: QueryGateway = Depends(get_gateway),
):
    """
    Decade summary and country trend on one page.

    The summary (count, average, top and bottom country) needs a decade;
    the trend with relative bars needs a country. Each part runs
    independently of the other.
    """
    selected_decade = parse_selection(summary_decade)
    selected_country = parse_selection(trend_country_id)
    logger.debug("decade_summary called", decade=selected_decade, country_id=selected_country)

    decades = await gateway.fetch_all(queries.distinct_decades())
    countries = await gateway.fetch_all(queries.countries_by_name())

    summary = None
    top_country = None
    bottom_country = None
    if selected_decade is not None:
        summary = build_summary(await gateway.fetch_one(queries.decade_summary(selected_decade)))
        top_country = build_country_value(
            await gateway.fetch_one(queries.decade_extreme(selected_decade, highest=True))
        )
        bottom_country = build_country_value(
            await gateway.fetch_one(queries.decade_extreme(selected_decade, highest=False))
        )
        logger.info(
            "Decade summary loaded",
            decade=selected_decade,
            total_countries=summary.total_countries if summary else 0,
        )

    trend_data = []
    if selected_country is not None:
        rows = await gateway.fetch_all(queries.country_trend(selected_country, newest_first=False))
        trend_data = build_trend(rows)
        logger.info("Country trend loaded", country_id=selected_country, rows=len(trend_data))

    return templates.TemplateResponse(
        request,
        "feature8.html",
        {
            "title": "Decade Summary & Country Trend",
            "decades": decades,
            "summary_decade": _selected(summary_decade),
            "summary": summary,
            "top_country": top_country,
            "bottom_country": bottom_country,
            "countries": countries,
            "trend_country_id": _selected(trend_country_id),
            "trend_data": trend_data,
        },
    )
