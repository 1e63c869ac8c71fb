"""
Query Builders

Every statement the web application issues, as SQLAlchemy Core constructs.
User input only ever reaches the database as bound parameters.

NULL values are ordered last with an explicit ``IS NULL`` sort key, which
behaves the same on MySQL and SQLite.
"""

from typing import Optional

from sqlalchemy import Delete, Insert, Select, Update, and_, delete, func, insert, literal, select, update

from dadd_explorer.database.models import (
    Country,
    DaddRecord,
    IntermediateRegion,
    Region,
    SubRegion,
)

# Rows shown by the country search before anything is typed
DEFAULT_SEARCH_LIMIT = 30
LIKE_ESCAPE = "/"


def _escape_like(text: str) -> str:
    """Make ``%`` and ``_`` match literally in a LIKE pattern."""
    return (
        text.replace(LIKE_ESCAPE, LIKE_ESCAPE * 2)
        .replace("%", LIKE_ESCAPE + "%")
        .replace("_", LIKE_ESCAPE + "_")
    )


# =============================================================================
# REGION
# =============================================================================

def list_regions() -> Select:
    return select(Region.region_id, Region.region_name).order_by(Region.region_id)


def regions_by_name() -> Select:
    """Region dropdown options."""
    return select(Region.region_id, Region.region_name).order_by(Region.region_name, Region.region_id)


def get_region(region_id: int) -> Select:
    return select(Region.region_id, Region.region_name).where(Region.region_id == region_id)


def insert_region(region_name: str) -> Insert:
    return insert(Region).values(region_name=region_name)


def update_region(region_id: int, region_name: str) -> Update:
    return update(Region).where(Region.region_id == region_id).values(region_name=region_name)


def delete_region(region_id: int) -> Delete:
    return delete(Region).where(Region.region_id == region_id)


# =============================================================================
# SUB-REGION
# =============================================================================

def list_sub_regions() -> Select:
    """Sub-regions with their parent region name (NULL when unassigned)."""
    return (
        select(
            SubRegion.sub_region_id,
            SubRegion.sub_region_name,
            SubRegion.region_id,
            Region.region_name,
        )
        .outerjoin(Region, SubRegion.region_id == Region.region_id)
        .order_by(SubRegion.sub_region_id)
    )


def sub_regions_by_name() -> Select:
    """Sub-region dropdown options."""
    return (
        select(SubRegion.sub_region_id, SubRegion.sub_region_name)
        .order_by(SubRegion.sub_region_name, SubRegion.sub_region_id)
    )


def get_sub_region(sub_region_id: int) -> Select:
    return (
        select(SubRegion.sub_region_id, SubRegion.sub_region_name, SubRegion.region_id)
        .where(SubRegion.sub_region_id == sub_region_id)
    )


def insert_sub_region(sub_region_name: str, region_id: Optional[int]) -> Insert:
    return insert(SubRegion).values(sub_region_name=sub_region_name, region_id=region_id)


def update_sub_region(sub_region_id: int, sub_region_name: str, region_id: Optional[int]) -> Update:
    return (
        update(SubRegion)
        .where(SubRegion.sub_region_id == sub_region_id)
        .values(sub_region_name=sub_region_name, region_id=region_id)
    )


def delete_sub_region(sub_region_id: int) -> Delete:
    return delete(SubRegion).where(SubRegion.sub_region_id == sub_region_id)


# =============================================================================
# INTERMEDIATE REGION / COUNTRY / DECADE
# =============================================================================

def list_intermediate_regions() -> Select:
    return (
        select(
            IntermediateRegion.intermediate_region_id,
            IntermediateRegion.intermediate_region_name,
            IntermediateRegion.sub_region_id,
            SubRegion.sub_region_name,
        )
        .outerjoin(SubRegion, IntermediateRegion.sub_region_id == SubRegion.sub_region_id)
        .order_by(IntermediateRegion.intermediate_region_id)
    )


def countries_by_name() -> Select:
    """Country dropdown options."""
    return select(Country.country_id, Country.country_name).order_by(Country.country_name, Country.country_id)


def distinct_decades() -> Select:
    """Decades that have at least one DADD record."""
    return select(DaddRecord.decade_id).distinct().order_by(DaddRecord.decade_id)


# =============================================================================
# REPORTS
# =============================================================================

def country_trend(country_id: int, newest_first: bool = True) -> Select:
    """Every (decade, value) pair recorded for one country."""
    decade_order = DaddRecord.decade_id.desc() if newest_first else DaddRecord.decade_id.asc()
    return (
        select(DaddRecord.decade_id, DaddRecord.dadd_value)
        .where(DaddRecord.country_id == country_id)
        .order_by(decade_order)
    )


def sub_region_decade_listing(sub_region_id: int, decade_id: int) -> Select:
    """
    Countries of one sub-region with their value for one decade.

    Ordered by value ascending with NULLs last, then by country name.
    """
    return (
        select(
            Country.country_name,
            SubRegion.sub_region_name,
            DaddRecord.decade_id,
            DaddRecord.dadd_value,
        )
        .select_from(DaddRecord)
        .join(Country, DaddRecord.country_id == Country.country_id)
        .join(IntermediateRegion, Country.intermediate_region_id == IntermediateRegion.intermediate_region_id)
        .join(SubRegion, IntermediateRegion.sub_region_id == SubRegion.sub_region_id)
        .where(
            and_(
                SubRegion.sub_region_id == sub_region_id,
                DaddRecord.decade_id == decade_id,
            )
        )
        .order_by(
            DaddRecord.dadd_value.is_(None),
            DaddRecord.dadd_value.asc(),
            Country.country_name.asc(),
        )
    )


def region_decade_averages(region_id: int, decade_id: int) -> Select:
    """
    Average value and distinct country count per sub-region of one region.

    Ordered by region name, average ascending with NULLs last, then
    sub-region name.
    """
    avg_dadd = func.avg(DaddRecord.dadd_value).label("avg_dadd")
    country_count = func.count(func.distinct(Country.country_id)).label("country_count")
    return (
        select(
            Region.region_name,
            SubRegion.sub_region_id,
            SubRegion.sub_region_name,
            DaddRecord.decade_id,
            avg_dadd,
            country_count,
        )
        .select_from(Region)
        .join(SubRegion, SubRegion.region_id == Region.region_id)
        .join(IntermediateRegion, IntermediateRegion.sub_region_id == SubRegion.sub_region_id)
        .join(Country, Country.intermediate_region_id == IntermediateRegion.intermediate_region_id)
        .join(DaddRecord, DaddRecord.country_id == Country.country_id)
        .where(
            and_(
                Region.region_id == region_id,
                DaddRecord.decade_id == decade_id,
            )
        )
        .group_by(
            Region.region_name,
            SubRegion.sub_region_id,
            SubRegion.sub_region_name,
            DaddRecord.decade_id,
        )
        .order_by(
            Region.region_name.asc(),
            func.avg(DaddRecord.dadd_value).is_(None),
            func.avg(DaddRecord.dadd_value).asc(),
            SubRegion.sub_region_name.asc(),
        )
    )


def latest_decade_search(search: Optional[str] = None, limit: int = DEFAULT_SEARCH_LIMIT) -> Select:
    """
    Each country's value at its most recent recorded decade.

    With search text, returns every country whose name contains it
    (case-insensitive). Without, returns the first ``limit`` countries.
    Both are ordered by country name.
    """
    latest = (
        select(
            DaddRecord.country_id,
            func.max(DaddRecord.decade_id).label("latest_decade_id"),
        )
        .group_by(DaddRecord.country_id)
        .subquery("latest")
    )
    query = (
        select(
            Country.country_id,
            Country.country_name,
            latest.c.latest_decade_id.label("decade"),
            DaddRecord.dadd_value,
        )
        .select_from(Country)
        .join(latest, Country.country_id == latest.c.country_id)
        .join(
            DaddRecord,
            and_(
                DaddRecord.country_id == latest.c.country_id,
                DaddRecord.decade_id == latest.c.latest_decade_id,
            ),
        )
        .order_by(Country.country_name, Country.country_id)
    )
    if search:
        # Both sides go through SQL LOWER() so they fold the same way on every backend
        pattern = func.lower(literal(_escape_like(search)))
        return query.where(func.lower(Country.country_name).contains(pattern, escape=LIKE_ESCAPE))
    return query.limit(limit)


def decade_summary(decade_id: int) -> Select:
    """Record count and rounded average value for one decade."""
    return (
        select(
            func.count().label("total_countries"),
            func.round(func.avg(DaddRecord.dadd_value), 2).label("avg_dadd"),
        )
        .select_from(DaddRecord)
        .where(DaddRecord.decade_id == decade_id)
    )


def decade_extreme(decade_id: int, highest: bool = True) -> Select:
    """
    The single highest (or lowest) valued country for one decade.

    NULL values are ignored; ties go to the alphabetically first country.
    """
    value_order = DaddRecord.dadd_value.desc() if highest else DaddRecord.dadd_value.asc()
    return (
        select(Country.country_name, DaddRecord.dadd_value)
        .select_from(DaddRecord)
        .join(Country, DaddRecord.country_id == Country.country_id)
        .where(
            and_(
                DaddRecord.decade_id == decade_id,
                DaddRecord.dadd_value.is_not(None),
            )
        )
        .order_by(value_order, Country.country_name.asc())
        .limit(1)
    )
