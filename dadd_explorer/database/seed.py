"""
Schema Bootstrap and Sample Data

Creates the tables and loads a small region hierarchy with DADD records
so the application can be explored against an empty database.

Usage:
    python -m dadd_explorer.database.seed
    dadd-seed
"""

import asyncio
from typing import Any, Dict, List, Type

import structlog
from sqlalchemy import insert, select

from dadd_explorer.config import get_settings
from dadd_explorer.config.logging import configure_logging
from dadd_explorer.database.connection import QueryGateway
from dadd_explorer.database.models import (
    Base,
    Country,
    DaddRecord,
    IntermediateRegion,
    Region,
    SubRegion,
)

logger = structlog.get_logger(__name__)

REGIONS = [
    {"region_id": 1, "region_name": "Africa"},
    {"region_id": 2, "region_name": "Americas"},
    {"region_id": 3, "region_name": "Asia"},
    {"region_id": 4, "region_name": "Europe"},
]

SUB_REGIONS = [
    {"sub_region_id": 1, "sub_region_name": "Sub-Saharan Africa", "region_id": 1},
    {"sub_region_id": 2, "sub_region_name": "Northern Africa", "region_id": 1},
    {"sub_region_id": 3, "sub_region_name": "Latin America and the Caribbean", "region_id": 2},
    {"sub_region_id": 4, "sub_region_name": "Northern America", "region_id": 2},
    {"sub_region_id": 5, "sub_region_name": "Eastern Asia", "region_id": 3},
    {"sub_region_id": 6, "sub_region_name": "Western Europe", "region_id": 4},
    {"sub_region_id": 7, "sub_region_name": "Northern Europe", "region_id": 4},
]

# Sub-regions without an intermediate level get one unnamed row
INTERMEDIATE_REGIONS = [
    {"intermediate_region_id": 1, "intermediate_region_name": "Eastern Africa", "sub_region_id": 1},
    {"intermediate_region_id": 2, "intermediate_region_name": "Western Africa", "sub_region_id": 1},
    {"intermediate_region_id": 3, "intermediate_region_name": None, "sub_region_id": 2},
    {"intermediate_region_id": 4, "intermediate_region_name": "South America", "sub_region_id": 3},
    {"intermediate_region_id": 5, "intermediate_region_name": "Caribbean", "sub_region_id": 3},
    {"intermediate_region_id": 6, "intermediate_region_name": None, "sub_region_id": 4},
    {"intermediate_region_id": 7, "intermediate_region_name": None, "sub_region_id": 5},
    {"intermediate_region_id": 8, "intermediate_region_name": None, "sub_region_id": 6},
    {"intermediate_region_id": 9, "intermediate_region_name": None, "sub_region_id": 7},
]

COUNTRIES = [
    {"country_id": 1, "country_name": "Kenya", "intermediate_region_id": 1},
    {"country_id": 2, "country_name": "Ethiopia", "intermediate_region_id": 1},
    {"country_id": 3, "country_name": "Uganda", "intermediate_region_id": 1},
    {"country_id": 4, "country_name": "Nigeria", "intermediate_region_id": 2},
    {"country_id": 5, "country_name": "Ghana", "intermediate_region_id": 2},
    {"country_id": 6, "country_name": "Egypt", "intermediate_region_id": 3},
    {"country_id": 7, "country_name": "Morocco", "intermediate_region_id": 3},
    {"country_id": 8, "country_name": "Brazil", "intermediate_region_id": 4},
    {"country_id": 9, "country_name": "Argentina", "intermediate_region_id": 4},
    {"country_id": 10, "country_name": "Jamaica", "intermediate_region_id": 5},
    {"country_id": 11, "country_name": "Canada", "intermediate_region_id": 6},
    {"country_id": 12, "country_name": "United States", "intermediate_region_id": 6},
    {"country_id": 13, "country_name": "Japan", "intermediate_region_id": 7},
    {"country_id": 14, "country_name": "China", "intermediate_region_id": 7},
    {"country_id": 15, "country_name": "France", "intermediate_region_id": 8},
    {"country_id": 16, "country_name": "Germany", "intermediate_region_id": 8},
    {"country_id": 17, "country_name": "Netherlands", "intermediate_region_id": 8},
    {"country_id": 18, "country_name": "Finland", "intermediate_region_id": 9},
    {"country_id": 19, "country_name": "Iceland", "intermediate_region_id": 9},
    {"country_id": 20, "country_name": "Ireland", "intermediate_region_id": 9},
]

# (country_id, decade_id, dadd_value)
DADD_RECORDS = [
    (1, 1990, 12.5), (1, 2000, 15.0), (1, 2010, 18.25),
    (2, 1990, 8.0), (2, 2000, None), (2, 2010, 11.0),
    (3, 1990, 9.5), (3, 2000, 15.0), (3, 2010, None),
    (4, 1990, 20.0), (4, 2000, 22.0), (4, 2010, 25.0),
    (5, 1990, 14.0), (5, 2000, 16.0),
    (6, 2000, 30.0), (6, 2010, 31.5),
    (7, 2010, 27.0),
    (8, 1990, 40.0), (8, 2000, 42.0), (8, 2010, 45.0),
    (9, 2000, 35.0), (9, 2010, 38.0),
    (10, 2010, None),
    (11, 1990, 50.0), (11, 2000, 52.5), (11, 2010, 55.0),
    (12, 2000, 60.0), (12, 2010, 58.0),
    (13, 1990, 70.0), (13, 2000, 72.0), (13, 2010, 75.0),
    (14, 2010, 65.0),
    (15, 2000, 80.0), (15, 2010, 80.0),
    (16, 2000, 78.0), (16, 2010, 80.0),
    (17, 2010, 76.0),
    (18, 2010, None),
    (19, 2000, 5.0),
    (20, 2010, 66.0),
]


async def create_schema(gateway: QueryGateway) -> None:
    """Create every table that does not exist yet."""
    async with gateway.engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Schema created", tables=sorted(Base.metadata.tables))


async def execute_batch_insert(gateway: QueryGateway, model: Type[Base], records: List[Dict[str, Any]]) -> None:
    """Helper to insert a batch of records using Core Insert"""
    if not records:
        return
    await gateway.execute(insert(model).values(records))
    logger.info(f"Inserted {len(records)} records into {model.__tablename__}")


async def seed_sample_data(gateway: QueryGateway) -> bool:
    """
    Load the sample hierarchy and DADD records.

    Skipped when REGION already has rows.

    Returns:
        bool: True if data was loaded
    """
    if await gateway.fetch_one(select(Region.region_id).limit(1)) is not None:
        logger.info("Sample data skipped, REGION is not empty")
        return False

    await execute_batch_insert(gateway, Region, REGIONS)
    await execute_batch_insert(gateway, SubRegion, SUB_REGIONS)
    await execute_batch_insert(gateway, IntermediateRegion, INTERMEDIATE_REGIONS)
    await execute_batch_insert(gateway, Country, COUNTRIES)
    await execute_batch_insert(
        gateway,
        DaddRecord,
        [
            {"country_id": country_id, "decade_id": decade_id, "dadd_value": value}
            for country_id, decade_id, value in DADD_RECORDS
        ],
    )
    return True


async def main():
    configure_logging()
    logger.info("Starting database seeding...")
    gateway = QueryGateway.from_settings(get_settings().database)

    try:
        await create_schema(gateway)
        await seed_sample_data(gateway)
        logger.info("Database seeding completed successfully!")
    except Exception as e:
        logger.error(f"Seeding failed: {e}")
        raise
    finally:
        await gateway.dispose()


def run():
    """Console script entry point."""
    asyncio.run(main())


if __name__ == "__main__":
    run()
