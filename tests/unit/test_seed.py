"""
Unit Tests - Schema Bootstrap and Sample Data
"""
from sqlalchemy import func, select

from dadd_explorer.database.models import DaddRecord
from dadd_explorer.database.seed import DADD_RECORDS, create_schema, seed_sample_data


class TestSeed:
    """Tests for the sample data loader"""

    async def test_second_run_is_skipped(self, gateway):
        # the fixture already loaded the sample data once
        await create_schema(gateway)
        assert await seed_sample_data(gateway) is False

        row = await gateway.fetch_one(select(func.count().label("records")).select_from(DaddRecord))
        assert row["records"] == len(DADD_RECORDS)
