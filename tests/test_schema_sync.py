"""
e-Foncier Backend: Schema Synchronisation Tests
================================================

What:  A `parcels` table created by an early release (only reference, area,
       status, owner and location) is brought up to date in place.
"""

import pytest
import pytest_asyncio
from sqlalchemy import inspect, text
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.pool import StaticPool

from efoncier.database import PARCEL_COLUMN_DDL, init_database, sync_parcel_columns

LEGACY_DDL = """
CREATE TABLE parcels (
    id CHAR(32) PRIMARY KEY,
    reference VARCHAR(100) NOT NULL UNIQUE,
    area FLOAT NOT NULL,
    location TEXT,
    status VARCHAR(50) NOT NULL,
    owner_name VARCHAR(200) NOT NULL,
    created_at DATETIME NOT NULL DEFAULT CURRENT_TIMESTAMP,
    updated_at DATETIME NOT NULL DEFAULT CURRENT_TIMESTAMP
)
"""


@pytest_asyncio.fixture
async def legacy_engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.execute(text(LEGACY_DDL))
        await conn.execute(
            text(
                "INSERT INTO parcels (id, reference, area, status, owner_name) "
                "VALUES ('0123456789abcdef0123456789abcdef', 'OLD-1', 400, 'Libre', 'Jean Mbala')"
            )
        )
    yield engine
    await engine.dispose()


def _columns(sync_conn, table):
    return {column["name"] for column in inspect(sync_conn).get_columns(table)}


class TestSchemaSync:

    @pytest.mark.asyncio
    async def test_missing_columns_are_added_with_defaults(self, legacy_engine):
        async with legacy_engine.begin() as conn:
            added = await sync_parcel_columns(conn)

        assert set(added) == set(PARCEL_COLUMN_DDL)

        async with legacy_engine.connect() as conn:
            columns = await conn.run_sync(_columns, "parcels")
            row = (
                await conn.execute(
                    text(
                        "SELECT reference, land_use, acquisition_type, title_date, gps_lat, province, company_name "
                        "FROM parcels"
                    )
                )
            ).one()

        assert set(PARCEL_COLUMN_DDL) <= columns
        assert row.reference == "OLD-1"
        assert row.land_use == "Résidentiel"
        assert row.acquisition_type == "Concession"
        assert row.title_date == "1970-01-01"
        assert row.gps_lat == 0
        assert row.province == ""
        assert row.company_name is None

    @pytest.mark.asyncio
    async def test_second_run_adds_nothing(self, legacy_engine):
        async with legacy_engine.begin() as conn:
            await sync_parcel_columns(conn)
        async with legacy_engine.begin() as conn:
            assert await sync_parcel_columns(conn) == []

    @pytest.mark.asyncio
    async def test_init_database_creates_missing_tables(self, legacy_engine):
        await init_database(legacy_engine)

        async with legacy_engine.connect() as conn:
            tables = await conn.run_sync(lambda sync_conn: set(inspect(sync_conn).get_table_names()))

        assert {"parcels", "parcel_history", "parcel_notes", "documents", "requests"} <= tables

    @pytest.mark.asyncio
    async def test_fresh_database_needs_no_column_sync(self):
        engine = create_async_engine("sqlite+aiosqlite://", poolclass=StaticPool)
        try:
            assert await init_database(engine) == []
        finally:
            await engine.dispose()
