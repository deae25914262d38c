"""
e-Foncier Backend: Test Configuration (conftest.py)
====================================================

What:  Shared pytest fixtures for the whole suite.
How:   Environment overrides are applied before the first `efoncier` import
       so the settings singleton never points at a real database or a real
       storage directory.

Fixture Hierarchy (all function-scoped):
    ├── mock_db_session:  AsyncMock session for pure service unit tests
    ├── temp_storage:     fresh storage directory
    ├── db_engine:        in-memory SQLite (aiosqlite) with every table created
    │   └── session_factory
    │       ├── db_session:   a session for service-level tests
    │       └── test_client:  httpx AsyncClient bound to the app, with
    │                         get_db_session overridden and the document
    │                         store redirected to temp_storage
    ├── parcel_payload:   a complete, valid registration body
    ├── pdf_bytes / png_bytes / jpeg_bytes: minimal file signatures
"""

import os
import tempfile
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock, patch

os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["STORAGE_ROOT"] = tempfile.mkdtemp(prefix="efoncier_test_")
os.environ["DB_AUTO_MIGRATE"] = "false"
os.environ["LOG_LEVEL"] = "WARNING"

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

import efoncier.models  # noqa: F401
from efoncier.database import Base, get_db_session
from efoncier.services.file_service import file_service


# ══════════════════════════════════════════════════════════════════════════
# Unit-test helpers
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def mock_db_session():
    """
    A mock AsyncSession.

    Usage:
        mock_db_session.execute.return_value.scalar_one_or_none.return_value = parcel
    """
    session = AsyncMock()
    session.execute = AsyncMock()
    session.flush = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.close = AsyncMock()
    session.get = AsyncMock(return_value=None)
    session.add = MagicMock()
    return session


@pytest.fixture
def temp_storage(tmp_path):
    storage_dir = tmp_path / "storage"
    storage_dir.mkdir()
    return str(storage_dir)


# ══════════════════════════════════════════════════════════════════════════
# Database
# ══════════════════════════════════════════════════════════════════════════

@pytest_asyncio.fixture
async def db_engine():
    """
    A private in-memory SQLite database per test.

    StaticPool keeps the single connection alive so every session sees the
    same in-memory database.
    """
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def session_factory(db_engine):
    return async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db_session(session_factory):
    async with session_factory() as session:
        yield session


# ══════════════════════════════════════════════════════════════════════════
# API client
# ══════════════════════════════════════════════════════════════════════════

@pytest_asyncio.fixture
async def test_client(session_factory, temp_storage):
    """
    HTTPX AsyncClient talking to the app through ASGITransport.

    Usage:
        async def test_health(test_client):
            response = await test_client.get("/health")
            assert response.status_code == 200
    """
    from efoncier.main import app

    async def override_get_db_session():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db_session] = override_get_db_session
    transport = ASGITransport(app=app)
    with patch.object(file_service, "storage_root", Path(temp_storage).resolve()):
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            yield client
    app.dependency_overrides.clear()


# ══════════════════════════════════════════════════════════════════════════
# Sample data
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def parcel_payload():
    """A complete registration body for POST /api/parcels."""
    return {
        "reference": "KIN-GOM-0001",
        "parcel_number": "SU 1234",
        "province": "Kinshasa",
        "territory_or_city": "Kinshasa",
        "commune_or_sector": "Gombe",
        "quartier_or_cheflieu": "Quartier Résidentiel",
        "avenue": "Av. de la Justice n°12",
        "gps_lat": -4.3017,
        "gps_long": 15.3136,
        "area": 500,
        "status": "Libre",
        "land_use": "Résidentiel",
        "certificate_number": "CE-55012",
        "issuing_authority": "Direction des Titres Immobiliers",
        "acquisition_type": "Vente",
        "acquisition_act_ref": "ACTE-2023-118",
        "title_date": "2023-06-14",
        "owner_name": "Marie Mbuyi",
        "owner_id_number": "CD123456789",
        "surveying_pv_ref": "PV-4521",
        "surveyor_name": "Joseph Ilunga",
        "surveyor_license": "GEO-311",
        "cadastral_plan_ref": "PLAN-7781",
    }


@pytest.fixture
def pdf_bytes():
    return b"%PDF-1.4\n1 0 obj\n<< /Type /Catalog >>\nendobj\ntrailer\n<< /Root 1 0 R >>\n%%EOF\n"


@pytest.fixture
def png_bytes():
    return b"\x89PNG\r\n\x1a\n\x00\x00\x00\rIHDR\x00\x00\x00\x01\x00\x00\x00\x01\x08\x02\x00\x00\x00"


@pytest.fixture
def jpeg_bytes():
    return (
        b'\xff\xd8\xff\xe0\x00\x10JFIF\x00\x01\x01\x00\x00\x01\x00\x01\x00\x00'
        b'\xff\xd9'
    )
