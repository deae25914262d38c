"""
e-Foncier Backend: Database Session Management
===============================================

What:  Async SQLAlchemy engine, session factory, declarative base, the
       FastAPI session dependency, and startup schema synchronisation.
How:   One engine per process; one session per request that commits on
       success and rolls back on any error.
Who:   Routes receive sessions through `Depends(get_db_session)`; the app
       lifespan calls `init_database()` and `dispose_engine()`.

Schema synchronisation:
    Alembic migrations are the canonical way to evolve the schema. For
    databases created by older releases (which lacked most descriptive
    parcel columns) `sync_parcel_columns()` inspects the live `parcels`
    table and adds each missing column with a server default, so existing
    rows stay valid and nothing is dropped.
"""

import logging
from typing import Any, AsyncGenerator, Dict, List, Optional

from sqlalchemy import inspect, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncConnection,
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from efoncier.config import settings
from efoncier.exceptions import DatabaseError

logger = logging.getLogger(__name__)


def build_engine(url: str) -> AsyncEngine:
    """
    Create an async engine for `url`.

    Pool sizing options are only passed to server databases; the SQLite
    dialect uses its own pool classes and rejects them.
    """
    kwargs: Dict[str, Any] = {"echo": settings.log_level == "DEBUG"}
    if not url.startswith("sqlite"):
        kwargs.update(
            pool_size=settings.db_pool_size,
            max_overflow=settings.db_max_overflow,
            pool_pre_ping=settings.db_pool_pre_ping,
            pool_recycle=3600,
        )
    return create_async_engine(url, **kwargs)


engine = build_engine(settings.database_url)

# expire_on_commit=False keeps attributes readable after the request commits.
async_session_factory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy ORM models.

    Shares one metadata object between the models, `init_database()` and
    Alembic autogenerate.
    """
    pass


async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency that provides a database session per request.

    1. Creates a new session from the factory
    2. Yields it to the route handler
    3. On success: commits the transaction
    4. On error: rolls back and re-raises for the global handlers;
       driver errors surface as DatabaseError so internals stay hidden
    5. Always: closes the session
    """
    async with async_session_factory() as session:
        try:
            yield session
            await session.commit()
        except SQLAlchemyError as exc:
            await session.rollback()
            logger.error("Database operation failed", exc_info=True)
            raise DatabaseError(context={"error": type(exc).__name__}) from exc
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


# ── Parcel column synchronisation ─────────────────────────────────────────
# Columns introduced after the first release, with the DDL used to add them
# to an existing table. Required text columns default to '' so that legacy
# rows satisfy NOT NULL.
PARCEL_COLUMN_DDL: Dict[str, str] = {
    "parcel_number": "TEXT NOT NULL DEFAULT ''",
    "province": "TEXT NOT NULL DEFAULT ''",
    "territory_or_city": "TEXT NOT NULL DEFAULT ''",
    "commune_or_sector": "TEXT NOT NULL DEFAULT ''",
    "quartier_or_cheflieu": "TEXT NOT NULL DEFAULT ''",
    "avenue": "TEXT NOT NULL DEFAULT ''",
    "gps_lat": "FLOAT NOT NULL DEFAULT 0",
    "gps_long": "FLOAT NOT NULL DEFAULT 0",
    "land_use": "TEXT NOT NULL DEFAULT 'Résidentiel'",
    "certificate_number": "TEXT NOT NULL DEFAULT ''",
    "issuing_authority": "TEXT NOT NULL DEFAULT ''",
    "acquisition_type": "TEXT NOT NULL DEFAULT 'Concession'",
    "acquisition_act_ref": "TEXT NOT NULL DEFAULT ''",
    "title_date": "TEXT NOT NULL DEFAULT '1970-01-01'",
    "owner_id_number": "TEXT NOT NULL DEFAULT ''",
    "company_name": "TEXT",
    "rccm": "TEXT",
    "nif": "TEXT",
    "surveying_pv_ref": "TEXT NOT NULL DEFAULT ''",
    "surveyor_name": "TEXT NOT NULL DEFAULT ''",
    "surveyor_license": "TEXT NOT NULL DEFAULT ''",
    "cadastral_plan_ref": "TEXT NOT NULL DEFAULT ''",
    "servitudes": "TEXT",
    "charges": "TEXT",
    "litigation": "TEXT",
}


def _existing_columns(sync_conn, table: str) -> List[str]:
    inspector = inspect(sync_conn)
    if not inspector.has_table(table):
        return []
    return [column["name"] for column in inspector.get_columns(table)]


async def sync_parcel_columns(conn: AsyncConnection) -> List[str]:
    """
    Add every known parcel column that the live table lacks.

    Returns:
        Names of the columns that were added (empty when up to date or
        when the table does not exist yet).
    """
    existing = await conn.run_sync(_existing_columns, "parcels")
    if not existing:
        return []

    added: List[str] = []
    for name, ddl in PARCEL_COLUMN_DDL.items():
        if name in existing:
            continue
        await conn.execute(text(f"ALTER TABLE parcels ADD COLUMN {name} {ddl}"))
        added.append(name)

    if added:
        logger.info("Added %d missing parcel column(s): %s", len(added), ", ".join(added))
    return added


async def init_database(target: Optional[AsyncEngine] = None) -> List[str]:
    """
    Create missing tables, then bring the parcels table up to date.

    Called from the app lifespan when DB_AUTO_MIGRATE is enabled.
    """
    import efoncier.models  # noqa: F401  (registers every table on Base.metadata)

    target = target or engine
    async with target.begin() as conn:
        added = await sync_parcel_columns(conn)
        await conn.run_sync(Base.metadata.create_all)
    return added


async def dispose_engine() -> None:
    """Gracefully closes all connections in the pool (app shutdown)."""
    await engine.dispose()
