"""
e-Foncier Backend: Dashboard Statistics Route Handlers
=======================================================

Both endpoints answer with camelCase keys (`totalParcels`, ...), the shape
the dashboard charts read.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from efoncier.database import get_db_session
from efoncier.schemas.stats import ExtendedStatsResponse, StatsResponse
from efoncier.services.stats_service import stats_service

router = APIRouter(prefix="/api", tags=["Stats"])


@router.get("/stats", response_model=StatsResponse, summary="Register counters")
async def get_stats(db: AsyncSession = Depends(get_db_session)) -> StatsResponse:
    return await stats_service.get_stats(db=db)


@router.get(
    "/stats/extended",
    response_model=ExtendedStatsResponse,
    summary="Extended dashboard indicators",
)
async def get_extended_stats(db: AsyncSession = Depends(get_db_session)) -> ExtendedStatsResponse:
    return await stats_service.get_extended_stats(db=db)
