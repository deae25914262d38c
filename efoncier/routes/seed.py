"""
e-Foncier Backend: Test Data Route
===================================

POST /api/seed fills the register with generated parcels, notes and
citizen requests. Intended for demonstrations and manual testing.
"""

from typing import Optional

from fastapi import APIRouter, Body, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from efoncier.database import get_db_session
from efoncier.schemas.common import ErrorResponse
from efoncier.schemas.seed import SeedRequest, SeedResponse
from efoncier.services.seed_service import seed_service

router = APIRouter(prefix="/api", tags=["Seed"])


@router.post(
    "/seed",
    response_model=SeedResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"description": "Count above the allowed maximum", "model": ErrorResponse}},
    summary="Generate test data",
)
async def seed(
    payload: Optional[SeedRequest] = Body(default=None),
    db: AsyncSession = Depends(get_db_session),
) -> SeedResponse:
    return await seed_service.seed(db=db, payload=payload or SeedRequest())
