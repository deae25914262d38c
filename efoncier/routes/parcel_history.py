"""
e-Foncier Backend: Parcel History Route Handlers
=================================================

What:  Read the audit trail of a parcel and append manual entries.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from efoncier.database import get_db_session
from efoncier.schemas.common import ErrorResponse
from efoncier.schemas.parcel_history import HistoryCreate, HistoryResponse
from efoncier.services.history_service import history_service

router = APIRouter(prefix="/api", tags=["History"])


@router.get(
    "/parcels/{key}/history",
    response_model=List[HistoryResponse],
    responses={
        400: {"description": "Invalid date bound", "model": ErrorResponse},
        404: {"description": "Parcel not found", "model": ErrorResponse},
    },
    summary="List the change history of a parcel, newest first",
)
async def list_history(
    key: str,
    from_date: Optional[str] = Query(default=None, description="Inclusive lower bound (ISO 8601)"),
    to_date: Optional[str] = Query(default=None, description="Inclusive upper bound (ISO 8601)"),
    field: Optional[str] = Query(default=None, description="Only entries that changed this field"),
    db: AsyncSession = Depends(get_db_session),
) -> List[HistoryResponse]:
    return await history_service.list_history(
        db=db, key=key, from_date=from_date, to_date=to_date, field=field
    )


@router.post(
    "/parcels/{key}/history",
    response_model=HistoryResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"description": "Missing changes", "model": ErrorResponse},
        404: {"description": "Parcel not found", "model": ErrorResponse},
    },
    summary="Append a manual history entry",
)
async def add_history(
    key: str,
    payload: HistoryCreate,
    db: AsyncSession = Depends(get_db_session),
) -> HistoryResponse:
    return await history_service.add_history(db=db, key=key, payload=payload)
