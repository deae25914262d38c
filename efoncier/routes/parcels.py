"""
e-Foncier Backend: Parcel Route Handlers
=========================================

What:  List, register, read and update parcels.
Who:   Called by the register list, search, registration form and detail
       pages of the dashboard.

`{key}` accepts either the parcel UUID or its cadastral reference, so the
search page can link straight to `/api/parcels/KIN-00042`.
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Header, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from efoncier.config import settings
from efoncier.database import get_db_session
from efoncier.schemas.common import ErrorResponse
from efoncier.schemas.parcel import ParcelCreate, ParcelResponse, ParcelUpdate
from efoncier.services.parcel_service import parcel_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Parcels"])


@router.get(
    "/parcels",
    response_model=List[ParcelResponse],
    responses={500: {"description": "Server error", "model": ErrorResponse}},
    summary="List parcels, newest first",
)
async def list_parcels(
    response: Response,
    status_filter: Optional[str] = Query(
        default=None,
        alias="status",
        description="Legal status (Libre, En litige, Hypothéqué); 'all' or omitted for every status",
    ),
    q: Optional[str] = Query(
        default=None,
        description="Case-insensitive search on reference, parcel number and owner name",
    ),
    province: Optional[str] = Query(default=None),
    limit: Optional[int] = Query(default=None, ge=1, le=1000),
    offset: int = Query(default=0, ge=0),
    db: AsyncSession = Depends(get_db_session),
) -> List[ParcelResponse]:
    """
    Returns the register as an array; the number of parcels matching the
    filters (ignoring limit/offset) is sent in `X-Total-Count`.
    """
    parcels, total_count = await parcel_service.list_parcels(
        db=db,
        status=status_filter,
        q=q,
        province=province,
        limit=limit,
        offset=offset,
    )
    response.headers["X-Total-Count"] = str(total_count)
    return parcels


@router.post(
    "/parcels",
    response_model=ParcelResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"description": "Missing or invalid field", "model": ErrorResponse},
        409: {"description": "Reference already exists", "model": ErrorResponse},
    },
    summary="Register a parcel",
)
async def create_parcel(
    payload: ParcelCreate,
    db: AsyncSession = Depends(get_db_session),
) -> ParcelResponse:
    return await parcel_service.create_parcel(db=db, payload=payload)


@router.get(
    "/parcels/{key}",
    response_model=ParcelResponse,
    responses={404: {"description": "Parcel not found", "model": ErrorResponse}},
    summary="Get a parcel by id or reference",
)
async def get_parcel(
    key: str,
    db: AsyncSession = Depends(get_db_session),
) -> ParcelResponse:
    return await parcel_service.get_parcel(db=db, key=key)


@router.put(
    "/parcels/{key}",
    response_model=ParcelResponse,
    responses={
        400: {"description": "Missing or invalid field", "model": ErrorResponse},
        404: {"description": "Parcel not found", "model": ErrorResponse},
        409: {"description": "Reference already exists", "model": ErrorResponse},
    },
    summary="Update a parcel and record the change in its history",
)
async def update_parcel(
    key: str,
    payload: ParcelUpdate,
    x_user: Optional[str] = Header(default=None, description="Name of the agent making the change"),
    db: AsyncSession = Depends(get_db_session),
) -> ParcelResponse:
    """
    Applies the submitted fields. When at least one value differs from the
    stored parcel, one history entry with the `{field: {from, to}}` diff is
    written in the same transaction, attributed to `X-User`.
    """
    user = (x_user or "").strip() or settings.default_actor
    return await parcel_service.update_parcel(db=db, key=key, payload=payload, user=user)
