"""
e-Foncier Backend: Citizen Request Route Handlers
==================================================

What:  File citizens' document requests and move them through the
       pending → approved / rejected workflow.
"""

from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from efoncier.database import get_db_session
from efoncier.schemas.common import ErrorResponse
from efoncier.schemas.document_request import RequestCreate, RequestResponse, RequestStatusUpdate
from efoncier.services.request_service import request_service

router = APIRouter(prefix="/api", tags=["Requests"])


@router.get(
    "/requests",
    response_model=List[RequestResponse],
    summary="List citizen requests, newest first",
)
async def list_requests(
    status_filter: Optional[str] = Query(default=None, alias="status"),
    db: AsyncSession = Depends(get_db_session),
) -> List[RequestResponse]:
    return await request_service.list_requests(db=db, status=status_filter)


@router.post(
    "/requests",
    response_model=RequestResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"description": "Invalid payload", "model": ErrorResponse}},
    summary="File a document request",
)
async def create_request(
    payload: RequestCreate,
    db: AsyncSession = Depends(get_db_session),
) -> RequestResponse:
    return await request_service.create_request(db=db, payload=payload)


@router.put(
    "/requests/{request_id}/status",
    response_model=RequestResponse,
    responses={
        400: {"description": "Unknown status", "model": ErrorResponse},
        404: {"description": "Request not found", "model": ErrorResponse},
        409: {"description": "Transition not allowed", "model": ErrorResponse},
    },
    summary="Approve or reject a pending request",
)
async def update_request_status(
    request_id: UUID,
    payload: RequestStatusUpdate,
    db: AsyncSession = Depends(get_db_session),
) -> RequestResponse:
    return await request_service.update_request_status(db=db, request_id=request_id, payload=payload)
