"""
e-Foncier Backend: Parcel Note Route Handlers
==============================================

What:  CRUD on the agents' notes attached to a parcel.
Who:   Called by the notes panel of the parcel detail page.
"""

from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from efoncier.database import get_db_session
from efoncier.schemas.common import ErrorResponse
from efoncier.schemas.parcel_note import NoteCreate, NoteResponse, NoteUpdate
from efoncier.services.note_service import note_service

router = APIRouter(prefix="/api", tags=["Notes"])

_NOT_FOUND = {404: {"description": "Parcel or note not found", "model": ErrorResponse}}


@router.get(
    "/parcels/{key}/notes",
    response_model=List[NoteResponse],
    responses=_NOT_FOUND,
    summary="List the notes of a parcel, newest first",
)
async def list_notes(
    key: str,
    db: AsyncSession = Depends(get_db_session),
) -> List[NoteResponse]:
    return await note_service.list_notes(db=db, key=key)


@router.post(
    "/parcels/{key}/notes",
    response_model=NoteResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"description": "Missing note", "model": ErrorResponse}, **_NOT_FOUND},
    summary="Add a note to a parcel",
)
async def add_note(
    key: str,
    payload: NoteCreate,
    db: AsyncSession = Depends(get_db_session),
) -> NoteResponse:
    return await note_service.add_note(db=db, key=key, payload=payload)


@router.put(
    "/parcels/{key}/notes/{note_id}",
    response_model=NoteResponse,
    responses={400: {"description": "Missing note", "model": ErrorResponse}, **_NOT_FOUND},
    summary="Edit a note",
)
async def update_note(
    key: str,
    note_id: UUID,
    payload: NoteUpdate,
    db: AsyncSession = Depends(get_db_session),
) -> NoteResponse:
    return await note_service.update_note(db=db, key=key, note_id=note_id, payload=payload)


@router.delete(
    "/parcels/{key}/notes/{note_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses=_NOT_FOUND,
    summary="Delete a note",
)
async def delete_note(
    key: str,
    note_id: UUID,
    db: AsyncSession = Depends(get_db_session),
) -> Response:
    await note_service.delete_note(db=db, key=key, note_id=note_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
