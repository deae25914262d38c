"""
e-Foncier Backend: Parcel Document Route Handlers
==================================================

What:  Upload, list and download the scanned documents of a parcel
       (title deeds, survey reports, plans).

Request Flow (POST /api/parcels/{key}/documents):
    1. Client sends multipart/form-data with repeated `files` parts and,
       optionally, parallel `types` parts (types[i] labels files[i])
    2. Each part is read into memory; size is bounded by validation
    3. DocumentService validates and stores every file, or none of them
    4. 201 Created with one document record per file
"""

import logging
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, File, Form, UploadFile, status
from fastapi.responses import FileResponse
from sqlalchemy.ext.asyncio import AsyncSession

from efoncier.database import get_db_session
from efoncier.schemas.common import ErrorResponse
from efoncier.schemas.document import DocumentResponse
from efoncier.services.document_service import IncomingFile, document_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Documents"])


@router.get(
    "/parcels/{key}/documents",
    response_model=List[DocumentResponse],
    responses={404: {"description": "Parcel not found", "model": ErrorResponse}},
    summary="List the documents attached to a parcel, newest first",
)
async def list_documents(
    key: str,
    db: AsyncSession = Depends(get_db_session),
) -> List[DocumentResponse]:
    return await document_service.list_documents(db=db, key=key)


@router.post(
    "/parcels/{key}/documents",
    response_model=List[DocumentResponse],
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"description": "Missing, invalid or oversized file", "model": ErrorResponse},
        404: {"description": "Parcel not found", "model": ErrorResponse},
        500: {"description": "Storage failure", "model": ErrorResponse},
    },
    summary="Attach documents to a parcel",
    description="Accepts PDF, PNG and JPEG files. The whole upload is rejected if one file is invalid.",
)
async def upload_documents(
    key: str,
    files: Optional[List[UploadFile]] = File(default=None, description="Document files"),
    types: Optional[List[str]] = Form(default=None, description="Document category of each file"),
    db: AsyncSession = Depends(get_db_session),
) -> List[DocumentResponse]:
    incoming = []
    try:
        for upload in files or []:
            content = await upload.read()
            incoming.append(
                IncomingFile(
                    filename=upload.filename or "",
                    content=content,
                    content_length=upload.size,
                )
            )
    finally:
        for upload in files or []:
            await upload.close()

    logger.info(
        "Received %d document(s) for parcel %s (%d bytes)",
        len(incoming),
        key,
        sum(len(f.content) for f in incoming),
    )
    return await document_service.upload_documents(db=db, key=key, files=incoming, types=types or [])


@router.get(
    "/parcels/{key}/documents/{document_id}/file",
    responses={
        200: {"description": "The stored file"},
        404: {"description": "Parcel, document or file not found", "model": ErrorResponse},
    },
    summary="Download a stored document",
)
async def download_document(
    key: str,
    document_id: UUID,
    db: AsyncSession = Depends(get_db_session),
) -> FileResponse:
    document, path = await document_service.get_document_file(db=db, key=key, document_id=document_id)
    return FileResponse(
        path=str(path),
        media_type=document.mime,
        filename=document.original_name,
        headers={"Cache-Control": "private, max-age=3600"},
    )
