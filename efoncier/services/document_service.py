"""
e-Foncier Backend: Parcel Document Service
===========================================

What:  Attaches uploaded files to a parcel, lists and locates them.
How:   Composes FileService (disk) with the `documents` table (metadata).

Upload Flow (POST /api/parcels/{key}/documents):
    ┌──────────┐    ┌──────────────┐    ┌──────────────┐    ┌──────────┐
    │ Resolve  │───▶│ Per file:    │───▶│ Document row │───▶│ Flush    │
    │ parcel   │    │ validate +   │    │ per file     │    │ (commit  │
    │          │    │ store (disk) │    │              │    │ by dep.) │
    └──────────┘    └──────────────┘    └──────────────┘    └──────────┘

    A request is all-or-nothing: if any file is rejected or any write
    fails, the files already written by that request are removed and the
    exception propagates (the session dependency rolls the rows back).
"""

import logging
import uuid
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from efoncier.config import settings
from efoncier.exceptions import MissingFieldError, NotFoundError, ValidationError
from efoncier.models.document import Document
from efoncier.schemas.document import DocumentResponse
from efoncier.services.file_service import file_service
from efoncier.services.parcel_service import parcel_service
from efoncier.vocabulary import DEFAULT_DOCUMENT_TYPE

logger = logging.getLogger(__name__)


@dataclass
class IncomingFile:
    """An uploaded part, already read into memory by the route."""

    filename: str
    content: bytes
    content_length: Optional[int] = None


def to_response(document: Document) -> DocumentResponse:
    return DocumentResponse(
        id=document.id,
        parcel_id=document.parcel_id,
        type=document.type,
        mime=document.mime,
        file_path=document.file_path,
        original_name=document.original_name,
        size_bytes=document.size_bytes,
        created_at=document.created_at,
        download_url=f"/api/parcels/{document.parcel_id}/documents/{document.id}/file",
    )


class DocumentService:

    async def upload_documents(
        self,
        db: AsyncSession,
        key: str,
        files: Sequence[IncomingFile],
        types: Sequence[str],
    ) -> List[DocumentResponse]:
        """
        Stores every file and records one Document row per file.

        Args:
            files: uploaded parts, in form order
            types: document categories; types[i] labels files[i], missing
                   or blank entries default to 'Autre'

        Raises:
            NotFoundError: unknown parcel
            MissingFieldError: no file in the request
            ValidationError: too many files, or a file failed validation
            FileStorageError: disk write failed
        """
        parcel = await parcel_service.get_parcel_model(db, key)

        if not files:
            raise MissingFieldError("files")
        if len(files) > settings.max_files_per_upload:
            raise ValidationError(
                message=f"Too many files: at most {settings.max_files_per_upload} per upload",
                field="files",
                context={"received": len(files)},
            )

        stored_paths: List[str] = []
        documents: List[Document] = []
        try:
            for index, incoming in enumerate(files):
                doc_type = types[index].strip() if index < len(types) and types[index] else ""
                absolute_path, relative_path, mime_type = await file_service.validate_and_store(
                    filename=incoming.filename,
                    content=incoming.content,
                    subdir=f"parcels/{parcel.id}",
                    content_length=incoming.content_length,
                )
                stored_paths.append(absolute_path)

                document = Document(
                    parcel_id=parcel.id,
                    type=doc_type or DEFAULT_DOCUMENT_TYPE,
                    mime=mime_type,
                    file_path=relative_path,
                    original_name=Path(incoming.filename).name[:255],
                    size_bytes=len(incoming.content),
                )
                db.add(document)
                documents.append(document)

            await db.flush()

        except Exception:
            for path in stored_paths:
                await file_service.cleanup_file(path)
            raise

        logger.info("Attached %d document(s) to parcel %s", len(documents), parcel.reference)
        return [to_response(document) for document in documents]

    async def list_documents(self, db: AsyncSession, key: str) -> List[DocumentResponse]:
        parcel = await parcel_service.get_parcel_model(db, key)
        result = await db.execute(
            select(Document)
            .where(Document.parcel_id == parcel.id)
            .order_by(Document.created_at.desc())
        )
        return [to_response(document) for document in result.scalars().all()]

    async def get_document_file(self, db: AsyncSession, key: str, document_id: uuid.UUID):
        """
        Returns (document row, absolute path) for a download.

        Raises:
            NotFoundError: unknown parcel, document not attached to it, or
            file missing from storage
        """
        parcel = await parcel_service.get_parcel_model(db, key)
        result = await db.execute(
            select(Document).where(
                Document.id == document_id,
                Document.parcel_id == parcel.id,
            )
        )
        document = result.scalar_one_or_none()
        if document is None:
            raise NotFoundError(resource="document", resource_id=str(document_id))
        return document, file_service.resolve(document.file_path)


document_service = DocumentService()
