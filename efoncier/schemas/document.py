"""
Schemas for parcel documents (multipart upload, listing, download).
"""

import uuid
from datetime import datetime

from pydantic import BaseModel, Field


class DocumentResponse(BaseModel):
    """
    A stored attachment.

    `download_url` points at GET /api/parcels/{parcel_id}/documents/{id}/file;
    `file_path` is the storage-relative path kept in the database.
    """
    id: uuid.UUID
    parcel_id: uuid.UUID
    type: str = Field(description="Document category, e.g. 'Titre foncier'")
    mime: str = Field(description="MIME type detected from the file content")
    file_path: str
    original_name: str
    size_bytes: int
    created_at: datetime
    download_url: str
