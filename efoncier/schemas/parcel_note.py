"""
Schemas for parcel notes (GET/POST/PUT/DELETE /api/parcels/{key}/notes).
"""

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class NoteCreate(BaseModel):
    note: Optional[str] = Field(default=None, description="Note text (required, non-blank)")
    author: Optional[str] = Field(default=None, max_length=100)


class NoteUpdate(BaseModel):
    note: Optional[str] = Field(default=None, description="Replacement text (required, non-blank)")


class NoteResponse(BaseModel):
    id: uuid.UUID
    parcel_id: uuid.UUID
    note: str
    author: str
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}
