"""
Schemas for citizen document requests (GET/POST /api/requests).
"""

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class RequestCreate(BaseModel):
    citizen_name: Optional[str] = Field(default=None, max_length=200)
    parcel_reference: Optional[str] = Field(default=None, max_length=100)
    document_type: Optional[str] = Field(default=None, max_length=150)
    status: Optional[str] = Field(
        default=None,
        description="Initial status; defaults to 'En attente'",
    )


class RequestStatusUpdate(BaseModel):
    status: Optional[str] = Field(default=None, description="'Approuvé' or 'Rejeté'")


class RequestResponse(BaseModel):
    id: uuid.UUID
    citizen_name: str
    parcel_reference: str
    document_type: str
    status: str
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}
