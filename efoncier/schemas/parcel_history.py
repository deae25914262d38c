"""
Schemas for the parcel audit trail (GET/POST /api/parcels/{key}/history).
"""

import uuid
from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, Field


class HistoryCreate(BaseModel):
    """
    Manual history entry.

    `changes` accepts any JSON value; entries written by the update
    workflow use `{field: {"from": old, "to": new}}`.
    """
    changes: Any = Field(default=None, description="Description of the change (JSON)")
    user: Optional[str] = Field(default=None, max_length=100, description="Actor name")


class HistoryResponse(BaseModel):
    id: uuid.UUID
    parcel_id: uuid.UUID
    changes: Any
    user: str
    changed_at: datetime
