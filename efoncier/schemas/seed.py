"""
Schemas for the test-data generator (POST /api/seed).
"""

from typing import List, Optional

from pydantic import BaseModel, Field


class SeedRequest(BaseModel):
    count: int = Field(default=20, ge=1, description="Number of parcels to generate")
    requests: int = Field(default=10, ge=0, description="Number of citizen requests to generate")
    notes_per_parcel: int = Field(default=1, ge=0, le=5)
    seed: Optional[int] = Field(default=None, description="Random seed for reproducible data")


class SeedResponse(BaseModel):
    parcels: int
    requests: int
    notes: int
    references: List[str] = Field(description="References of the generated parcels")
