"""
e-Foncier Backend: Parcel Request/Response Schemas
===================================================

What:  Pydantic models for the parcel endpoints.
How:   Input schemas are deliberately lenient about presence (every field is
       Optional) but strict about types: FastAPI rejects a non-numeric
       `area` before the service runs, while the service decides which
       fields are required so that a blank string and an absent key are
       reported the same way ("Missing field: owner_name").

Field groups follow the registration form:
    identification, location, legal status, title, owner, survey, encumbrances
"""

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class ParcelFields(BaseModel):
    """Descriptive parcel fields shared by the create and update payloads."""

    parcel_number: Optional[str] = Field(default=None, max_length=100)

    # ── Location ──────────────────────────────────────────────────────────
    province: Optional[str] = Field(default=None, max_length=100)
    territory_or_city: Optional[str] = Field(default=None, max_length=150)
    commune_or_sector: Optional[str] = Field(default=None, max_length=150)
    quartier_or_cheflieu: Optional[str] = Field(default=None, max_length=150)
    avenue: Optional[str] = Field(default=None, max_length=200)
    gps_lat: Optional[float] = Field(default=None, allow_inf_nan=False, description="Latitude in decimal degrees")
    gps_long: Optional[float] = Field(default=None, allow_inf_nan=False, description="Longitude in decimal degrees")
    area: Optional[float] = Field(default=None, allow_inf_nan=False, description="Surface in square metres")
    location: Optional[str] = None

    # ── Legal status ──────────────────────────────────────────────────────
    status: Optional[str] = Field(default=None, description="Libre, En litige or Hypothéqué")
    land_use: Optional[str] = Field(default=None, description="Résidentiel, Commercial, Agricole or Mixte")

    # ── Title and acquisition ─────────────────────────────────────────────
    certificate_number: Optional[str] = Field(default=None, max_length=100)
    issuing_authority: Optional[str] = Field(default=None, max_length=200)
    acquisition_type: Optional[str] = None
    acquisition_act_ref: Optional[str] = Field(default=None, max_length=100)
    title_date: Optional[str] = Field(default=None, description="ISO date (YYYY-MM-DD)")

    # ── Owner ─────────────────────────────────────────────────────────────
    owner_name: Optional[str] = Field(default=None, max_length=200)
    owner_id_number: Optional[str] = Field(default=None, max_length=100)
    company_name: Optional[str] = Field(default=None, max_length=200)
    rccm: Optional[str] = Field(default=None, max_length=100)
    nif: Optional[str] = Field(default=None, max_length=100)

    # ── Survey ────────────────────────────────────────────────────────────
    surveying_pv_ref: Optional[str] = Field(default=None, max_length=100)
    surveyor_name: Optional[str] = Field(default=None, max_length=200)
    surveyor_license: Optional[str] = Field(default=None, max_length=100)
    cadastral_plan_ref: Optional[str] = Field(default=None, max_length=100)

    # ── Encumbrances ──────────────────────────────────────────────────────
    servitudes: Optional[str] = None
    charges: Optional[str] = None
    litigation: Optional[str] = None

    model_config = {"extra": "ignore"}


class ParcelCreate(ParcelFields):
    """
    Body of POST /api/parcels.

    `reference` may be omitted; the service then generates `AUTO-xxxxxxxx`.
    """
    reference: Optional[str] = Field(default=None, max_length=100)


class ParcelUpdate(ParcelFields):
    """
    Body of PUT /api/parcels/{key}.

    Only keys present in the body are considered; absent keys keep their
    stored value. Server-managed fields (id, created_at, updated_at) are
    ignored if sent.
    """
    reference: Optional[str] = Field(default=None, max_length=100)


class ParcelResponse(BaseModel):
    """Full parcel row as returned by every parcel endpoint."""

    id: uuid.UUID
    reference: str
    parcel_number: str
    province: str
    territory_or_city: str
    commune_or_sector: str
    quartier_or_cheflieu: str
    avenue: str
    gps_lat: float
    gps_long: float
    area: float
    location: Optional[str] = None
    status: str
    land_use: str
    certificate_number: str
    issuing_authority: str
    acquisition_type: str
    acquisition_act_ref: str
    title_date: str
    owner_name: str
    owner_id_number: str
    company_name: Optional[str] = None
    rccm: Optional[str] = None
    nif: Optional[str] = None
    surveying_pv_ref: str
    surveyor_name: str
    surveyor_license: str
    cadastral_plan_ref: str
    servitudes: Optional[str] = None
    charges: Optional[str] = None
    litigation: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}
