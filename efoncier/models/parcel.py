"""
e-Foncier Backend: Parcel SQLAlchemy Model
===========================================

What:  ORM model for the `parcels` table, the cadastral register itself.
How:   One row per land plot. Descriptive fields are grouped the way the
       registration form collects them: location hierarchy, GPS position,
       legal status, title and acquisition, owner, survey references, and
       encumbrances.

Table Design Notes:
    - UUID primary key; the cadastral `reference` is the business key and
      carries a UNIQUE constraint.
    - Required text columns are NOT NULL with '' server defaults so that
      rows migrated from older schemas remain valid.
    - Optional text (company, encumbrances) is NULL rather than ''.
    - Parcels are never deleted; the audit trail lives in `parcel_history`.
"""

import uuid
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import DateTime, Float, Index, String, Text, Uuid, text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from efoncier.database import Base


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Parcel(Base):
    """
    A registered land plot.

    Query Patterns:
        - Register listing: ORDER BY created_at DESC, optional status filter
          → idx_parcels_created_at, idx_parcels_status
        - Lookup by reference (search page, detail page)
          → unique index on reference
        - Dashboard aggregates: GROUP BY province / territory_or_city
    """

    __tablename__ = "parcels"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )

    # ── Identification ────────────────────────────────────────────────────
    reference: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
        unique=True,
        comment="Cadastral reference, unique across the register",
    )
    parcel_number: Mapped[str] = mapped_column(String(100), nullable=False, server_default=text("''"))

    # ── Location hierarchy ────────────────────────────────────────────────
    province: Mapped[str] = mapped_column(String(100), nullable=False, server_default=text("''"))
    territory_or_city: Mapped[str] = mapped_column(String(150), nullable=False, server_default=text("''"))
    commune_or_sector: Mapped[str] = mapped_column(String(150), nullable=False, server_default=text("''"))
    quartier_or_cheflieu: Mapped[str] = mapped_column(String(150), nullable=False, server_default=text("''"))
    avenue: Mapped[str] = mapped_column(String(200), nullable=False, server_default=text("''"))
    gps_lat: Mapped[float] = mapped_column(Float, nullable=False, default=0.0, server_default=text("0"))
    gps_long: Mapped[float] = mapped_column(Float, nullable=False, default=0.0, server_default=text("0"))
    area: Mapped[float] = mapped_column(Float, nullable=False, comment="Surface in square metres")
    location: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    # ── Legal status and use ──────────────────────────────────────────────
    # Values: 'Libre' | 'En litige' | 'Hypothéqué'
    status: Mapped[str] = mapped_column(String(50), nullable=False)
    land_use: Mapped[str] = mapped_column(
        String(50), nullable=False, server_default=text("'Résidentiel'")
    )

    # ── Title and acquisition ─────────────────────────────────────────────
    certificate_number: Mapped[str] = mapped_column(String(100), nullable=False, default="", server_default=text("''"))
    issuing_authority: Mapped[str] = mapped_column(String(200), nullable=False, default="", server_default=text("''"))
    acquisition_type: Mapped[str] = mapped_column(
        String(50), nullable=False, server_default=text("'Concession'")
    )
    acquisition_act_ref: Mapped[str] = mapped_column(String(100), nullable=False, server_default=text("''"))
    title_date: Mapped[str] = mapped_column(
        String(10), nullable=False, server_default=text("'1970-01-01'"), comment="ISO date (YYYY-MM-DD)"
    )

    # ── Owner ─────────────────────────────────────────────────────────────
    owner_name: Mapped[str] = mapped_column(String(200), nullable=False)
    owner_id_number: Mapped[str] = mapped_column(String(100), nullable=False, server_default=text("''"))
    company_name: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)
    rccm: Mapped[Optional[str]] = mapped_column(String(100), nullable=True, comment="Trade register number")
    nif: Mapped[Optional[str]] = mapped_column(String(100), nullable=True, comment="Tax identification number")

    # ── Survey ────────────────────────────────────────────────────────────
    surveying_pv_ref: Mapped[str] = mapped_column(String(100), nullable=False, server_default=text("''"))
    surveyor_name: Mapped[str] = mapped_column(String(200), nullable=False, server_default=text("''"))
    surveyor_license: Mapped[str] = mapped_column(String(100), nullable=False, server_default=text("''"))
    cadastral_plan_ref: Mapped[str] = mapped_column(String(100), nullable=False, default="", server_default=text("''"))

    # ── Encumbrances ──────────────────────────────────────────────────────
    servitudes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    charges: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    litigation: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    # ── Timestamps ────────────────────────────────────────────────────────
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
    )

    # ── Relationships ─────────────────────────────────────────────────────
    # Loaded explicitly by the services that need them; never lazily.
    documents: Mapped[List["Document"]] = relationship(back_populates="parcel", lazy="raise")
    history: Mapped[List["ParcelHistory"]] = relationship(back_populates="parcel", lazy="raise")
    notes: Mapped[List["ParcelNote"]] = relationship(back_populates="parcel", lazy="raise")

    __table_args__ = (
        Index("idx_parcels_status", "status"),
        Index("idx_parcels_created_at", created_at.desc()),
        Index("idx_parcels_province", "province"),
    )

    def __repr__(self) -> str:
        return f"<Parcel(reference='{self.reference}', status='{self.status}')>"
