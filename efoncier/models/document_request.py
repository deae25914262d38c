"""
e-Foncier Backend: Citizen Document Request SQLAlchemy Model
=============================================================

What:  A citizen's request for an official document about a parcel
       (title copy, certificate of legal situation, ...).
How:   `parcel_reference` is the reference quoted by the citizen. It is kept
       as text rather than a foreign key: requests may be filed before an
       agent has checked that the reference exists.

Status workflow:
    'En attente' (pending) → 'Approuvé' (approved) | 'Rejeté' (rejected)
"""

import uuid
from datetime import datetime

from sqlalchemy import DateTime, Index, String, Uuid, text
from sqlalchemy.orm import Mapped, mapped_column

from efoncier.database import Base
from efoncier.models.parcel import utcnow


class DocumentRequest(Base):
    __tablename__ = "requests"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    citizen_name: Mapped[str] = mapped_column(String(200), nullable=False)
    parcel_reference: Mapped[str] = mapped_column(String(100), nullable=False)
    document_type: Mapped[str] = mapped_column(String(150), nullable=False)
    status: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
        default="En attente",
        server_default=text("'En attente'"),
    )
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

    __table_args__ = (
        Index("idx_requests_status", "status"),
        Index("idx_requests_parcel_reference", "parcel_reference"),
    )

    def __repr__(self) -> str:
        return f"<DocumentRequest(id={self.id}, status='{self.status}')>"
