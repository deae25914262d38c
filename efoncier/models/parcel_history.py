"""
e-Foncier Backend: Parcel History SQLAlchemy Model
===================================================

What:  Append-only audit trail of parcel modifications.
How:   `changes` is a JSON document. Rows written by the update workflow
       hold a field diff, `{"status": {"from": "Libre", "to": "En litige"}}`;
       manual entries may hold any JSON value.

Rows are inserted and read, never updated or deleted.
"""

import uuid
from datetime import datetime
from typing import Any

from sqlalchemy import JSON, DateTime, ForeignKey, Index, String, Uuid, text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from efoncier.database import Base
from efoncier.models.parcel import Parcel, utcnow


class ParcelHistory(Base):
    __tablename__ = "parcel_history"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    parcel_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("parcels.id"), nullable=False)
    changes: Mapped[Any] = mapped_column(JSON, nullable=False)

    # Actor that made the change ("user" is reserved in PostgreSQL, hence the
    # column name; the API exposes it as `user`)
    changed_by: Mapped[str] = mapped_column(String(100), nullable=False)
    changed_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
    )

    parcel: Mapped[Parcel] = relationship(back_populates="history", lazy="raise")

    __table_args__ = (
        Index("idx_parcel_history_parcel_changed", "parcel_id", "changed_at"),
    )

    def __repr__(self) -> str:
        return f"<ParcelHistory(parcel_id={self.parcel_id}, changed_at='{self.changed_at}')>"
