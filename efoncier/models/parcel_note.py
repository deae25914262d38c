"""
e-Foncier Backend: Parcel Note SQLAlchemy Model
================================================

What:  Free-text annotation left by an agent on a parcel file.
Notes are the only registry rows that may be edited in place or deleted.
"""

import uuid
from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, String, Text, Uuid, text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from efoncier.database import Base
from efoncier.models.parcel import Parcel, utcnow


class ParcelNote(Base):
    __tablename__ = "parcel_notes"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    parcel_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("parcels.id"),
        nullable=False,
        index=True,
    )
    note: Mapped[str] = mapped_column(Text, nullable=False)
    author: Mapped[str] = mapped_column(String(100), nullable=False)
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

    parcel: Mapped[Parcel] = relationship(back_populates="notes", lazy="raise")

    def __repr__(self) -> str:
        return f"<ParcelNote(id={self.id}, author='{self.author}')>"
