"""
e-Foncier Backend: Document SQLAlchemy Model
=============================================

What:  A file attached to a parcel (title scan, survey minutes, plan, ...).
How:   The bytes live on disk under STORAGE_ROOT; the row keeps the path
       relative to that root, the detected MIME type and the original
       filename for downloads.
"""

import uuid
from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Integer, String, Uuid, text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from efoncier.database import Base
from efoncier.models.parcel import Parcel, utcnow


class Document(Base):
    __tablename__ = "documents"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    parcel_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("parcels.id"),
        nullable=False,
        index=True,
    )

    # Document category chosen by the agent (e.g. "Titre foncier")
    type: Mapped[str] = mapped_column(String(100), nullable=False)
    mime: Mapped[str] = mapped_column(String(100), nullable=False)

    # Format: parcels/<parcel_id>/<uuid>.<ext>
    file_path: Mapped[str] = mapped_column(String(255), nullable=False)
    original_name: Mapped[str] = mapped_column(String(255), nullable=False, server_default=text("''"))
    size_bytes: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default=text("0"))

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
    )

    parcel: Mapped[Parcel] = relationship(back_populates="documents", lazy="raise")

    def __repr__(self) -> str:
        return f"<Document(id={self.id}, type='{self.type}', parcel_id={self.parcel_id})>"
