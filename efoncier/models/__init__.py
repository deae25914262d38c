"""
ORM models. Importing this package registers every table on `Base.metadata`
(used by `init_database()` and Alembic autogenerate).
"""

from efoncier.models.parcel import Parcel
from efoncier.models.document import Document
from efoncier.models.parcel_history import ParcelHistory
from efoncier.models.parcel_note import ParcelNote
from efoncier.models.document_request import DocumentRequest

__all__ = ["Parcel", "Document", "ParcelHistory", "ParcelNote", "DocumentRequest"]
