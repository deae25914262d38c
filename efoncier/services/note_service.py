"""
e-Foncier Backend: Parcel Note Service
=======================================

What:  Free-text annotations on a parcel file: list, add, edit, delete.
Who:   Called by the notes routes.

Every operation first resolves the parent parcel (404 when unknown); a
note id is only accepted together with the parcel that owns it.
"""

import logging
import uuid
from typing import List

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from efoncier.config import settings
from efoncier.exceptions import MissingFieldError, NotFoundError
from efoncier.models.parcel import Parcel, utcnow
from efoncier.models.parcel_note import ParcelNote
from efoncier.schemas.parcel_note import NoteCreate, NoteResponse, NoteUpdate
from efoncier.services.parcel_service import parcel_service

logger = logging.getLogger(__name__)


class NoteService:
    """
    Business logic layer for parcel notes.

    Notes are the only registry records that can be hard-deleted.
    """

    async def _get_owned_note(self, db: AsyncSession, parcel: Parcel, note_id: uuid.UUID) -> ParcelNote:
        result = await db.execute(
            select(ParcelNote).where(
                ParcelNote.id == note_id,
                ParcelNote.parcel_id == parcel.id,
            )
        )
        note = result.scalar_one_or_none()
        if note is None:
            raise NotFoundError(resource="note", resource_id=str(note_id))
        return note

    async def list_notes(self, db: AsyncSession, key: str) -> List[NoteResponse]:
        parcel = await parcel_service.get_parcel_model(db, key)
        result = await db.execute(
            select(ParcelNote)
            .where(ParcelNote.parcel_id == parcel.id)
            .order_by(ParcelNote.created_at.desc())
        )
        return [NoteResponse.model_validate(note) for note in result.scalars().all()]

    async def add_note(self, db: AsyncSession, key: str, payload: NoteCreate) -> NoteResponse:
        """
        Adds a note; `author` falls back to the configured default actor.

        Raises:
            NotFoundError: unknown parcel
            MissingFieldError: blank note text
        """
        parcel = await parcel_service.get_parcel_model(db, key)
        text = (payload.note or "").strip()
        if not text:
            raise MissingFieldError("note")

        note = ParcelNote(
            parcel_id=parcel.id,
            note=text,
            author=(payload.author or "").strip() or settings.default_actor,
        )
        db.add(note)
        await db.flush()

        logger.info("Note %s added to parcel %s", note.id, parcel.reference)
        return NoteResponse.model_validate(note)

    async def update_note(
        self,
        db: AsyncSession,
        key: str,
        note_id: uuid.UUID,
        payload: NoteUpdate,
    ) -> NoteResponse:
        parcel = await parcel_service.get_parcel_model(db, key)
        note = await self._get_owned_note(db, parcel, note_id)

        text = (payload.note or "").strip()
        if not text:
            raise MissingFieldError("note")

        note.note = text
        note.updated_at = utcnow()
        await db.flush()

        logger.info("Note %s on parcel %s edited", note.id, parcel.reference)
        return NoteResponse.model_validate(note)

    async def delete_note(self, db: AsyncSession, key: str, note_id: uuid.UUID) -> None:
        parcel = await parcel_service.get_parcel_model(db, key)
        note = await self._get_owned_note(db, parcel, note_id)

        await db.delete(note)
        await db.flush()
        logger.info("Note %s deleted from parcel %s", note_id, parcel.reference)


note_service = NoteService()
