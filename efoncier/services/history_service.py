"""
e-Foncier Backend: Parcel History Service
==========================================

What:  Reads and appends the audit trail of a parcel.
How:   History rows are written in two ways: by ParcelService.update_parcel()
       with a computed diff, and manually through POST .../history (for
       events recorded outside the update form, such as a court ruling).
"""

import json
import logging
import re
from datetime import date, datetime, time, timedelta, timezone
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from efoncier.config import settings
from efoncier.exceptions import MissingFieldError, ValidationError
from efoncier.models.parcel_history import ParcelHistory
from efoncier.schemas.parcel_history import HistoryCreate, HistoryResponse
from efoncier.services.parcel_service import parcel_service

logger = logging.getLogger(__name__)

DATE_RE = re.compile(r"\d{4}-\d{2}-\d{2}")
DATETIME_RE = re.compile(r"\d{4}-\d{2}-\d{2}[T ].+")


def parse_bound(value: str, field: str, end_of_day: bool = False) -> datetime:
    """
    Parses an ISO date or datetime query bound into an aware UTC datetime.

    Accepts `YYYY-MM-DD` or an extended datetime (`YYYY-MM-DDTHH:MM[:SS][+HH:MM|Z]`).
    A bare date used as an upper bound covers the whole day.
    """
    value = value.strip()
    date_only = DATE_RE.fullmatch(value) is not None
    try:
        if date_only:
            parsed = datetime.combine(date.fromisoformat(value), time())
        elif DATETIME_RE.fullmatch(value):
            if value.endswith(("Z", "z")):
                value = value[:-1] + "+00:00"
            parsed = datetime.fromisoformat(value)
        else:
            raise ValueError(value)
    except ValueError:
        raise ValidationError(message=f"Invalid field: {field} (expected ISO 8601 date)", field=field)
    if end_of_day and date_only:
        parsed = parsed + timedelta(days=1) - timedelta(microseconds=1)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def _touches_field(changes, needle: str) -> bool:
    if isinstance(changes, dict):
        return any(needle in str(key).lower() for key in changes)
    return needle in json.dumps(changes, ensure_ascii=False).lower()


def to_response(row: ParcelHistory) -> HistoryResponse:
    return HistoryResponse(
        id=row.id,
        parcel_id=row.parcel_id,
        changes=row.changes,
        user=row.changed_by,
        changed_at=row.changed_at,
    )


class HistoryService:

    async def list_history(
        self,
        db: AsyncSession,
        key: str,
        from_date: Optional[str] = None,
        to_date: Optional[str] = None,
        field: Optional[str] = None,
    ) -> List[HistoryResponse]:
        """
        Lists the history of a parcel, newest first.

        Args:
            from_date / to_date: inclusive ISO bounds on changed_at
            field: case-insensitive fragment of a changed field name
        """
        parcel = await parcel_service.get_parcel_model(db, key)

        query = select(ParcelHistory).where(ParcelHistory.parcel_id == parcel.id)
        if from_date:
            query = query.where(ParcelHistory.changed_at >= parse_bound(from_date, "from_date"))
        if to_date:
            query = query.where(ParcelHistory.changed_at <= parse_bound(to_date, "to_date", end_of_day=True))
        query = query.order_by(ParcelHistory.changed_at.desc())

        result = await db.execute(query)
        rows = list(result.scalars().all())

        if field and field.strip():
            needle = field.strip().lower()
            rows = [row for row in rows if _touches_field(row.changes, needle)]

        return [to_response(row) for row in rows]

    async def add_history(self, db: AsyncSession, key: str, payload: HistoryCreate) -> HistoryResponse:
        """
        Appends a manual history entry.

        Raises:
            MissingFieldError: `changes` is absent or blank (→ 400)
        """
        parcel = await parcel_service.get_parcel_model(db, key)

        changes = payload.changes
        if changes is None or (isinstance(changes, (str, dict, list)) and not changes):
            raise MissingFieldError("changes")

        user = (payload.user or "").strip() or settings.default_actor
        row = ParcelHistory(parcel_id=parcel.id, changes=changes, changed_by=user)
        db.add(row)
        await db.flush()

        logger.info("History entry added to parcel %s by %s", parcel.reference, user)
        return to_response(row)


history_service = HistoryService()
