"""
e-Foncier Backend: Parcel Service
==================================

What:  Business rules of the cadastral register: listing, lookup,
       registration and audited modification of parcels.
Who:   Called by the parcel routes; `get_parcel_model()` is also used by the
       history, note and document services to resolve their parent parcel.

Update workflow (PUT /api/parcels/{key}):
    ┌──────────┐   ┌────────────┐   ┌──────────────┐   ┌────────────────┐
    │ Resolve  │──▶│ Validate   │──▶│ Diff against │──▶│ Apply + append │
    │ parcel   │   │ submitted  │   │ stored row   │   │ history row    │
    └──────────┘   └────────────┘   └──────────────┘   └────────────────┘

    Both writes are flushed in the request's transaction: either the parcel
    changes and exactly one history row exists for the change, or nothing
    is written. A submission identical to the stored row writes nothing.
"""

import logging
import math
import re
import uuid
from datetime import date
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import func, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from efoncier.exceptions import ConflictError, MissingFieldError, NotFoundError, ValidationError
from efoncier.models.parcel import Parcel, utcnow
from efoncier.models.parcel_history import ParcelHistory
from efoncier.schemas.parcel import ParcelCreate, ParcelFields, ParcelResponse, ParcelUpdate
from efoncier.vocabulary import ACQUISITION_TYPES, LAND_USES, PARCEL_STATUSES

logger = logging.getLogger(__name__)

# Checked in this order; the first missing one is reported.
REQUIRED_FIELDS = (
    "parcel_number",
    "province",
    "territory_or_city",
    "commune_or_sector",
    "quartier_or_cheflieu",
    "avenue",
    "area",
    "status",
    "land_use",
    "acquisition_type",
    "acquisition_act_ref",
    "title_date",
    "owner_name",
    "owner_id_number",
    "surveying_pv_ref",
    "surveyor_name",
    "surveyor_license",
)

# Stored as NULL when blank.
NULLABLE_TEXT_FIELDS = ("location", "company_name", "rccm", "nif", "servitudes", "charges", "litigation")

# Optional on input but stored as '' when blank.
DEFAULTED_TEXT_FIELDS = ("certificate_number", "issuing_authority", "cadastral_plan_ref")

COORDINATE_FIELDS = ("gps_lat", "gps_long")

NUMERIC_FIELDS = ("area",) + COORDINATE_FIELDS

TITLE_DATE_RE = re.compile(r"\d{4}-\d{2}-\d{2}")

DESCRIPTIVE_FIELDS = tuple(ParcelFields.model_fields)


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and value.strip() == "")


def generate_reference() -> str:
    """Reference given to parcels registered without one: AUTO-<8 hex chars>."""
    return f"AUTO-{uuid.uuid4().hex[:8]}"


def compute_changes(parcel: Parcel, values: Dict[str, Any]) -> Dict[str, Dict[str, Any]]:
    """
    Diff submitted values against the stored parcel.

    Returns:
        `{field: {"from": stored, "to": submitted}}` for every field whose
        value differs. Numbers are compared as floats so 250 and 250.0 are
        the same area.
    """
    changes: Dict[str, Dict[str, Any]] = {}
    for field, new_value in values.items():
        old_value = getattr(parcel, field)
        if isinstance(old_value, (int, float)) and isinstance(new_value, (int, float)):
            if float(old_value) == float(new_value):
                continue
        elif old_value == new_value:
            continue
        changes[field] = {"from": old_value, "to": new_value}
    return changes


class ParcelService:
    """
    Stateless service over the `parcels` table.

    Every method receives the request's AsyncSession; nothing is committed
    here (get_db_session commits once the route returns).
    """

    # ── Validation helpers ────────────────────────────────────────────────

    def _normalise(self, data: Dict[str, Any]) -> Dict[str, Any]:
        """Strips text, maps blanks to NULL or '' per column, defaults coordinates to 0."""
        values: Dict[str, Any] = {}
        for field, value in data.items():
            if field not in DESCRIPTIVE_FIELDS:
                continue
            if isinstance(value, str):
                value = value.strip()
            if field in NULLABLE_TEXT_FIELDS:
                value = value or None
            elif field in DEFAULTED_TEXT_FIELDS:
                value = value or ""
            elif field in COORDINATE_FIELDS:
                value = 0.0 if value is None else float(value)
            values[field] = value
        return values

    def _validate_values(self, values: Dict[str, Any]) -> None:
        """Range and vocabulary checks on normalised values (only keys present)."""
        for field in NUMERIC_FIELDS:
            if field in values and not math.isfinite(values[field]):
                raise ValidationError(message=f"Invalid field: {field}", field=field)
        if "area" in values and values["area"] <= 0:
            raise ValidationError(message="Area must be greater than 0", field="area")
        if "gps_lat" in values and not -90 <= values["gps_lat"] <= 90:
            raise ValidationError(message="Latitude must be between -90 and 90", field="gps_lat")
        if "gps_long" in values and not -180 <= values["gps_long"] <= 180:
            raise ValidationError(message="Longitude must be between -180 and 180", field="gps_long")
        if "status" in values and values["status"] not in PARCEL_STATUSES:
            raise ValidationError(
                message=f"Invalid status '{values['status']}'. Allowed: {', '.join(PARCEL_STATUSES)}",
                field="status",
            )
        if "land_use" in values and values["land_use"] not in LAND_USES:
            raise ValidationError(
                message=f"Invalid land use '{values['land_use']}'. Allowed: {', '.join(LAND_USES)}",
                field="land_use",
            )
        if "acquisition_type" in values and values["acquisition_type"] not in ACQUISITION_TYPES:
            raise ValidationError(
                message=(
                    f"Invalid acquisition type '{values['acquisition_type']}'. "
                    f"Allowed: {', '.join(ACQUISITION_TYPES)}"
                ),
                field="acquisition_type",
            )
        if "title_date" in values:
            try:
                if not TITLE_DATE_RE.fullmatch(values["title_date"]):
                    raise ValueError(values["title_date"])
                date.fromisoformat(values["title_date"])
            except ValueError:
                raise ValidationError(
                    message="Invalid field: title_date (expected YYYY-MM-DD)",
                    field="title_date",
                )

    async def _reference_taken(
        self, db: AsyncSession, reference: str, exclude_id: Optional[uuid.UUID] = None
    ) -> bool:
        query = select(Parcel.id).where(Parcel.reference == reference)
        if exclude_id is not None:
            query = query.where(Parcel.id != exclude_id)
        result = await db.execute(query)
        return result.first() is not None

    async def _flush_unique(self, db: AsyncSession, reference: str) -> None:
        """
        Flushes pending writes, turning a unique-reference violation into 409.

        Other integrity errors propagate and surface as DatabaseError.
        """
        try:
            await db.flush()
        except IntegrityError as e:
            if "reference" not in str(e.orig).lower():
                raise
            logger.warning("Integrity error while saving parcel %s: %s", reference, e.orig)
            raise ConflictError(
                message="Reference already exists",
                context={"reference": reference},
            )

    # ── Queries ───────────────────────────────────────────────────────────

    async def get_parcel_model(self, db: AsyncSession, key: str) -> Parcel:
        """
        Resolves a parcel by UUID or by cadastral reference.

        A key that parses as a UUID is tried as an id first, then as a
        reference; any other key is a reference.

        Raises:
            NotFoundError: no parcel matches (→ 404)
        """
        parcel = None
        try:
            parcel_id = uuid.UUID(key)
        except ValueError:
            parcel_id = None

        if parcel_id is not None:
            parcel = await db.get(Parcel, parcel_id)
        if parcel is None:
            result = await db.execute(select(Parcel).where(Parcel.reference == key))
            parcel = result.scalar_one_or_none()
        if parcel is None:
            raise NotFoundError(resource="parcel", resource_id=key)
        return parcel

    async def get_parcel(self, db: AsyncSession, key: str) -> ParcelResponse:
        parcel = await self.get_parcel_model(db, key)
        return ParcelResponse.model_validate(parcel)

    async def list_parcels(
        self,
        db: AsyncSession,
        status: Optional[str] = None,
        q: Optional[str] = None,
        province: Optional[str] = None,
        limit: Optional[int] = None,
        offset: int = 0,
    ) -> Tuple[List[ParcelResponse], int]:
        """
        Lists parcels, newest first.

        Args:
            status: exact legal status; None or 'all' disables the filter
            q: case-insensitive substring of reference, parcel number or owner
            province: exact province name
            limit / offset: optional paging window

        Returns:
            (page of parcels, total number matching the filters)
        """
        conditions = []
        if status and status != "all":
            conditions.append(Parcel.status == status)
        if province:
            conditions.append(Parcel.province == province)
        if q and q.strip():
            needle = q.strip().lower()
            conditions.append(
                or_(
                    func.lower(Parcel.reference).contains(needle, autoescape=True),
                    func.lower(Parcel.parcel_number).contains(needle, autoescape=True),
                    func.lower(Parcel.owner_name).contains(needle, autoescape=True),
                )
            )

        query = select(Parcel).where(*conditions).order_by(Parcel.created_at.desc())
        if offset:
            query = query.offset(offset)
        if limit is not None:
            query = query.limit(limit)

        result = await db.execute(query)
        parcels = [ParcelResponse.model_validate(p) for p in result.scalars().all()]

        count_result = await db.execute(select(func.count(Parcel.id)).where(*conditions))
        total_count = count_result.scalar() or 0

        return parcels, total_count

    # ── Writes ────────────────────────────────────────────────────────────

    async def create_parcel(self, db: AsyncSession, payload: ParcelCreate) -> ParcelResponse:
        """
        Registers a new parcel.

        Raises:
            MissingFieldError: a required field is absent or blank (→ 400)
            ValidationError: range or vocabulary violation (→ 400)
            ConflictError: the reference is already registered (→ 409)
        """
        data = payload.model_dump()
        for field in REQUIRED_FIELDS:
            if _is_blank(data.get(field)):
                raise MissingFieldError(field)

        reference = (data.get("reference") or "").strip() or generate_reference()
        values = self._normalise(data)
        self._validate_values(values)

        if await self._reference_taken(db, reference):
            raise ConflictError(message="Reference already exists", context={"reference": reference})

        parcel = Parcel(reference=reference, **values)
        db.add(parcel)
        await self._flush_unique(db, reference)

        logger.info("Parcel registered: %s (%s)", parcel.reference, parcel.id)
        return ParcelResponse.model_validate(parcel)

    async def update_parcel(
        self,
        db: AsyncSession,
        key: str,
        payload: ParcelUpdate,
        user: str,
    ) -> ParcelResponse:
        """
        Applies a partial update and records the diff in the history.

        Only keys present in the payload are considered. Required fields
        cannot be blanked. When nothing differs from the stored row, the
        parcel is returned untouched and no history row is written.

        Raises:
            NotFoundError, MissingFieldError, ValidationError, ConflictError
        """
        parcel = await self.get_parcel_model(db, key)
        submitted = payload.model_dump(exclude_unset=True)

        for field in REQUIRED_FIELDS:
            if field in submitted and _is_blank(submitted[field]):
                raise MissingFieldError(field)

        values = self._normalise(submitted)
        if "reference" in submitted:
            if _is_blank(submitted["reference"]):
                raise MissingFieldError("reference")
            values["reference"] = submitted["reference"].strip()
        self._validate_values(values)

        changes = compute_changes(parcel, values)
        if not changes:
            logger.debug("Parcel %s: update with no changes", parcel.reference)
            return ParcelResponse.model_validate(parcel)

        if "reference" in changes and await self._reference_taken(db, values["reference"], parcel.id):
            raise ConflictError(
                message="Reference already exists",
                context={"reference": values["reference"]},
            )

        for field, change in changes.items():
            setattr(parcel, field, change["to"])
        parcel.updated_at = utcnow()

        db.add(ParcelHistory(parcel_id=parcel.id, changes=changes, changed_by=user))
        await self._flush_unique(db, parcel.reference)

        logger.info(
            "Parcel %s updated by %s: %s",
            parcel.reference,
            user,
            ", ".join(sorted(changes)),
        )
        return ParcelResponse.model_validate(parcel)


parcel_service = ParcelService()
