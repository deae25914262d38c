"""
e-Foncier Backend: Dashboard Statistics Service
================================================

Counters are computed with plain aggregate queries that behave the same on
PostgreSQL and SQLite. Month bucketing and request ages are done in Python
from the raw timestamps, so no dialect-specific date function is needed.
"""

import logging
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from efoncier.models.document_request import DocumentRequest
from efoncier.models.parcel import Parcel, utcnow
from efoncier.schemas.stats import (
    CityCount,
    ExtendedStatsResponse,
    MonthCount,
    ProvinceCount,
    StatsResponse,
)
from efoncier.vocabulary import REQUEST_PENDING, STATUS_DISPUTED, STATUS_FREE, STATUS_MORTGAGED

logger = logging.getLogger(__name__)

MONTHS_OF_EVOLUTION = 12


def as_utc(value: datetime) -> datetime:
    """SQLite hands back naive datetimes; they were stored as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def month_key(value: datetime) -> str:
    return f"{value.year:04d}-{value.month:02d}"


def last_months(now: datetime, count: int = MONTHS_OF_EVOLUTION) -> List[str]:
    """`count` YYYY-MM keys, oldest first, ending with the month of `now`."""
    keys = []
    year, month = now.year, now.month
    for _ in range(count):
        keys.append(f"{year:04d}-{month:02d}")
        month -= 1
        if month == 0:
            year, month = year - 1, 12
    return list(reversed(keys))


class StatsService:

    async def _count(self, db: AsyncSession, model, *conditions) -> int:
        result = await db.execute(select(func.count()).select_from(model).where(*conditions))
        return result.scalar() or 0

    async def get_stats(self, db: AsyncSession) -> StatsResponse:
        return StatsResponse(
            total_parcels=await self._count(db, Parcel),
            free_parcels=await self._count(db, Parcel, Parcel.status == STATUS_FREE),
            disputed_parcels=await self._count(db, Parcel, Parcel.status == STATUS_DISPUTED),
            mortgaged_parcels=await self._count(db, Parcel, Parcel.status == STATUS_MORTGAGED),
            pending_requests=await self._count(
                db, DocumentRequest, DocumentRequest.status == REQUEST_PENDING
            ),
        )

    async def get_extended_stats(
        self, db: AsyncSession, now: Optional[datetime] = None
    ) -> ExtendedStatsResponse:
        """
        Builds the extended dashboard indicators.

        Args:
            now: reference instant (defaults to the current UTC time)
        """
        now = as_utc(now or utcnow())
        months = last_months(now)

        year, month = (int(part) for part in months[0].split("-"))
        window_start = datetime(year, month, 1, tzinfo=timezone.utc)
        created = await db.execute(select(Parcel.created_at).where(Parcel.created_at >= window_start))
        per_month = {key: 0 for key in months}
        for (created_at,) in created.all():
            key = month_key(as_utc(created_at))
            if key in per_month:
                per_month[key] += 1

        missing_docs = await self._count(db, Parcel, ~Parcel.documents.any())
        in_validation = await self._count(
            db,
            Parcel,
            or_(
                Parcel.certificate_number == "",
                Parcel.issuing_authority == "",
                Parcel.cadastral_plan_ref == "",
            ),
        )
        boundary_conflicts = await self._count(
            db,
            Parcel,
            or_(
                Parcel.status == STATUS_DISPUTED,
                func.trim(func.coalesce(Parcel.litigation, "")) != "",
            ),
        )

        count_col = func.count(Parcel.id)
        by_province = await db.execute(
            select(Parcel.province, count_col)
            .group_by(Parcel.province)
            .order_by(count_col.desc(), Parcel.province)
        )
        by_city = await db.execute(
            select(Parcel.territory_or_city, count_col)
            .group_by(Parcel.territory_or_city)
            .order_by(count_col.desc(), Parcel.territory_or_city)
        )

        pending = await db.execute(
            select(DocumentRequest.created_at).where(DocumentRequest.status == REQUEST_PENDING)
        )
        ages = [(now - as_utc(created_at)).total_seconds() / 86400 for (created_at,) in pending.all()]
        avg_days = round(sum(ages) / len(ages), 2) if ages else 0.0

        return ExtendedStatsResponse(
            parcels_this_month=per_month[months[-1]],
            parcels_missing_docs=missing_docs,
            parcels_in_validation=in_validation,
            parcels_boundary_conflicts=boundary_conflicts,
            parcels_by_province=[ProvinceCount(province=p, c=c) for p, c in by_province.all()],
            parcels_by_city=[CityCount(city=city, c=c) for city, c in by_city.all()],
            monthly_evolution=[MonthCount(month=key, count=per_month[key]) for key in months],
            pending_requests_avg_days=avg_days,
        )


stats_service = StatsService()
