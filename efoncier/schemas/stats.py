"""
e-Foncier Backend: Dashboard Statistics Schemas
================================================

What:  Response models of GET /api/stats and GET /api/stats/extended.
How:   Python attributes are snake_case; the JSON keys are camelCase
       (`totalParcels`, `monthlyEvolution`, ...) because that is the
       contract the dashboard consumes. FastAPI serialises response models
       by alias, and `populate_by_name` lets services build them with the
       Python names.
"""

from typing import List

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class StatsResponse(CamelModel):
    total_parcels: int
    free_parcels: int
    disputed_parcels: int
    mortgaged_parcels: int
    pending_requests: int


class ProvinceCount(BaseModel):
    province: str
    c: int


class CityCount(BaseModel):
    city: str
    c: int


class MonthCount(BaseModel):
    month: str = Field(description="YYYY-MM")
    count: int


class ExtendedStatsResponse(CamelModel):
    """
    Extended dashboard indicators.

    parcels_in_validation:
        Parcels whose certificate number, issuing authority or cadastral
        plan reference is still empty.
    parcels_boundary_conflicts:
        Parcels in dispute, or with a non-blank litigation note.
    monthly_evolution:
        Exactly twelve months, oldest first, ending with the current month.
    pending_requests_avg_days:
        Mean age in days of pending citizen requests (0 when none).
    """
    parcels_this_month: int
    parcels_missing_docs: int
    parcels_in_validation: int
    parcels_boundary_conflicts: int
    parcels_by_province: List[ProvinceCount]
    parcels_by_city: List[CityCount]
    monthly_evolution: List[MonthCount]
    pending_requests_avg_days: float
