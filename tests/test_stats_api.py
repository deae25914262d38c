"""
e-Foncier Backend: Dashboard Statistics Tests
==============================================
"""

from datetime import datetime, timedelta, timezone

import pytest

from efoncier.models.document_request import DocumentRequest
from efoncier.models.parcel import Parcel
from efoncier.services.stats_service import last_months, stats_service


class TestMonthWindow:

    def test_twelve_months_ending_now(self):
        months = last_months(datetime(2024, 3, 15, tzinfo=timezone.utc))

        assert len(months) == 12
        assert months[0] == "2023-04"
        assert months[-1] == "2024-03"

    def test_year_boundary(self):
        months = last_months(datetime(2024, 1, 1, tzinfo=timezone.utc))

        assert months[-2:] == ["2023-12", "2024-01"]


class TestStatsEndpoints:

    @pytest.mark.asyncio
    async def test_empty_register(self, test_client):
        response = await test_client.get("/api/stats")

        assert response.status_code == 200
        assert response.json() == {
            "totalParcels": 0,
            "freeParcels": 0,
            "disputedParcels": 0,
            "mortgagedParcels": 0,
            "pendingRequests": 0,
        }

    @pytest.mark.asyncio
    async def test_counters(self, test_client, parcel_payload):
        for i, status in enumerate(["Libre", "Libre", "En litige", "Hypothéqué"]):
            await test_client.post("/api/parcels", json={**parcel_payload, "reference": f"S-{i}", "status": status})
        await test_client.post(
            "/api/requests",
            json={"citizen_name": "Papy", "parcel_reference": "S-0", "document_type": "Autre"},
        )

        data = (await test_client.get("/api/stats")).json()

        assert data["totalParcels"] == 4
        assert data["freeParcels"] == 2
        assert data["disputedParcels"] == 1
        assert data["mortgagedParcels"] == 1
        assert data["pendingRequests"] == 1

    @pytest.mark.asyncio
    async def test_extended_shape_on_empty_register(self, test_client):
        data = (await test_client.get("/api/stats/extended")).json()

        assert len(data["monthlyEvolution"]) == 12
        assert all(entry["count"] == 0 for entry in data["monthlyEvolution"])
        now = datetime.now(timezone.utc)
        assert data["monthlyEvolution"][-1]["month"] == f"{now.year:04d}-{now.month:02d}"
        assert data["pendingRequestsAvgDays"] == 0
        assert data["parcelsByProvince"] == []

    @pytest.mark.asyncio
    async def test_extended_indicators(self, test_client, parcel_payload):
        await test_client.post("/api/parcels", json={**parcel_payload, "reference": "E-1"})
        await test_client.post(
            "/api/parcels",
            json={**parcel_payload, "reference": "E-2", "certificate_number": "", "litigation": "Voisin"},
        )
        await test_client.post(
            "/api/parcels",
            json={
                **parcel_payload,
                "reference": "E-3",
                "status": "En litige",
                "province": "Haut-Katanga",
                "territory_or_city": "Lubumbashi",
            },
        )

        data = (await test_client.get("/api/stats/extended")).json()

        assert data["parcelsThisMonth"] == 3
        assert data["monthlyEvolution"][-1]["count"] == 3
        assert data["parcelsMissingDocs"] == 3
        assert data["parcelsInValidation"] == 1
        assert data["parcelsBoundaryConflicts"] == 2
        assert data["parcelsByProvince"][0] == {"province": "Kinshasa", "c": 2}
        assert {"city": "Lubumbashi", "c": 1} in data["parcelsByCity"]


class TestPendingAge:

    @pytest.mark.asyncio
    async def test_average_days_of_pending_requests(self, db_session):
        now = datetime(2024, 6, 30, 12, 0, tzinfo=timezone.utc)
        for days, status in [(2, "En attente"), (4, "En attente"), (30, "Approuvé")]:
            db_session.add(
                DocumentRequest(
                    citizen_name="Jean",
                    parcel_reference="X",
                    document_type="Autre",
                    status=status,
                    created_at=now - timedelta(days=days),
                )
            )
        await db_session.flush()

        stats = await stats_service.get_extended_stats(db_session, now=now)

        assert stats.pending_requests_avg_days == 3.0
        assert stats.parcels_this_month == 0


class TestMonthlyWindow:

    @pytest.mark.asyncio
    async def test_only_last_twelve_months_are_bucketed(self, db_session, parcel_payload):
        now = datetime(2024, 6, 30, 12, 0, tzinfo=timezone.utc)
        created = [
            datetime(2022, 6, 15, tzinfo=timezone.utc),
            datetime(2023, 6, 30, 23, 59, tzinfo=timezone.utc),
            datetime(2023, 7, 1, 0, 0, tzinfo=timezone.utc),
            datetime(2024, 6, 2, tzinfo=timezone.utc),
        ]
        for i, created_at in enumerate(created):
            values = {**parcel_payload, "reference": f"W-{i}"}
            db_session.add(Parcel(**values, created_at=created_at, updated_at=created_at))
        await db_session.flush()

        stats = await stats_service.get_extended_stats(db_session, now=now)

        months = {entry.month: entry.count for entry in stats.monthly_evolution}
        assert list(months)[0] == "2023-07"
        assert months["2023-07"] == 1
        assert months["2024-06"] == 1
        assert sum(months.values()) == 2
        assert stats.parcels_this_month == 1
