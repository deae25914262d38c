"""
e-Foncier Backend: Parcel History Endpoint Tests
=================================================
"""

from datetime import datetime, timezone

import pytest
import pytest_asyncio

from efoncier.exceptions import ValidationError
from efoncier.services.history_service import parse_bound


@pytest_asyncio.fixture
async def parcel(test_client, parcel_payload):
    response = await test_client.post("/api/parcels", json=parcel_payload)
    return response.json()


class TestManualHistory:

    @pytest.mark.asyncio
    async def test_add_entry(self, test_client, parcel):
        response = await test_client.post(
            f"/api/parcels/{parcel['id']}/history",
            json={"changes": {"decision": "Jugement du tribunal de paix"}, "user": "Didier Mukendi"},
        )

        assert response.status_code == 201
        data = response.json()
        assert data["parcel_id"] == parcel["id"]
        assert data["user"] == "Didier Mukendi"
        assert data["changes"] == {"decision": "Jugement du tribunal de paix"}

    @pytest.mark.asyncio
    async def test_user_defaults_to_agent(self, test_client, parcel):
        response = await test_client.post(
            f"/api/parcels/{parcel['id']}/history",
            json={"changes": "Bornage contradictoire effectué"},
        )

        assert response.status_code == 201
        assert response.json()["user"] == "Agent"

    @pytest.mark.asyncio
    async def test_missing_changes_is_400(self, test_client, parcel):
        response = await test_client.post(f"/api/parcels/{parcel['id']}/history", json={"user": "X"})

        assert response.status_code == 400
        assert response.json()["error"] == "Missing field: changes"

    @pytest.mark.asyncio
    async def test_unknown_parcel_is_404(self, test_client):
        response = await test_client.post("/api/parcels/NOPE/history", json={"changes": {"a": 1}})

        assert response.status_code == 404


class TestListHistory:

    @pytest.mark.asyncio
    async def test_newest_first(self, test_client, parcel):
        url = f"/api/parcels/{parcel['id']}"
        await test_client.put(url, json={"area": 600})
        await test_client.put(url, json={"status": "Hypothéqué"})

        history = (await test_client.get(f"{url}/history")).json()

        assert [list(entry["changes"]) for entry in history] == [["status"], ["area"]]

    @pytest.mark.asyncio
    async def test_field_filter(self, test_client, parcel):
        url = f"/api/parcels/{parcel['id']}"
        await test_client.put(url, json={"area": 600})
        await test_client.put(url, json={"status": "Hypothéqué", "charges": "Hypothèque Rawbank"})

        response = await test_client.get(f"{url}/history", params={"field": "STATUS"})

        assert len(response.json()) == 1
        assert "status" in response.json()[0]["changes"]

    @pytest.mark.asyncio
    async def test_date_window(self, test_client, parcel):
        url = f"/api/parcels/{parcel['id']}"
        await test_client.put(url, json={"area": 600})

        past = await test_client.get(f"{url}/history", params={"to_date": "2000-01-01"})
        recent = await test_client.get(f"{url}/history", params={"from_date": "2000-01-01"})

        assert past.json() == []
        assert len(recent.json()) == 1

    @pytest.mark.asyncio
    async def test_invalid_date_is_400(self, test_client, parcel):
        response = await test_client.get(
            f"/api/parcels/{parcel['id']}/history", params={"from_date": "yesterday"}
        )

        assert response.status_code == 400
        assert response.json()["details"]["field"] == "from_date"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("bound", ["20240101", "2024-W01-1", "2024-1-1"])
    async def test_compact_date_is_400(self, test_client, parcel, bound):
        response = await test_client.get(f"/api/parcels/{parcel['id']}/history", params={"to_date": bound})

        assert response.status_code == 400
        assert response.json()["details"]["field"] == "to_date"

    @pytest.mark.asyncio
    async def test_date_only_upper_bound_covers_the_day(self, test_client, parcel):
        url = f"/api/parcels/{parcel['id']}"
        await test_client.put(url, json={"area": 600})
        today = datetime.now(timezone.utc).date().isoformat()

        response = await test_client.get(f"{url}/history", params={"from_date": today, "to_date": today})

        assert len(response.json()) == 1


class TestParseBound:

    def test_date_only_upper_bound_is_end_of_day(self):
        bound = parse_bound("2024-01-01", "to_date", end_of_day=True)

        assert bound == datetime(2024, 1, 1, 23, 59, 59, 999999, tzinfo=timezone.utc)

    def test_datetime_upper_bound_is_kept(self):
        bound = parse_bound("2024-01-01T10:30:00", "to_date", end_of_day=True)

        assert bound == datetime(2024, 1, 1, 10, 30, tzinfo=timezone.utc)

    def test_zulu_suffix(self):
        assert parse_bound("2024-01-01T10:30:00Z", "from_date") == datetime(2024, 1, 1, 10, 30, tzinfo=timezone.utc)

    def test_offset_is_converted_to_utc(self):
        assert parse_bound("2024-01-01T12:00:00+02:00", "from_date") == datetime(
            2024, 1, 1, 10, 0, tzinfo=timezone.utc
        )

    @pytest.mark.parametrize("value", ["20240101", "2024-W01-1", "2024-001"])
    def test_compact_forms_rejected(self, value):
        with pytest.raises(ValidationError):
            parse_bound(value, "from_date")
