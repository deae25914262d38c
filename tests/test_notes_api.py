"""
e-Foncier Backend: Parcel Note Endpoint Tests
==============================================
"""

import uuid

import pytest
import pytest_asyncio


@pytest_asyncio.fixture
async def parcel(test_client, parcel_payload):
    response = await test_client.post("/api/parcels", json=parcel_payload)
    return response.json()


class TestNotes:

    @pytest.mark.asyncio
    async def test_note_lifecycle(self, test_client, parcel):
        base = f"/api/parcels/{parcel['id']}/notes"

        created = await test_client.post(base, json={"note": "Visite de terrain prévue", "author": "Grâce"})
        assert created.status_code == 201
        note = created.json()
        assert note["author"] == "Grâce"

        edited = await test_client.put(f"{base}/{note['id']}", json={"note": "Visite effectuée"})
        assert edited.status_code == 200
        assert edited.json()["note"] == "Visite effectuée"

        listed = await test_client.get(base)
        assert [n["note"] for n in listed.json()] == ["Visite effectuée"]

        deleted = await test_client.delete(f"{base}/{note['id']}")
        assert deleted.status_code == 204
        assert (await test_client.get(base)).json() == []

    @pytest.mark.asyncio
    async def test_author_defaults_to_agent(self, test_client, parcel):
        response = await test_client.post(f"/api/parcels/{parcel['id']}/notes", json={"note": "RAS"})

        assert response.json()["author"] == "Agent"

    @pytest.mark.asyncio
    async def test_blank_note_is_400(self, test_client, parcel):
        response = await test_client.post(f"/api/parcels/{parcel['id']}/notes", json={"note": "  "})

        assert response.status_code == 400
        assert response.json()["error"] == "Missing field: note"

    @pytest.mark.asyncio
    async def test_newest_first(self, test_client, parcel):
        base = f"/api/parcels/{parcel['id']}/notes"
        await test_client.post(base, json={"note": "premier"})
        await test_client.post(base, json={"note": "second"})

        notes = (await test_client.get(base)).json()

        assert [n["note"] for n in notes] == ["second", "premier"]

    @pytest.mark.asyncio
    async def test_note_of_another_parcel_is_404(self, test_client, parcel, parcel_payload):
        other = (
            await test_client.post("/api/parcels", json={**parcel_payload, "reference": "OTHER-1"})
        ).json()
        note = (
            await test_client.post(f"/api/parcels/{other['id']}/notes", json={"note": "à moi"})
        ).json()

        response = await test_client.delete(f"/api/parcels/{parcel['id']}/notes/{note['id']}")

        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_unknown_note_is_404(self, test_client, parcel):
        response = await test_client.put(
            f"/api/parcels/{parcel['id']}/notes/{uuid.uuid4()}", json={"note": "x"}
        )

        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_unknown_parcel_is_404(self, test_client):
        response = await test_client.get("/api/parcels/NOPE/notes")

        assert response.status_code == 404
