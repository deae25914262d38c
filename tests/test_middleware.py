"""
e-Foncier Backend: Middleware Tests
====================================

What:  Request ID acceptance and the access log line.
"""

import logging

import pytest

from efoncier.middleware.logging import level_for
from efoncier.middleware.request_id import accepted_request_id


class TestRequestID:

    @pytest.mark.parametrize("supplied", ["abc123", "dash-board.42_x", "a" * 64])
    def test_plain_token_is_kept(self, supplied):
        assert accepted_request_id(supplied) == supplied

    @pytest.mark.parametrize("supplied", [None, "", "a" * 65, "id with spaces", "x\r\ny", "é"])
    def test_other_values_are_replaced(self, supplied):
        rid = accepted_request_id(supplied)

        assert rid != supplied
        assert len(rid) == 8

    @pytest.mark.asyncio
    async def test_client_id_is_echoed(self, test_client):
        response = await test_client.get("/api/stats", headers={"X-Request-ID": "dash-001"})

        assert response.headers["X-Request-ID"] == "dash-001"

    @pytest.mark.asyncio
    async def test_unusable_client_id_is_replaced_in_error_body(self, test_client):
        response = await test_client.get("/api/parcels/NOPE", headers={"X-Request-ID": "not a token!"})

        rid = response.headers["X-Request-ID"]
        assert rid != "not a token!"
        assert response.json()["request_id"] == rid


class TestAccessLog:

    def test_level_follows_status_class(self):
        assert level_for(200) == logging.INFO
        assert level_for(404) == logging.WARNING
        assert level_for(503) == logging.ERROR

    @pytest.mark.asyncio
    async def test_write_names_the_actor(self, test_client, parcel_payload, caplog):
        caplog.set_level(logging.INFO, logger="efoncier.access")

        await test_client.post("/api/parcels", json=parcel_payload, headers={"X-User": "Didier Mukendi"})

        record = next(r for r in caplog.records if r.name == "efoncier.access")
        assert record.method == "POST"
        assert record.status == 201
        assert record.actor == "Didier Mukendi"
        assert "by Didier Mukendi" in record.getMessage()

    @pytest.mark.asyncio
    async def test_listing_logs_total_without_actor(self, test_client, caplog):
        caplog.set_level(logging.INFO, logger="efoncier.access")

        await test_client.get("/api/parcels", headers={"X-User": "Didier Mukendi"})

        record = next(r for r in caplog.records if r.name == "efoncier.access")
        assert record.total == 0
        assert not hasattr(record, "actor")

    @pytest.mark.asyncio
    async def test_health_is_not_logged(self, test_client, caplog):
        caplog.set_level(logging.INFO, logger="efoncier.access")

        await test_client.get("/health")

        assert not [r for r in caplog.records if r.name == "efoncier.access"]
