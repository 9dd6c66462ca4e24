# tests for the health check, app configuration and error mapping

import pytest
from unittest.mock import AsyncMock

from plantjournal.exceptions import DatabaseConnectionError, ReadError
from tests.conftest import PLANT_1_ID


class TestHealthCheck:
    """app health and config"""

    async def test_health_check(self, client):
        resp = await client.get("/health")
        assert resp.status_code == 200
        data = resp.json()
        assert data["status"] == "ok"
        assert data["service"] == "plant-journal-api"

    async def test_openapi_schema(self, client):
        resp = await client.get("/openapi.json")
        assert resp.status_code == 200
        schema = resp.json()
        assert schema["info"]["title"] == "Plant Journal API"


class TestErrorMapping:
    """data layer errors surface as http errors unchanged in meaning"""

    async def test_connection_error_is_503(self, client, store):
        store.database.get_connection = AsyncMock(side_effect=DatabaseConnectionError("down"))
        resp = await client.get(f"/plants/{PLANT_1_ID}")
        assert resp.status_code == 503
        assert resp.json()["detail"] == "down"

    async def test_read_error_is_500(self, client, store):
        store.get_plant_by_id = AsyncMock(side_effect=ReadError("Read from plant failed"))
        resp = await client.get(f"/plants/{PLANT_1_ID}")
        assert resp.status_code == 500
