"""
JobTrail Backend — Application CRUD & Platform Endpoint Tests
===============================================================

What we test:
    ✅ Create / list / update / delete / restore over HTTP
    ✅ 404 for deleted and unknown ids, 400 for invalid bodies
    ✅ Health endpoint shape
    ✅ Error envelope carries the request id
"""

import pytest

from conftest import application_payload


class TestApplicationEndpoints:

    @pytest.mark.asyncio
    async def test_crud_cycle(self, client, auth_headers):
        created = await client.post("/api/applications", json=application_payload("A1"), headers=auth_headers)
        assert created.status_code == 201
        assert created.json() == {"success": True, "id": "A1"}

        updated = await client.put(
            "/api/applications/A1",
            json={"company": "Acme", "position": "Lead", "status": "offer"},
            headers=auth_headers,
        )
        assert updated.json() == {"success": True}

        listed = (await client.get("/api/applications", headers=auth_headers)).json()
        assert [(a["id"], a["status"], a["position"]) for a in listed] == [("A1", "offer", "Lead")]

        deleted = await client.delete("/api/applications/A1", headers=auth_headers)
        assert deleted.json() == {"success": True}
        assert (await client.get("/api/applications", headers=auth_headers)).json() == []

        restored = await client.post(
            "/api/applications/restore", json=application_payload("A1"), headers=auth_headers
        )
        assert restored.status_code == 201
        listed = (await client.get("/api/applications", headers=auth_headers)).json()
        assert [a["id"] for a in listed] == ["A1"]
        assert listed[0]["status"] == "offer"

    @pytest.mark.asyncio
    async def test_unknown_or_deleted_id_is_404(self, client, auth_headers):
        body = {"company": "Acme", "position": "Engineer"}

        assert (await client.put("/api/applications/nope", json=body, headers=auth_headers)).status_code == 404
        assert (await client.delete("/api/applications/nope", headers=auth_headers)).status_code == 404

        await client.post("/api/applications", json=application_payload("A1"), headers=auth_headers)
        await client.delete("/api/applications/A1", headers=auth_headers)
        assert (await client.delete("/api/applications/A1", headers=auth_headers)).status_code == 404

    @pytest.mark.asyncio
    async def test_missing_company_is_400(self, client, auth_headers):
        body = application_payload("A1")
        del body["company"]

        response = await client.post("/api/applications", json=body, headers=auth_headers)

        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_duplicate_create_is_400(self, client, auth_headers):
        await client.post("/api/applications", json=application_payload("A1"), headers=auth_headers)

        response = await client.post("/api/applications", json=application_payload("A1"), headers=auth_headers)

        assert response.status_code == 400
        assert response.json()["error"] == "validation_error"

    @pytest.mark.asyncio
    async def test_direct_edit_wins_next_sync(self, client, auth_headers):
        """A PUT with a stale client clock must still be newer than what devices hold."""
        await client.post(
            "/api/applications",
            json=application_payload("A1", updatedAt="2099-01-01T00:00:00.000Z"),
            headers=auth_headers,
        )
        await client.put(
            "/api/applications/A1",
            json={"company": "Acme", "position": "Engineer", "status": "interview",
                  "updatedAt": "2024-01-01T00:00:00.000Z"},
            headers=auth_headers,
        )

        pulled = (await client.get(
            "/api/sync", params={"since": "2099-01-01T00:00:00.000Z"}, headers=auth_headers
        )).json()

        assert [a["status"] for a in pulled["applications"]] == ["interview"]


class TestPlatformEndpoints:

    @pytest.mark.asyncio
    async def test_health(self, client):
        response = await client.get("/health")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "healthy"
        assert body["database"] == "connected"
        assert body["storageMode"] == "local"
        assert body["uptimeSeconds"] >= 0

    @pytest.mark.asyncio
    async def test_request_id_is_echoed_in_header_and_error(self, client):
        response = await client.get("/api/sync", headers={"X-Request-ID": "trace-123"})

        assert response.headers["X-Request-ID"] == "trace-123"
        assert response.json()["request_id"] == "trace-123"

    @pytest.mark.asyncio
    async def test_request_before_startup_is_503(self, settings):
        """Without the lifespan the store is not initialized."""
        from httpx import ASGITransport, AsyncClient

        from jobtrail.main import create_app

        cold_app = create_app(settings)
        transport = ASGITransport(app=cold_app)
        async with AsyncClient(transport=transport, base_url="http://test") as cold_client:
            response = await cold_client.get("/api/sync", headers={"Authorization": "Bearer x"})

        assert response.status_code == 503
        assert response.headers["Retry-After"] == str(settings.store_retry_after)
        assert response.json()["error"] == "store_unavailable"
