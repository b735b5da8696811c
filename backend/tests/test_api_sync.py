"""
JobTrail Backend — Sync Endpoint Tests
========================================

What:  /api/sync over HTTP (httpx AsyncClient + ASGITransport).

What we test:
    ✅ Authentication is required
    ✅ Pull/push round trip with camelCase fields and Z timestamps
    ✅ Outcomes are reported per record
    ✅ Malformed bodies and timestamps → 400 malformed_request
    ✅ /sync alias behaves like /api/sync
    ✅ Owners are isolated
"""

import re

import pytest

from conftest import application_payload, register_user

TIMESTAMP = re.compile(r"^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}\.\d{3}Z$")
FIELDS = {
    "id", "company", "position", "status", "appliedDate", "url", "notes",
    "resumeId", "createdAt", "updatedAt", "deletedAt",
}


class TestSyncAuth:

    @pytest.mark.asyncio
    async def test_pull_without_token_is_unauthorized(self, client):
        response = await client.get("/api/sync")

        assert response.status_code == 401
        body = response.json()
        assert body["error"] == "unauthorized"
        assert "request_id" in body

    @pytest.mark.asyncio
    async def test_bad_token_is_unauthorized(self, client):
        response = await client.get("/api/sync", headers={"Authorization": "Bearer nope"})
        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_non_bearer_scheme_is_unauthorized(self, client):
        response = await client.get("/api/sync", headers={"Authorization": "Basic YWxpY2U6MTIzNA=="})
        assert response.status_code == 401


class TestSyncRoundTrip:

    @pytest.mark.asyncio
    async def test_push_then_pull(self, client, auth_headers):
        push = await client.post(
            "/api/sync",
            json={"changes": [application_payload("A1")], "lastSync": None},
            headers=auth_headers,
        )

        assert push.status_code == 200, push.text
        body = push.json()
        assert body["outcomes"] == [{"id": "A1", "result": "inserted", "reason": None}]
        assert TIMESTAMP.match(body["serverTime"])
        record = body["applications"][0]
        assert set(record) == FIELDS
        assert record["deletedAt"] is None
        assert record["appliedDate"] == "2024-01-01"

        pull = await client.get("/api/sync", headers=auth_headers)
        assert pull.status_code == 200
        assert [r["id"] for r in pull.json()["applications"]] == ["A1"]
        assert "outcomes" not in pull.json()

    @pytest.mark.asyncio
    async def test_example_scenario(self, client, auth_headers):
        """A1 applied@day1; push interview@day2 since day1 → A1 interview; repeat is idempotent."""
        await client.post(
            "/api/sync",
            json={"changes": [application_payload("A1", status="applied")]},
            headers=auth_headers,
        )
        request = {
            "changes": [application_payload("A1", status="interview", updatedAt="2024-01-02T00:00:00.000Z")],
            "lastSync": "2024-01-01T00:00:00.000Z",
        }

        first = (await client.post("/api/sync", json=request, headers=auth_headers)).json()
        second = (await client.post("/api/sync", json=request, headers=auth_headers)).json()

        for body in (first, second):
            assert len(body["applications"]) == 1
            assert body["applications"][0]["status"] == "interview"
            assert body["applications"][0]["updatedAt"] == "2024-01-02T00:00:00.000Z"
        assert second["outcomes"][0]["result"] == "discarded"

    @pytest.mark.asyncio
    async def test_offset_timestamps_are_normalized(self, client, auth_headers):
        change = application_payload("A1", updatedAt="2024-01-01T05:30:00.123456+05:30")

        body = (await client.post("/api/sync", json={"changes": [change]}, headers=auth_headers)).json()

        assert body["applications"][0]["updatedAt"] == "2024-01-01T00:00:00.123Z"

    @pytest.mark.asyncio
    async def test_since_filters_pull(self, client, auth_headers):
        await client.post(
            "/api/sync",
            json={"changes": [
                application_payload("A1", updatedAt="2024-01-01T00:00:00.000Z"),
                application_payload("A2", updatedAt="2024-01-05T00:00:00.000Z"),
            ]},
            headers=auth_headers,
        )

        response = await client.get(
            "/api/sync", params={"since": "2024-01-02T00:00:00.000Z"}, headers=auth_headers
        )

        assert [r["id"] for r in response.json()["applications"]] == ["A2"]

    @pytest.mark.asyncio
    async def test_rejected_record_does_not_fail_batch(self, client, auth_headers):
        bad = application_payload("BAD", company="")

        response = await client.post(
            "/api/sync",
            json={"changes": [bad, application_payload("GOOD")]},
            headers=auth_headers,
        )

        assert response.status_code == 200
        outcomes = response.json()["outcomes"]
        assert [o["result"] for o in outcomes] == ["rejected", "inserted"]
        assert outcomes[0]["reason"]

    @pytest.mark.asyncio
    async def test_alias_path(self, client, auth_headers):
        await client.post("/sync", json={"changes": [application_payload("A1")]}, headers=auth_headers)

        response = await client.get("/sync", headers=auth_headers)

        assert response.status_code == 200
        assert [r["id"] for r in response.json()["applications"]] == ["A1"]


class TestSyncMalformed:

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "body",
        [
            {"changes": "everything"},
            {"changes": [application_payload("A1"), "oops"]},
            {"changes": {"id": "A1"}},
            ["not", "an", "object"],
        ],
    )
    async def test_malformed_batch_is_400_and_writes_nothing(self, client, auth_headers, body):
        response = await client.post("/api/sync", json=body, headers=auth_headers)

        assert response.status_code == 400
        assert response.json()["error"] == "malformed_request"
        pulled = (await client.get("/api/sync", headers=auth_headers)).json()
        assert pulled["applications"] == []

    @pytest.mark.asyncio
    async def test_invalid_last_sync_is_400(self, client, auth_headers):
        response = await client.post(
            "/api/sync",
            json={"changes": [application_payload("A1")], "lastSync": "last tuesday"},
            headers=auth_headers,
        )

        assert response.status_code == 400
        assert response.json()["error"] == "malformed_request"

    @pytest.mark.asyncio
    async def test_invalid_since_is_400(self, client, auth_headers):
        response = await client.get("/api/sync", params={"since": "2024-01-01"}, headers=auth_headers)

        assert response.status_code == 400
        assert response.json()["error"] == "malformed_request"


class TestSyncIsolation:

    @pytest.mark.asyncio
    async def test_colliding_ids_across_users(self, client):
        alice = await register_user(client, "alice")
        bob = await register_user(client, "bob")

        await client.post(
            "/api/sync",
            json={"changes": [application_payload("A1", company="Alice Co")]},
            headers=alice,
        )
        bob_push = await client.post(
            "/api/sync",
            json={"changes": [application_payload("A1", company="Bob Co", updatedAt="2030-01-01T00:00:00.000Z")]},
            headers=bob,
        )

        assert bob_push.json()["outcomes"][0]["result"] == "inserted"
        alice_pull = (await client.get("/api/sync", headers=alice)).json()
        assert [r["company"] for r in alice_pull["applications"]] == ["Alice Co"]


class TestSyncDateRange:

    @pytest.mark.asyncio
    async def test_out_of_range_since_is_400(self, client, auth_headers):
        response = await client.get(
            "/api/sync", params={"since": "9999-12-31T23:59:59-01:00"}, headers=auth_headers
        )

        assert response.status_code == 400
        assert response.json()["error"] == "malformed_request"

    @pytest.mark.asyncio
    async def test_out_of_range_record_keeps_rest_of_batch(self, client, auth_headers):
        changes = [
            application_payload("A1", updatedAt="0001-01-01T00:00:00+01:00"),
            application_payload("A2"),
        ]

        response = await client.post("/api/sync", json={"changes": changes}, headers=auth_headers)

        assert response.status_code == 200
        assert [o["result"] for o in response.json()["outcomes"]] == ["rejected", "inserted"]
        pulled = (await client.get("/api/sync", headers=auth_headers)).json()
        assert [r["id"] for r in pulled["applications"]] == ["A2"]
