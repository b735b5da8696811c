"""
JobTrail Backend — Account Endpoint Tests
===========================================

What we test:
    ✅ Register → 201 {token, userId}; login → 200
    ✅ Combined /api/auth dispatches on action
    ✅ Format errors → 400, bad credentials → 401
    ✅ Sixth attempt in a minute → 429 with Retry-After
"""

import pytest


class TestAccountEndpoints:

    @pytest.mark.asyncio
    async def test_register_and_login(self, client):
        registered = await client.post("/api/register", json={"username": "Alice", "pin": "1234"})
        logged_in = await client.post("/api/login", json={"username": "alice", "pin": "1234"})

        assert registered.status_code == 201
        assert set(registered.json()) == {"token", "userId"}
        assert logged_in.status_code == 200
        assert logged_in.json()["userId"] == registered.json()["userId"]

    @pytest.mark.asyncio
    async def test_issued_token_opens_sync(self, client):
        token = (await client.post("/api/register", json={"username": "alice", "pin": "1234"})).json()["token"]

        response = await client.get("/api/sync", headers={"Authorization": f"Bearer {token}"})

        assert response.status_code == 200

    @pytest.mark.asyncio
    async def test_combined_auth_endpoint(self, client):
        registered = await client.post(
            "/api/auth", json={"username": "alice", "pin": "1234", "action": "register"}
        )
        logged_in = await client.post("/api/auth", json={"username": "alice", "pin": "1234"})

        assert registered.status_code == 201
        assert logged_in.status_code == 200
        assert logged_in.json()["userId"] == registered.json()["userId"]

    @pytest.mark.asyncio
    async def test_duplicate_username_is_400(self, client):
        await client.post("/api/register", json={"username": "alice", "pin": "1234"})

        response = await client.post("/api/register", json={"username": "ALICE", "pin": "4321"})

        assert response.status_code == 400
        assert response.json()["message"] == "Username already taken"

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "body",
        [{"username": "al", "pin": "1234"}, {"username": "alice", "pin": "123"}, {"username": "alice"}],
    )
    async def test_format_errors_are_400(self, client, body):
        response = await client.post("/api/register", json=body)

        assert response.status_code == 400
        assert response.json()["error"] == "validation_error"

    @pytest.mark.asyncio
    async def test_wrong_pin_is_401(self, client):
        await client.post("/api/register", json={"username": "alice", "pin": "1234"})

        response = await client.post("/api/login", json={"username": "alice", "pin": "0000"})

        assert response.status_code == 401
        assert response.json()["message"] == "Invalid credentials"


class TestAuthRateLimit:

    @pytest.mark.asyncio
    async def test_sixth_attempt_is_429(self, client):
        for _ in range(5):
            response = await client.post("/api/login", json={"username": "alice", "pin": "0000"})
            assert response.status_code == 401

        response = await client.post("/api/login", json={"username": "alice", "pin": "0000"})

        assert response.status_code == 429
        assert int(response.headers["Retry-After"]) > 0
        assert response.json()["error"] == "rate_limit_exceeded"

    @pytest.mark.asyncio
    async def test_limit_does_not_apply_to_sync(self, client, auth_headers):
        for _ in range(10):
            assert (await client.get("/api/sync", headers=auth_headers)).status_code == 200
