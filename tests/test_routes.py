"""Integration tests for API routes."""

import base64

import pytest


def auth_header(username="admin", password="dance123"):
    """Create basic auth header."""
    credentials = base64.b64encode(f"{username}:{password}".encode()).decode()
    return {"Authorization": f"Basic {credentials}"}


class TestHealthRoutes:
    """Tests for health endpoints."""

    @pytest.mark.asyncio
    async def test_health_endpoint(self, client):
        """GET /health returns health status."""
        response = await client.get("/api/v1/health")
        assert response.status_code == 200
        data = response.json()
        assert "status" in data
        assert "timestamp" in data

    @pytest.mark.asyncio
    async def test_heartbeat_endpoint(self, client):
        """GET /heartbeat returns tick and game state."""
        response = await client.get("/api/v1/heartbeat")
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "ok"
        assert data["tick"] == 0
        assert data["game_state"] == "idle"
        assert "engine_state" in data
        assert "timestamp" in data


class TestControlRoutes:
    """Tests for control endpoints (require basic auth)."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("action", ["start", "restart", "pause"])
    async def test_control_requires_auth(self, client, action):
        """Control endpoints refuse anonymous callers."""
        response = await client.post(f"/api/v1/control/{action}")
        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_wrong_password(self, client):
        """Bad credentials are refused with the realm challenge."""
        response = await client.post("/api/v1/control/start", headers=auth_header(password="nope"))
        assert response.status_code == 401
        assert "particle-dance" in response.headers["www-authenticate"]

    @pytest.mark.asyncio
    async def test_start_and_pause(self, client):
        """Start enters playing; pause toggles to paused."""
        response = await client.post("/api/v1/control/start", headers=auth_header())
        assert response.status_code == 200
        data = response.json()
        assert data["state"] == "playing"
        assert data["events"][0]["kind"] == "started"

        response = await client.post("/api/v1/control/pause", headers=auth_header())
        assert response.json()["state"] == "paused"

    @pytest.mark.asyncio
    async def test_visibility_pauses(self, client):
        """Hiding the page pauses a running game."""
        await client.post("/api/v1/control/start", headers=auth_header())
        response = await client.post("/api/v1/control/visibility", json={"hidden": True}, headers=auth_header())
        assert response.json()["state"] == "paused"

    @pytest.mark.asyncio
    async def test_resize(self, client):
        """Resize accepts a positive canvas size."""
        response = await client.post("/api/v1/control/resize", json={"width": 1024, "height": 768},
                                     headers=auth_header())
        assert response.status_code == 200
        assert response.json()["width"] == 1024

    @pytest.mark.asyncio
    async def test_resize_rejects_zero(self, client):
        """Non-positive sizes fail validation."""
        response = await client.post("/api/v1/control/resize", json={"width": 0, "height": 768},
                                     headers=auth_header())
        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_sound_toggle(self, client):
        """Sound preference round-trips through the API."""
        response = await client.post("/api/v1/control/sound", json={"enabled": False}, headers=auth_header())
        assert response.json()["sound_enabled"] is False
        state = await client.get("/api/v1/state")
        assert state.json()["sound_enabled"] is False


class TestInputRoutes:
    """Tests for path input endpoints."""

    @pytest.mark.asyncio
    async def test_stroke_ignored_when_idle(self, client):
        """Strokes before start are not accepted."""
        response = await client.post("/api/v1/input/paths", json={"points": [[10, 10], [20, 20]]})
        assert response.status_code == 200
        assert response.json()["accepted"] is False

    @pytest.mark.asyncio
    async def test_stroke_accepted_when_playing(self, client):
        """A stroke during play shows up in the state."""
        await client.post("/api/v1/control/start", headers=auth_header())
        response = await client.post("/api/v1/input/paths", json={"points": [[10, 10], [20, 20]]})
        assert response.json()["accepted"] is True

        state = (await client.get("/api/v1/state")).json()
        assert state["paths"][0]["points"] == [[10, 10], [20, 20]]

    @pytest.mark.asyncio
    async def test_pointer_stroke(self, client):
        """begin, extend and end build one path."""
        await client.post("/api/v1/control/start", headers=auth_header())
        assert (await client.post("/api/v1/input/begin", json={"x": 5, "y": 5})).json()["accepted"] is True
        assert (await client.post("/api/v1/input/extend", json={"x": 6, "y": 7})).json()["accepted"] is True
        assert (await client.post("/api/v1/input/end")).json() == {"ok": True}
        assert (await client.post("/api/v1/input/extend", json={"x": 8, "y": 9})).json()["accepted"] is False

    @pytest.mark.asyncio
    async def test_empty_stroke_rejected(self, client):
        """A stroke needs at least one point."""
        response = await client.post("/api/v1/input/paths", json={"points": []})
        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_clear(self, client):
        """Clear drops every path."""
        await client.post("/api/v1/control/start", headers=auth_header())
        await client.post("/api/v1/input/paths", json={"points": [[10, 10]]})
        await client.post("/api/v1/input/clear")
        state = (await client.get("/api/v1/state")).json()
        assert state["paths"] == []


class TestAPIRoutes:
    """Tests for API endpoints."""

    @pytest.mark.asyncio
    async def test_state(self, client):
        """GET /state returns the render snapshot."""
        response = await client.get("/api/v1/state")
        assert response.status_code == 200
        data = response.json()
        assert data["state"] == "idle"
        assert data["width"] == 800

    @pytest.mark.asyncio
    async def test_high_score_defaults_to_zero(self, client):
        """Nothing stored reads as zero."""
        response = await client.get("/api/v1/high-score")
        assert response.json() == {"high_score": 0}

    @pytest.mark.asyncio
    async def test_stats_requires_auth(self, client):
        """GET /stats requires authentication."""
        response = await client.get("/api/v1/stats")
        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_stats(self, client):
        """GET /stats reports game, bus and logger counters."""
        response = await client.get("/api/v1/stats", headers=auth_header())
        assert response.status_code == 200
        data = response.json()
        assert data["game"]["state"] == "idle"
        assert "total_published" in data["bus"]
        assert "written" in data["logger"]

    @pytest.mark.asyncio
    async def test_subscribers_requires_auth(self, client):
        """GET /subscribers requires authentication."""
        response = await client.get("/api/v1/subscribers")
        assert response.status_code == 401


class TestUIRoutes:
    """Tests for UI endpoints."""

    @pytest.mark.asyncio
    async def test_index_returns_html(self, client):
        """GET / returns the canvas page."""
        response = await client.get("/")
        assert response.status_code == 200
        assert "<canvas" in response.text
