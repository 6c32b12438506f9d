"""Tests for health and root endpoints."""

from unittest.mock import AsyncMock, MagicMock

from pymongo.errors import ServerSelectionTimeoutError

from notehub.database import Database


def _client(ping: AsyncMock) -> MagicMock:
    client = MagicMock()
    client.admin.command = ping
    return client


class TestHealthEndpoints:
    """Test health endpoints."""

    def test_root(self, api_client):
        """Test root endpoint."""
        response = api_client.get("/")

        assert response.status_code == 200
        assert response.json()["message"] == "Welcome to Notehub API"

    def test_health(self, api_client):
        """Test liveness does not depend on the database."""
        response = api_client.get("/health")

        assert response.status_code == 200
        assert response.json() == {"status": "healthy", "service": "notehub-api"}

    def test_ready_without_connection(self, api_client, monkeypatch):
        """Test readiness fails before the database is connected."""
        monkeypatch.setattr(Database, "client", None)

        response = api_client.get("/health/ready")

        assert response.status_code == 503
        assert response.json()["database"] == "disconnected"

    def test_ready_when_ping_succeeds(self, api_client, monkeypatch):
        """Test readiness reports the connected store and transaction mode."""
        ping = AsyncMock(return_value={"ok": 1.0})
        monkeypatch.setattr(Database, "client", _client(ping))
        monkeypatch.setattr(Database, "use_transactions", False)

        response = api_client.get("/health/ready")

        assert response.status_code == 200
        assert response.json() == {
            "status": "ready",
            "service": "notehub-api",
            "database": "connected",
            "transactions": False,
        }
        ping.assert_awaited_once_with("ping")

    def test_ready_when_ping_fails(self, api_client, monkeypatch):
        """Test readiness reports an unreachable store."""
        ping = AsyncMock(side_effect=ServerSelectionTimeoutError("no servers"))
        monkeypatch.setattr(Database, "client", _client(ping))

        response = api_client.get("/health/ready")

        assert response.status_code == 503
        assert response.json()["database"] == "unreachable"
