"""Tests for health endpoint."""

from lingoxp import __version__
from lingoxp.web.schemas import HealthResponse


class TestHealth:
    """Tests for GET /health."""

    def test_health_ok(self, client):
        """Health returns ok with the package version."""
        response = client.get("/health")
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "ok"
        assert data["version"] == __version__
        assert "timestamp" in data

    def test_health_is_public(self, client):
        """No token is needed for health."""
        assert client.get("/health", headers={}).status_code == 200

    def test_schema_default_version(self):
        """HealthResponse defaults to the package version."""
        assert HealthResponse().version == __version__
