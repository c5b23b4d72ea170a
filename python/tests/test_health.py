"""Tests for the health endpoint.

The health endpoint is a liveness check that:
- Does not require authentication
- Does not touch the database
- Always returns 200 if the process is running
"""

from fastapi.testclient import TestClient


class TestHealthEndpoint:
    """Tests for GET /health"""

    def test_health_returns_200(self, public_client: TestClient):
        response = public_client.get("/health")
        assert response.status_code == 200

    def test_health_returns_correct_envelope(self, public_client: TestClient):
        data = public_client.get("/health").json()

        assert data["status"] == 200
        assert data["data"] == {"status": "ok"}

    def test_health_is_public_with_auth_middleware(self, client: TestClient):
        """Health does not require a token even when auth middleware runs."""
        response = client.get("/health")
        assert response.status_code == 200
