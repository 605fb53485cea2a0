"""
Tests for health check endpoints.
"""

import time
from unittest.mock import patch

from sqlalchemy.exc import OperationalError


class TestHealthEndpoints:
    """Test health check endpoints."""

    def test_root_health_check_healthy(self, client):
        """Test root health endpoint against the live test database."""
        response = client.get("/health/")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "ok"
        assert data["db"]["status"] == "ok"
        assert "version" in data
        assert "timestamp" in data

    def test_root_health_check_db_down(self, client):
        """Test health endpoint when database is down."""
        with patch("vidgraph.routes.health.check_database_health") as mock_db:
            mock_db.return_value = {"status": "down", "error": "Connection failed"}

            response = client.get("/health/")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "down"
        assert "error" in data["db"]

    def test_database_health_with_tables(self, client):
        """Test database health endpoint reports row counts."""
        response = client.get("/health/db")

        data = response.json()
        assert data["status"] == "ok"
        assert data["tables"] == {"users": 0, "videos": 0}

    def test_check_database_health_reports_errors(self):
        """A store failure is reported as down instead of raised."""
        with patch("vidgraph.routes.health.get_session") as mock_session:
            mock_session.return_value.__enter__.return_value.execute.side_effect = OperationalError(
                "SELECT 1", {}, Exception("refused")
            )

            from vidgraph.routes.health import check_database_health

            result = check_database_health()

        assert result["status"] == "down"
        assert "Database error" in result["error"]

    def test_root_health_reports_uptime(self, client):
        """Uptime counts from process start."""
        with patch("vidgraph.routes.health.STARTED_AT", time.monotonic() - 120):
            response = client.get("/health/")

        assert response.json()["uptime_seconds"] >= 120
