from decimal import Decimal
from unittest.mock import patch

from django.db import DatabaseError

from modules.inventory.models import InventoryCategory, InventoryItem


class TestHealthCheck:
    def test_health_check_returns_200(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert "timestamp" in data
        assert "services" in data

    def test_health_check_reports_database_status(self, client):
        data = client.get("/health").json()
        assert data["services"]["database"]["status"] == "up"
        assert "response_time_ms" in data["services"]["database"]

    def test_health_check_reports_cache_status(self, client):
        data = client.get("/health").json()
        assert data["services"]["cache"]["status"] == "up"
        assert "response_time_ms" in data["services"]["cache"]

    def test_health_check_reports_record_counts(self, client):
        InventoryItem.objects.create(
            name="Soda Ash", category=InventoryCategory.CHEMICAL, quantity=Decimal("1"), unit="kg"
        )
        data = client.get("/health").json()
        assert data["counts"] == {"orders": 0, "inventory": 1, "staff": 0}

    def test_database_failure_returns_503(self, client):
        with patch("modules.core.views._record_counts", side_effect=DatabaseError("down")):
            response = client.get("/health")
        assert response.status_code == 503
        data = response.json()
        assert data["status"] == "unhealthy"
        assert data["services"]["database"] == {"status": "down"}

    def test_cache_failure_returns_503(self, client):
        with patch("modules.core.views.cache") as cache:
            cache.get.return_value = None
            response = client.get("/health")
        assert response.status_code == 503
        assert response.json()["services"]["cache"] == {"status": "down"}

    def test_health_check_does_not_require_auth(self, client):
        assert client.get("/health").status_code == 200
