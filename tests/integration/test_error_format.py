"""Integration tests for standardized error responses."""

import pytest

pytestmark = pytest.mark.integration


class TestStandardizedErrors:
    def test_auth_error_has_standard_format(self, api_client):
        response = api_client.get("/api/v1/orders/")
        assert response.status_code == 401
        data = response.json()
        assert data["type"] == "client_error"
        assert isinstance(data["errors"], list)
        assert data["errors"]
        assert data["errors"][0]["code"] == "not_authenticated"
        assert data["errors"][0]["attr"] is None

    def test_malformed_json_has_standard_format(self, staff_client):
        response = staff_client.post(
            "/api/v1/orders/", data="{", content_type="application/json"
        )
        assert response.status_code == 400
        data = response.json()
        assert data["type"] == "client_error"
        assert data["errors"][0]["code"] == "parse_error"

    def test_validation_error_has_standard_format(self, staff_client):
        response = staff_client.post("/api/v1/orders/", {}, format="json")
        assert response.status_code == 400
        data = response.json()
        assert data["type"] == "validation_error"
        assert {"code": "required", "detail": "This field is required.", "attr": "items"} in data[
            "errors"
        ]

    def test_permission_error_has_standard_format(self, customer_client):
        response = customer_client.get("/api/v1/dashboard/")
        assert response.status_code == 403
        data = response.json()
        assert data["type"] == "client_error"
        assert data["errors"][0]["code"] == "permission_denied"

    def test_not_found_has_standard_format(self, staff_client):
        response = staff_client.get("/api/v1/orders/track/DYE99999/")
        assert response.status_code == 404
        assert response.json()["errors"][0]["code"] == "not_found"

    def test_conflict_has_standard_format(self, staff_client):
        body = {"name": "Soda Ash", "category": "Chemical", "unit": "kg"}
        staff_client.post("/api/v1/inventory/", body, format="json")
        response = staff_client.post("/api/v1/inventory/", body, format="json")

        assert response.status_code == 409
        assert response.json() == {
            "type": "client_error",
            "errors": [
                {
                    "code": "conflict",
                    "detail": "'Soda Ash' already exists in Chemical.",
                    "attr": None,
                }
            ],
        }
