"""
Integration tests for health endpoints.
"""

import pytest
from django.urls import reverse


@pytest.mark.integration
class TestHealthEndpoints:
    def test_health(self, client):
        response = client.get(reverse("health"))

        assert response.status_code == 200
        assert response.json() == {"status": "healthy", "service": "digital-license-service"}

    @pytest.mark.django_db
    def test_database(self, client):
        response = client.get(reverse("health-db"))

        assert response.status_code == 200
        assert response.json()["database"] == "connected"

    def test_cache(self, client):
        response = client.get(reverse("health-cache"))

        assert response.status_code == 200

    @pytest.mark.django_db
    def test_ready(self, client):
        response = client.get(reverse("ready"))

        assert response.status_code == 200
        assert response.json()["checks"] == {"database": True, "cache": True}

    def test_correlation_id_is_echoed(self, client):
        response = client.get(reverse("health"), HTTP_X_CORRELATION_ID="corr-123")

        assert response["X-Correlation-ID"] == "corr-123"
        assert response["X-Request-Status"] == "success"

    def test_correlation_id_is_generated(self, client):
        response = client.get(reverse("health"))

        assert response["X-Correlation-ID"]
