"""
URL configuration for DigitalLicenseService project.
"""
from django.urls import include, path
from drf_spectacular.views import (
    SpectacularAPIView,
    SpectacularRedocView,
    SpectacularSwaggerView,
)

from core.views import ComponentHealthView, HealthView, ReadyView

urlpatterns = [
    # Health check endpoints
    path("health/", HealthView.as_view(), name="health"),
    path("health/db/", ComponentHealthView.as_view(component="database"), name="health-db"),
    path("health/cache/", ComponentHealthView.as_view(component="cache"), name="health-cache"),
    path("ready/", ReadyView.as_view(), name="ready"),
    # API endpoints
    path("api/v1/licenses/", include("api.v1.licenses.urls")),
    # OpenAPI Schema
    path("api/schema/", SpectacularAPIView.as_view(), name="schema"),
    # Swagger UI
    path(
        "api/docs/",
        SpectacularSwaggerView.as_view(url_name="schema"),
        name="swagger-ui",
    ),
    # ReDoc
    path(
        "api/redoc/",
        SpectacularRedocView.as_view(url_name="schema"),
        name="redoc",
    ),
]
