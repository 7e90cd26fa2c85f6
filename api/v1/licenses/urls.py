"""
URL configuration for license API endpoints.
"""

from django.urls import path

from api.v1.licenses import views

app_name = "licenses"

urlpatterns = [
    path("generate", views.GenerateLicenseView.as_view(), name="generate-license"),
    path("validate", views.ValidateLicenseView.as_view(), name="validate-license"),
    path("download", views.RecordDownloadView.as_view(), name="record-download"),
]
