"""
PiracyAlert Django ORM model.

This is the infrastructure layer model for piracy alerts.
Domain entities are in piracy.domain.piracy_alert.
"""
import uuid

from django.db import models
from django.utils import timezone


class PiracyAlert(models.Model):
    """
    Immutable record of a license used beyond its quotas.
    """

    ALERT_TYPE_CHOICES = [
        ("key_sharing", "Key Sharing"),
        ("excessive_downloads", "Excessive Downloads"),
        ("multiple_ips", "Multiple IPs"),
    ]

    SEVERITY_CHOICES = [
        ("low", "Low"),
        ("medium", "Medium"),
        ("high", "High"),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    license = models.ForeignKey(
        "licenses.LicenseKey", on_delete=models.CASCADE, related_name="piracy_alerts"
    )
    product = models.ForeignKey(
        "catalog.DigitalProduct", on_delete=models.CASCADE, related_name="piracy_alerts"
    )
    alert_type = models.CharField(max_length=30, choices=ALERT_TYPE_CHOICES)
    severity = models.CharField(max_length=10, choices=SEVERITY_CHOICES)
    details = models.JSONField(default=dict, blank=True)
    created_at = models.DateTimeField(default=timezone.now)

    class Meta:
        db_table = "piracy_alerts"
        ordering = ["created_at"]
        indexes = [
            models.Index(fields=["license", "created_at"]),
            models.Index(fields=["product", "alert_type"]),
        ]

    def __str__(self):
        return f"{self.alert_type} ({self.severity}) - {self.license_id}"
