"""
DeviceActivation Django ORM model.

This is the infrastructure layer model for activations.
Domain entities are in activations.domain.activation.
"""
import uuid

from django.db import models
from django.utils import timezone


class DeviceActivation(models.Model):
    """
    A device bound to a license.
    Consumes one of the license's activations.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    license = models.ForeignKey(
        "licenses.LicenseKey",
        on_delete=models.CASCADE,
        related_name="device_activations",
    )
    device_fingerprint = models.TextField()
    activated_at = models.DateTimeField(default=timezone.now)

    class Meta:
        db_table = "device_activations"
        ordering = ["activated_at"]
        constraints = [
            models.UniqueConstraint(
                fields=["license", "device_fingerprint"],
                name="device_activations_unique_fingerprint",
            ),
        ]

    def __str__(self):
        return f"{self.license_id} @ {self.device_fingerprint}"
