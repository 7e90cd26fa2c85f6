"""
LicenseKey Django ORM model.

This is the infrastructure layer model for licenses.
Domain entities are in licenses.domain.license_key.
"""
import uuid

from django.db import models
from django.db.models import F, Q
from django.utils import timezone


class LicenseKey(models.Model):
    """
    A license key issued to a customer for one digital product.

    ``activation_count`` mirrors the number of rows in ``device_activations``
    for the license; both are only changed together, in one transaction.
    """

    STATUS_CHOICES = [
        ("active", "Active"),
        ("expired", "Expired"),
        ("revoked", "Revoked"),
        ("suspended", "Suspended"),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    product = models.ForeignKey(
        "catalog.DigitalProduct", on_delete=models.PROTECT, related_name="license_keys"
    )
    customer_email = models.EmailField(db_index=True)
    customer_order_id = models.CharField(max_length=255, null=True, blank=True)
    key_string = models.CharField(max_length=100, unique=True)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default="active")
    max_downloads = models.PositiveIntegerField(default=5)
    download_count = models.PositiveIntegerField(default=0)
    max_activations = models.PositiveIntegerField(default=1)
    activation_count = models.PositiveIntegerField(default=0)
    expires_at = models.DateTimeField(null=True, blank=True)
    last_accessed_at = models.DateTimeField(null=True, blank=True)
    download_ip_addresses = models.JSONField(default=list, blank=True)
    created_at = models.DateTimeField(default=timezone.now)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "license_keys"
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["product", "status"]),
            models.Index(fields=["customer_email", "product"]),
        ]
        constraints = [
            models.CheckConstraint(
                condition=Q(activation_count__lte=F("max_activations")),
                name="license_keys_activations_within_quota",
            ),
            models.CheckConstraint(
                condition=Q(download_count__lte=F("max_downloads")),
                name="license_keys_downloads_within_quota",
            ),
        ]

    def __str__(self):
        return self.key_string
