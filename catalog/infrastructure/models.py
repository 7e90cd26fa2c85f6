"""
DigitalProduct Django ORM model.

This is the infrastructure layer model for the product catalog.
Domain entities are in catalog.domain.digital_product.
"""
import uuid

from django.db import models


class DigitalProduct(models.Model):
    """
    A digital product sold by a merchant (e-book, plugin, template...).
    """

    LICENSE_TYPE_CHOICES = [
        ("single", "Single"),
        ("multi", "Multi"),
        ("unlimited", "Unlimited"),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    owner_id = models.UUIDField(db_index=True, help_text="Merchant that sells the product")
    name = models.CharField(max_length=255)
    license_type = models.CharField(max_length=20, choices=LICENSE_TYPE_CHOICES, default="single")
    download_limit = models.PositiveIntegerField(null=True, blank=True, default=5)
    access_duration_days = models.PositiveIntegerField(
        null=True, blank=True, help_text="Empty for perpetual access"
    )
    requires_activation = models.BooleanField(default=False)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "digital_products"
        ordering = ["name"]
        indexes = [
            models.Index(fields=["owner_id", "is_active"]),
        ]

    def __str__(self):
        return self.name
