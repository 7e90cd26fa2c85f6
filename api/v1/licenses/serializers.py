"""
Serializers for License API endpoints.
"""

from rest_framework import serializers


class CustomSettingsSerializer(serializers.Serializer):
    """Per-order quota overrides."""

    max_downloads = serializers.IntegerField(required=False, min_value=1)
    max_activations = serializers.IntegerField(required=False, min_value=1)


class GenerateLicenseRequestSerializer(serializers.Serializer):
    """Serializer for generate license request."""

    product_id = serializers.UUIDField(required=True)
    customer_email = serializers.EmailField(required=True)
    customer_order_id = serializers.CharField(
        required=False, allow_null=True, allow_blank=True, max_length=255
    )
    custom_settings = CustomSettingsSerializer(required=False)
    owner_id = serializers.UUIDField(
        required=False,
        help_text="Merchant issuing the key; when set it must own the product",
    )


class LicenseKeyResponseSerializer(serializers.Serializer):
    """Serializer for LicenseKeyDTO."""

    id = serializers.UUIDField()
    key_string = serializers.CharField()
    product_id = serializers.UUIDField()
    customer_email = serializers.EmailField()
    customer_order_id = serializers.CharField(allow_null=True)
    status = serializers.CharField()
    max_downloads = serializers.IntegerField()
    download_count = serializers.IntegerField()
    max_activations = serializers.IntegerField()
    activation_count = serializers.IntegerField()
    expires_at = serializers.DateTimeField(allow_null=True)
    created_at = serializers.DateTimeField()


class ValidateLicenseRequestSerializer(serializers.Serializer):
    """Serializer for validate license request."""

    key_string = serializers.CharField(required=True, max_length=100)
    device_fingerprint = serializers.CharField(
        required=False,
        allow_null=True,
        allow_blank=True,
        trim_whitespace=False,
        help_text="Opaque device identifier, compared byte for byte",
    )


class ValidationResultSerializer(serializers.Serializer):
    """
    Serializer for ValidationResultDTO.

    Refusals only carry ``valid`` and ``reason``.
    """

    valid = serializers.BooleanField()
    reason = serializers.CharField(required=False)
    product_name = serializers.CharField(required=False)
    status = serializers.CharField(required=False)
    expires_at = serializers.DateTimeField(required=False, allow_null=True)
    downloads_remaining = serializers.IntegerField(required=False)
    activations_remaining = serializers.IntegerField(required=False)

    def to_representation(self, instance):
        data = super().to_representation(instance)
        if not instance.valid:
            return {"valid": False, "reason": data["reason"]}
        data.pop("reason", None)
        return data


class RecordDownloadRequestSerializer(serializers.Serializer):
    """Serializer for record download request."""

    key_string = serializers.CharField(required=True, max_length=100)


class DownloadResponseSerializer(serializers.Serializer):
    """Serializer for DownloadDTO."""

    license_id = serializers.UUIDField()
    download_count = serializers.IntegerField()
    downloads_remaining = serializers.IntegerField()
    accessed_at = serializers.DateTimeField()
