"""
License API views.

These endpoints are called by the commerce platform and by licensed
software to:
- Generate a license key when an order is paid
- Validate a license key from a device
- Record a download against a license's quota
"""

from typing import Optional

from asgiref.sync import async_to_sync
from drf_spectacular.utils import extend_schema
from rest_framework import status
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView

from activations.domain.services import ActivationTracker
from activations.infrastructure.repositories.django_activation_repository import (
    DjangoActivationRepository,
)
from api.v1.licenses.serializers import (
    DownloadResponseSerializer,
    GenerateLicenseRequestSerializer,
    LicenseKeyResponseSerializer,
    RecordDownloadRequestSerializer,
    ValidateLicenseRequestSerializer,
    ValidationResultSerializer,
)
from catalog.infrastructure.repositories.cached_digital_product_repository import (
    CachedDigitalProductRepository,
)
from catalog.infrastructure.repositories.django_digital_product_repository import (
    DjangoDigitalProductRepository,
)
from core.infrastructure.events import event_bus
from core.instrumentation import Status, StatusCode, get_tracer
from licenses.application.commands.generate_license import GenerateLicenseCommand
from licenses.application.commands.record_download import RecordDownloadCommand
from licenses.application.handlers.generate_license_handler import GenerateLicenseHandler
from licenses.application.handlers.record_download_handler import RecordDownloadHandler
from licenses.application.handlers.validate_license_handler import ValidateLicenseHandler
from licenses.application.queries.validate_license import ValidateLicenseQuery
from licenses.domain.services import CustomLicenseSettings
from licenses.infrastructure.repositories.django_license_key_repository import (
    DjangoLicenseKeyRepository,
)
from piracy.domain.services import PiracyDetector
from piracy.infrastructure.repositories.django_piracy_alert_repository import (
    DjangoPiracyAlertRepository,
)

# Initialize repositories (in production, use DI container)
_license_key_repo = DjangoLicenseKeyRepository()
_activation_repo = DjangoActivationRepository()
_piracy_alert_repo = DjangoPiracyAlertRepository()
_product_repo = DjangoDigitalProductRepository()

tracer = get_tracer(__name__)


def _cached_product_repo() -> CachedDigitalProductRepository:
    return CachedDigitalProductRepository(_product_repo)


def _piracy_detector() -> PiracyDetector:
    return PiracyDetector(_piracy_alert_repo, event_bus=event_bus)


def client_ip(request: Request) -> Optional[str]:
    """Client address, preferring the first X-Forwarded-For hop."""
    forwarded = request.META.get("HTTP_X_FORWARDED_FOR")
    if forwarded:
        return forwarded.split(",")[0].strip() or None
    return request.META.get("HTTP_X_REAL_IP") or request.META.get("REMOTE_ADDR") or None


class GenerateLicenseView(APIView):
    """View for generating license keys."""

    @extend_schema(
        operation_id="generate_license",
        summary="Generate License Key",
        description=(
            "Issue a license key for a purchased product. Quotas come from the "
            "product unless overridden in custom_settings."
        ),
        tags=["Licenses"],
        request=GenerateLicenseRequestSerializer,
        responses={
            201: LicenseKeyResponseSerializer,
            400: {"description": "Bad Request"},
            404: {"description": "Product not found"},
            503: {"description": "No unique key could be generated, or the store failed"},
        },
    )
    def post(self, request: Request) -> Response:
        """Generate a license key."""
        return async_to_sync(self._handle_generate)(request)

    async def _handle_generate(self, request: Request) -> Response:
        """Async handler for generate license."""
        with tracer.start_as_current_span("generate_license") as span:
            span.set_attribute("operation", "generate_license")

            serializer = GenerateLicenseRequestSerializer(data=request.data)
            if not serializer.is_valid():
                span.set_attribute("error", "validation_failed")
                span.set_status(Status(StatusCode.ERROR, "Validation failed"))
                return Response({"error": serializer.errors}, status=status.HTTP_400_BAD_REQUEST)

            data = serializer.validated_data
            span.set_attribute("product.id", str(data["product_id"]))

            handler = GenerateLicenseHandler(
                product_repository=_cached_product_repo(),
                license_key_repository=_license_key_repo,
            )
            command = GenerateLicenseCommand(
                product_id=data["product_id"],
                customer_email=data["customer_email"],
                customer_order_id=data.get("customer_order_id") or None,
                custom_settings=CustomLicenseSettings(**data.get("custom_settings", {})),
                owner_id=data.get("owner_id"),
            )

            result = await handler.handle(command)

            span.set_attribute("license.id", str(result.id))
            span.set_status(Status(StatusCode.OK))
            return Response(
                LicenseKeyResponseSerializer(result).data, status=status.HTTP_201_CREATED
            )


class ValidateLicenseView(APIView):
    """View for validating license keys."""

    @extend_schema(
        operation_id="validate_license",
        summary="Validate License Key",
        description=(
            "Check whether a license key may be used from a device. The first "
            "validation from a new device binds it, if the product requires "
            "activation. Refusals are answered with 200 and valid=false; the "
            "reason field says why."
        ),
        tags=["Licenses"],
        request=ValidateLicenseRequestSerializer,
        responses={
            200: ValidationResultSerializer,
            400: {"description": "Bad Request"},
        },
    )
    def post(self, request: Request) -> Response:
        """Validate a license key."""
        return async_to_sync(self._handle_validate)(request)

    async def _handle_validate(self, request: Request) -> Response:
        """Async handler for validate license."""
        with tracer.start_as_current_span("validate_license") as span:
            span.set_attribute("operation", "validate_license")

            serializer = ValidateLicenseRequestSerializer(data=request.data)
            if not serializer.is_valid():
                span.set_attribute("error", "validation_failed")
                span.set_status(Status(StatusCode.ERROR, "Validation failed"))
                return Response({"error": serializer.errors}, status=status.HTTP_400_BAD_REQUEST)

            handler = ValidateLicenseHandler(
                license_key_repository=_license_key_repo,
                product_repository=_cached_product_repo(),
                activation_tracker=ActivationTracker(_activation_repo),
                piracy_detector=_piracy_detector(),
            )
            query = ValidateLicenseQuery(
                key_string=serializer.validated_data["key_string"],
                device_fingerprint=serializer.validated_data.get("device_fingerprint") or None,
            )

            result = await handler.handle(query)

            span.set_attribute("license.valid", result.valid)
            if result.reason:
                span.set_attribute("license.reason", result.reason)
            span.set_status(Status(StatusCode.OK))
            return Response(ValidationResultSerializer(result).data, status=status.HTTP_200_OK)


class RecordDownloadView(APIView):
    """View for recording downloads."""

    @extend_schema(
        operation_id="record_download",
        summary="Record Download",
        description="Consume one download from the license's download quota.",
        tags=["Licenses"],
        request=RecordDownloadRequestSerializer,
        responses={
            200: DownloadResponseSerializer,
            400: {"description": "Bad Request"},
            403: {"description": "License not active, or download limit reached"},
            404: {"description": "License key not found"},
            503: {"description": "The store failed"},
        },
    )
    def post(self, request: Request) -> Response:
        """Record a download."""
        return async_to_sync(self._handle_download)(request)

    async def _handle_download(self, request: Request) -> Response:
        """Async handler for record download."""
        with tracer.start_as_current_span("record_download") as span:
            span.set_attribute("operation", "record_download")

            serializer = RecordDownloadRequestSerializer(data=request.data)
            if not serializer.is_valid():
                span.set_attribute("error", "validation_failed")
                span.set_status(Status(StatusCode.ERROR, "Validation failed"))
                return Response({"error": serializer.errors}, status=status.HTTP_400_BAD_REQUEST)

            handler = RecordDownloadHandler(
                license_key_repository=_license_key_repo,
                piracy_detector=_piracy_detector(),
            )
            result = await handler.handle(
                RecordDownloadCommand(
                    key_string=serializer.validated_data["key_string"],
                    ip_address=client_ip(request),
                )
            )

            span.set_attribute("license.id", str(result.license_id))
            span.set_status(Status(StatusCode.OK))
            return Response(DownloadResponseSerializer(result).data, status=status.HTTP_200_OK)
