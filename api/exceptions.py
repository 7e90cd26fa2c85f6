"""
REST error mapping.

Every error leaves the API as ``{"error": {"code": ..., "message": ...}}``
with a status chosen from the domain exception type.
"""

import logging
from typing import Any, Dict, Optional

from django.http import Http404
from rest_framework import status
from rest_framework.exceptions import APIException
from rest_framework.response import Response
from rest_framework.views import exception_handler

from core.domain.exceptions import (
    ActivationLimitExceededError,
    DomainException,
    DownloadLimitExceededError,
    KeyspaceExhaustedError,
    LicenseExpiredError,
    LicenseNotFoundError,
    LicenseRevokedError,
    LicenseSuspendedError,
    PersistenceFailureError,
    ProductNotFoundError,
    UnauthorizedError,
)

logger = logging.getLogger(__name__)

DOMAIN_STATUS_CODES = (
    ((LicenseNotFoundError, ProductNotFoundError), status.HTTP_404_NOT_FOUND),
    ((UnauthorizedError,), status.HTTP_401_UNAUTHORIZED),
    (
        (
            LicenseExpiredError,
            LicenseRevokedError,
            LicenseSuspendedError,
            ActivationLimitExceededError,
            DownloadLimitExceededError,
        ),
        status.HTTP_403_FORBIDDEN,
    ),
    ((KeyspaceExhaustedError, PersistenceFailureError), status.HTTP_503_SERVICE_UNAVAILABLE),
)


def domain_status_code(exc: DomainException) -> int:
    """HTTP status for a domain exception; anything unmapped is a bad request."""
    for exception_types, status_code in DOMAIN_STATUS_CODES:
        if isinstance(exc, exception_types):
            return status_code
    return status.HTTP_400_BAD_REQUEST


def error_response(
    code: str, message: Any, status_code: int, trace_id: Optional[str] = None
) -> Response:
    response = Response({"error": {"code": code, "message": message}}, status=status_code)
    if trace_id:
        response["X-Trace-ID"] = trace_id
    return response


def _trace_id(context: Dict[str, Any]) -> Optional[str]:
    request = context.get("request")
    if request is None:
        return None
    return getattr(request, "trace_id", None) or getattr(request, "correlation_id", None)


def custom_exception_handler(exc: Exception, context: Dict[str, Any]) -> Response:
    """DRF ``EXCEPTION_HANDLER`` for the license API."""
    trace_id = _trace_id(context)

    if isinstance(exc, DomainException):
        status_code = domain_status_code(exc)
        level = logging.ERROR if status_code >= 500 else logging.WARNING
        logger.log(level, "%s: %s", exc.code, exc.message, extra={"trace_id": trace_id})
        return error_response(exc.code, exc.message, status_code, trace_id)

    if isinstance(exc, APIException):
        drf_response = exception_handler(exc, context)
        detail = drf_response.data if drf_response is not None else exc.default_detail
        if isinstance(detail, dict) and "detail" in detail:
            detail = detail["detail"]
        return error_response(
            str(exc.default_code).upper().replace("-", "_"),
            detail,
            exc.status_code,
            trace_id,
        )

    if isinstance(exc, Http404):
        return error_response("NOT_FOUND", "Resource not found", 404, trace_id)

    logger.error("Unhandled error: %s", exc, extra={"trace_id": trace_id}, exc_info=True)
    return error_response(
        "INTERNAL_ERROR",
        "An internal error occurred",
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        trace_id,
    )
