"""
Domain exceptions.

Each exception carries a human-readable ``message`` and a machine-readable
``code``; the API returns both. Subclasses set the defaults as class
attributes.
"""
from typing import Optional


class DomainException(Exception):
    """Base exception for all domain exceptions."""

    code: Optional[str] = None
    default_message = "Domain error"

    def __init__(self, message: Optional[str] = None, code: Optional[str] = None):
        """
        Args:
            message: Human-readable error message (class default if omitted)
            code: Machine-readable error code (class default if omitted)
        """
        self.message = message or self.default_message
        self.code = code or self.code or type(self).__name__
        super().__init__(self.message)


class LicenseException(DomainException):
    """Base exception for license errors."""


class LicenseNotFoundError(LicenseException):
    code = "LICENSE_NOT_FOUND"
    default_message = "License not found"


class LicenseExpiredError(LicenseException):
    code = "LICENSE_EXPIRED"
    default_message = "License has expired"


class LicenseRevokedError(LicenseException):
    code = "LICENSE_REVOKED"
    default_message = "License is revoked"


class LicenseSuspendedError(LicenseException):
    code = "LICENSE_SUSPENDED"
    default_message = "License is suspended"


class ActivationLimitExceededError(LicenseException):
    """The license has no device activations left."""

    code = "ACTIVATION_LIMIT_EXCEEDED"
    default_message = "Activation limit exceeded"


class DownloadLimitExceededError(LicenseException):
    """The license has no downloads left."""

    code = "DOWNLOAD_LIMIT_EXCEEDED"
    default_message = "Download limit exceeded"


class KeyspaceExhaustedError(LicenseException):
    """Every key generated for an issuance collided with a stored key."""

    code = "KEYSPACE_EXHAUSTED"
    default_message = "Could not generate a unique license key"


class DuplicateLicenseKeyError(LicenseException):
    """
    Raised by a store when an insert violates key string uniqueness.

    Internal to issuance: the key generator catches it and retries.
    """

    code = "DUPLICATE_LICENSE_KEY"
    default_message = "License key already exists"


class InvalidCustomerEmailError(DomainException):
    """The customer email on an issuance request is malformed."""

    code = "INVALID_CUSTOMER_EMAIL"
    default_message = "Invalid customer email"


class ProductNotFoundError(DomainException):
    """The product does not exist, or is not visible to the caller."""

    code = "PRODUCT_NOT_FOUND"
    default_message = "Product not found"


class UnauthorizedError(DomainException):
    code = "UNAUTHORIZED"
    default_message = "Unauthorized"


class PersistenceFailureError(DomainException):
    """The store failed or did not answer in time."""

    code = "PERSISTENCE_FAILURE"
    default_message = "Persistence failure"
