"""
Value objects shared by the license, activation and piracy apps.

Enum values are the strings stored in the database and sent over the
API.
"""
import re
from dataclasses import dataclass
from enum import Enum

_EMAIL_SHAPE = re.compile(r"^[^@\s]+@[^@\s]+$")


@dataclass(frozen=True)
class Email:
    """Customer email address, kept as given."""

    value: str

    def __post_init__(self):
        if not self.value or not _EMAIL_SHAPE.match(self.value):
            raise ValueError(f"Invalid email address: {self.value!r}")

    def __str__(self) -> str:
        return self.value


class WireEnum(Enum):
    """Enum whose ``str()`` is its stored value."""

    def __str__(self) -> str:
        return self.value


class LicenseStatus(WireEnum):
    """
    Lifecycle state of a license.

    ACTIVE may become EXPIRED (lazily, on access). REVOKED and SUSPENDED
    are terminal and only set by administrative tooling outside this service.
    """

    ACTIVE = "active"
    EXPIRED = "expired"
    REVOKED = "revoked"
    SUSPENDED = "suspended"


class LicenseType(WireEnum):
    """Licensing model of a digital product."""

    SINGLE = "single"
    MULTI = "multi"
    UNLIMITED = "unlimited"


class AlertType(WireEnum):
    KEY_SHARING = "key_sharing"
    EXCESSIVE_DOWNLOADS = "excessive_downloads"
    MULTIPLE_IPS = "multiple_ips"


class AlertSeverity(WireEnum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class ValidationReason(WireEnum):
    """Why a validation request was refused."""

    NOT_FOUND = "not_found"
    EXPIRED = "expired"
    REVOKED = "revoked"
    SUSPENDED = "suspended"
    ACTIVATION_LIMIT_EXCEEDED = "activation_limit_exceeded"
    ACTIVATION_REQUIRED = "activation_required"
    PERSISTENCE_FAILURE = "persistence_failure"

    @classmethod
    def from_status(cls, status: LicenseStatus) -> "ValidationReason":
        """Map a non-active license status to its refusal reason."""
        return {
            LicenseStatus.EXPIRED: cls.EXPIRED,
            LicenseStatus.REVOKED: cls.REVOKED,
            LicenseStatus.SUSPENDED: cls.SUSPENDED,
        }[status]
