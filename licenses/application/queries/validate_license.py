"""
ValidateLicenseQuery.

Query to validate a license key, binding the calling device if needed.
"""
from dataclasses import dataclass
from typing import Optional


@dataclass
class ValidateLicenseQuery:
    """Query to validate a license key from a device."""

    key_string: str
    device_fingerprint: Optional[str] = None
