"""
RecordDownloadCommand.

Command to consume one download from a license's quota.
"""
from dataclasses import dataclass
from typing import Optional


@dataclass
class RecordDownloadCommand:
    """Command to record a download for a license key."""

    key_string: str
    ip_address: Optional[str] = None
