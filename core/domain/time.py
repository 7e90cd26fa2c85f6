"""
Clock used by domain services.

Services take a ``clock`` callable so that tests can pin the time.
"""
from datetime import datetime, timezone


def utc_now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)
