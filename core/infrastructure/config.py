"""
Licensing configuration.

Values come from the ``LICENSING`` dict in Django settings and fall back
to the defaults below when a key (or the whole dict) is missing.
"""

from typing import Any

from django.conf import settings

DEFAULTS = {
    "KEY_PREFIX": "DL",
    "MAX_KEY_GENERATION_ATTEMPTS": 10,
    "PERSISTENCE_TIMEOUT_SECONDS": 5.0,
    "DEFAULT_MAX_DOWNLOADS": 5,
    "DEFAULT_MAX_ACTIVATIONS": 1,
    "UNLIMITED_MAX_ACTIVATIONS": 999,
    "PRODUCT_CACHE_TTL_SECONDS": 300,
    "MAX_DISTINCT_DOWNLOAD_IPS": 3,
}


def licensing_setting(name: str) -> Any:
    """
    Read a licensing setting.

    Args:
        name: Setting name (e.g. ``KEY_PREFIX``)

    Returns:
        Configured value, or the default
    """
    if name not in DEFAULTS:
        raise KeyError(f"Unknown licensing setting: {name}")
    configured = getattr(settings, "LICENSING", {}) or {}
    return configured.get(name, DEFAULTS[name])
