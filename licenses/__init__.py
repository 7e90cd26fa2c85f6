"""
Licenses module - License key issuance, validation and downloads.

This module handles:
- LicenseKey entity and domain logic
- Key generation with collision retry
- Lazy expiration
- License validation and download quota
"""
