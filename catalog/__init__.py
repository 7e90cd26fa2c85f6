"""
Catalog module - read-only view of the digital products being licensed.

This module handles:
- DigitalProduct entity
- Product lookup for license generation and validation
- Product lookup caching
"""
