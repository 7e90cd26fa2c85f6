"""
Piracy module - Detection of likely key sharing and abuse.

This module handles:
- PiracyAlert entity
- Threshold-based detection on activation and download overruns
- Alert persistence, isolated from the caller's decision
"""
