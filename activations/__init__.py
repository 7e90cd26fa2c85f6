"""
Activations module - Device binding for licenses.

This module handles:
- DeviceActivation entity
- Atomic compare-and-bind of device fingerprints
- Activation outcomes
"""
