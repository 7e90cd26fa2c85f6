"""
Shared kernel of the license service.

Holds what every app depends on: domain base types and exceptions, the
event bus, cache and persistence helpers, configuration lookup, metrics,
tracing setup and the request middleware.
"""
