"""
Prometheus metrics for the license service.

Custom metrics for business logic and performance monitoring.
"""

from prometheus_client import Counter, Histogram

# HTTP metrics
http_requests_total = Counter(
    "http_requests_total",
    "Total HTTP requests",
    ["method", "endpoint", "status_code"],
)

http_request_duration_seconds = Histogram(
    "http_request_duration_seconds",
    "HTTP request duration in seconds",
    ["method", "endpoint"],
    buckets=[0.01, 0.05, 0.1, 0.5, 1.0, 2.0, 5.0, 10.0],
)

# License metrics
licenses_generated_total = Counter(
    "licenses_generated_total",
    "Total license keys generated",
    ["license_type"],
)

license_key_collisions_total = Counter(
    "license_key_collisions_total",
    "License key inserts rejected by the uniqueness constraint",
)

license_validations_total = Counter(
    "license_validations_total",
    "License validations by outcome",
    ["valid", "reason"],
)

license_expirations_total = Counter(
    "license_expirations_total",
    "Licenses transitioned to expired on access",
)

activations_total = Counter(
    "activations_total",
    "Device activation attempts by outcome",
    ["outcome"],
)

downloads_total = Counter(
    "downloads_total",
    "Download attempts by outcome",
    ["outcome"],
)

# Piracy metrics
piracy_alerts_total = Counter(
    "piracy_alerts_total",
    "Piracy alerts recorded",
    ["alert_type", "severity"],
)

piracy_alert_failures_total = Counter(
    "piracy_alert_failures_total",
    "Piracy alerts that could not be persisted",
    ["alert_type"],
)

# Cache metrics
cache_hits_total = Counter(
    "cache_hits_total",
    "Total cache hits",
    ["namespace"],
)

cache_misses_total = Counter(
    "cache_misses_total",
    "Total cache misses",
    ["namespace"],
)
