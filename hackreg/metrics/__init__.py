# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""Prometheus metrics for the registration service."""
from prometheus_client import Counter, Histogram

REGISTRATIONS = Counter(
    "registrations_total", "Team registration attempts by outcome", ["outcome"]
)
REGISTERED_MEMBERS = Counter(
    "registered_members_total", "Members persisted across all teams"
)
REGISTRATION_PROCESSING = Histogram(
    "registration_processing_seconds",
    "Time to process a registration request end-to-end",
    buckets=[0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0],
)
VERIFICATIONS = Counter(
    "verifications_total", "Human-verification checks", ["result"]
)
EMAILS_SENT = Counter(
    "emails_sent_total", "Registration emails processed", ["kind", "status"]
)
COMPENSATING_DELETES = Counter(
    "compensating_deletes_total", "Team rows rolled back after a member insert failed", ["status"]
)
PRE_REGISTRATIONS = Counter(
    "pre_registrations_total", "Interest-list submissions", ["status"]
)
REQUEST_COUNT = Counter(
    "http_requests_total", "Total HTTP requests", ["method", "endpoint", "status"]
)
REQUEST_LATENCY = Histogram(
    "http_request_duration_seconds", "HTTP request latency", ["method", "endpoint"]
)
HTTP_ERRORS = Counter(
    "http_errors_total", "Total HTTP errors", ["method", "endpoint", "status"]
)
