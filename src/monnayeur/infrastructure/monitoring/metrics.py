"""
Prometheus metrics collection.
"""

from prometheus_client import Counter, Histogram

# ============================================================
# Mint Metrics
# ============================================================

mints_recorded_total = Counter(
    "monnayeur_mints_recorded_total",
    "Total minted assets recorded",
    ["platform"],
)

eligibility_denials_total = Counter(
    "monnayeur_eligibility_denials_total",
    "Total mint attempts refused by the eligibility policy",
    ["reason"],
)

# ============================================================
# Session Metrics
# ============================================================

sessions_created_total = Counter(
    "monnayeur_sessions_created_total",
    "Total bridging sessions created",
)

sessions_swept_total = Counter(
    "monnayeur_sessions_swept_total",
    "Total expired sessions deleted by the sweep",
)

# ============================================================
# Schema Metrics
# ============================================================

migration_steps_total = Counter(
    "monnayeur_migration_steps_total",
    "Schema migration steps by outcome",
    ["step", "outcome"],
)

# ============================================================
# HTTP Metrics
# ============================================================

http_requests_total = Counter(
    "monnayeur_http_requests_total",
    "Total HTTP requests",
    ["method", "endpoint", "status"],
)

http_request_duration_seconds = Histogram(
    "monnayeur_http_request_duration_seconds",
    "HTTP request duration in seconds",
    ["method", "endpoint"],
    buckets=(0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0),
)
