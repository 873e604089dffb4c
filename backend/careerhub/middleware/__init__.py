"""
Middleware Package

Contains FastAPI middleware for:
- Prometheus metrics collection
- Job engagement counters
"""

from careerhub.middleware.metrics import (
    PrometheusMiddleware,
    setup_metrics,
    REQUEST_LATENCY,
    REQUEST_COUNT,
    ACTIVE_REQUESTS,
    JOB_VIEWS,
    JOB_VIEW_FAILURES,
    JOB_APPLICATIONS,
    LOGIN_ATTEMPTS,
    COMMUNITY_VIEWS,
    BOOKINGS,
)

__all__ = [
    "PrometheusMiddleware",
    "setup_metrics",
    "REQUEST_LATENCY",
    "REQUEST_COUNT",
    "ACTIVE_REQUESTS",
    "JOB_VIEWS",
    "JOB_VIEW_FAILURES",
    "JOB_APPLICATIONS",
    "LOGIN_ATTEMPTS",
    "COMMUNITY_VIEWS",
    "BOOKINGS",
]
