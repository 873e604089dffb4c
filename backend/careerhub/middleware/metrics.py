"""
Prometheus Metrics Middleware

Provides request/response metrics for monitoring:
- HTTP request latency
- Request count by endpoint and status
- Active request gauge
- Job engagement counters (views, application clicks)
- Community views and counselor booking outcomes

Usage:
    from careerhub.middleware.metrics import setup_metrics

    # In main.py
    app = FastAPI()
    setup_metrics(app)

Metrics Endpoint:
    GET /metrics - Prometheus-format metrics
"""

import time
import logging
from typing import Callable, Optional

from fastapi import FastAPI, Request, Response
from fastapi.responses import PlainTextResponse
from prometheus_client import (
    Counter,
    Gauge,
    Histogram,
    CONTENT_TYPE_LATEST,
    generate_latest,
    REGISTRY,
)
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.routing import Match

logger = logging.getLogger(__name__)

# ==================== Prometheus Metrics ====================

REQUEST_LATENCY = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency in seconds",
    ["method", "endpoint", "status"],
    buckets=[0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0]
)

REQUEST_COUNT = Counter(
    "http_requests_total",
    "Total HTTP requests",
    ["method", "endpoint", "status"]
)

ACTIVE_REQUESTS = Gauge(
    "http_requests_active",
    "Number of active HTTP requests",
    ["method", "endpoint"]
)

# Job engagement metrics
JOB_VIEWS = Counter(
    "job_views_total",
    "Job detail reads that incremented the view counter"
)

JOB_VIEW_FAILURES = Counter(
    "job_view_increment_failures_total",
    "View counter increments that failed and were skipped"
)

JOB_APPLICATIONS = Counter(
    "job_applications_total",
    "Application clicks recorded against jobs"
)

LOGIN_ATTEMPTS = Counter(
    "login_attempts_total",
    "Login attempts by outcome",
    ["outcome"]  # admin, counselor, failed
)

COMMUNITY_VIEWS = Counter(
    "community_views_total",
    "Community detail reads that incremented the view counter"
)

BOOKINGS = Counter(
    "counselor_bookings_total",
    "Counselor slot bookings by outcome",
    ["outcome"]  # booked, cancelled, unavailable
)


class PrometheusMiddleware(BaseHTTPMiddleware):
    """
    FastAPI middleware for Prometheus metrics collection.

    Records:
    - Request latency
    - Request count by status code
    - Active request count
    """

    async def dispatch(
        self,
        request: Request,
        call_next: Callable
    ) -> Response:
        endpoint = get_endpoint(request)
        method = request.method

        if endpoint == "/metrics":
            return await call_next(request)

        ACTIVE_REQUESTS.labels(method=method, endpoint=endpoint).inc()
        start_time = time.perf_counter()
        status = "500"

        try:
            response = await call_next(request)
            status = str(response.status_code)
        except Exception as e:
            logger.error(f"Request error: {e}")
            raise
        finally:
            duration = time.perf_counter() - start_time

            REQUEST_LATENCY.labels(
                method=method,
                endpoint=endpoint,
                status=status
            ).observe(duration)

            REQUEST_COUNT.labels(
                method=method,
                endpoint=endpoint,
                status=status
            ).inc()

            ACTIVE_REQUESTS.labels(
                method=method,
                endpoint=endpoint
            ).dec()

        return response


def get_endpoint(request: Request) -> str:
    """
    Get normalized endpoint path from request.

    Uses route pattern (e.g., /jobs/{job_id}) instead of
    actual path to avoid high cardinality. Entries of ``app.routes``
    without a ``path`` (included routers on recent FastAPI) are
    searched through their own ``routes`` when they expose them.
    """
    path = _match_routes(request.app.routes, request.scope)
    return path or request.url.path


def _match_routes(routes, scope) -> Optional[str]:
    for route in routes:
        path = getattr(route, "path", None)
        if path is None:
            nested = getattr(route, "routes", None)
            if nested:
                found = _match_routes(nested, scope)
                if found:
                    return found
            continue
        match, _ = route.matches(scope)
        if match == Match.FULL:
            return path
    return None


def metrics_endpoint(request: Request) -> Response:
    """Endpoint handler for Prometheus metrics scraping."""
    return PlainTextResponse(
        content=generate_latest(REGISTRY),
        media_type=CONTENT_TYPE_LATEST
    )


def setup_metrics(app: FastAPI) -> None:
    """
    Configure Prometheus metrics for FastAPI app.

    Args:
        app: FastAPI application instance
    """
    app.add_middleware(PrometheusMiddleware)
    app.add_route("/metrics", metrics_endpoint, methods=["GET"])

    logger.info("Prometheus metrics configured")


# ==================== Helper Functions ====================

def record_job_view() -> None:
    JOB_VIEWS.inc()


def record_job_view_failure() -> None:
    JOB_VIEW_FAILURES.inc()


def record_job_application() -> None:
    JOB_APPLICATIONS.inc()


def record_login(outcome: str) -> None:
    """Record a login attempt outcome: admin, counselor or failed."""
    LOGIN_ATTEMPTS.labels(outcome=outcome).inc()


def record_community_view() -> None:
    COMMUNITY_VIEWS.inc()


def record_booking(outcome: str) -> None:
    BOOKINGS.labels(outcome=outcome).inc()
