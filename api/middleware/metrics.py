"""
Prometheus metrics middleware for Signal Radar API.

Exposes /metrics endpoint with request counters, latency histograms,
and scoring metrics (texts classified, signals detected, tier mix).
"""

import logging
import time

from fastapi import Request, Response
from prometheus_client import (
    Counter, Histogram, Gauge,
    generate_latest, CONTENT_TYPE_LATEST,
)
from starlette.middleware.base import BaseHTTPMiddleware

from signal_scoring.alerts import Alert
from signal_scoring.signal_classifier import ClassificationResult

logger = logging.getLogger(__name__)

# Request metrics
REQUEST_COUNT = Counter(
    "signal_radar_http_requests_total",
    "Total HTTP requests",
    ["method", "endpoint", "status_code"],
)
REQUEST_LATENCY = Histogram(
    "signal_radar_http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint"],
    buckets=[0.005, 0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0],
)
ACTIVE_REQUESTS = Gauge(
    "signal_radar_http_active_requests",
    "Currently active HTTP requests",
)

# Scoring metrics
TEXTS_CLASSIFIED = Counter(
    "signal_radar_texts_classified_total",
    "Texts classified",
    ["scheme"],
)
SIGNALS_DETECTED = Counter(
    "signal_radar_signals_detected_total",
    "Classifications that crossed the signal gates",
    ["scheme"],
)
TIER_COUNT = Counter(
    "signal_radar_tier_total",
    "Three-tier classifications by tier",
    ["tier"],
)
SCORE_HIST = Histogram(
    "signal_radar_score",
    "Signal score distribution",
    ["scheme"],
    buckets=[10, 20, 30, 40, 50, 60, 70, 80, 90, 100],
)
ALERTS_SENT = Counter(
    "signal_radar_alerts_sent_total",
    "Alerts accepted by at least one notifier",
    ["alert_type"],
)


def record_classification(result: ClassificationResult):
    """Record one classification result."""
    scheme = result.scheme or "unknown"
    TEXTS_CLASSIFIED.labels(scheme=scheme).inc()
    SCORE_HIST.labels(scheme=scheme).observe(result.score)
    if result.has_signal:
        SIGNALS_DETECTED.labels(scheme=scheme).inc()
    if result.tier is not None:
        TIER_COUNT.labels(tier=result.tier.value).inc()


def record_alert(alert: Alert):
    """Record an alert that went out."""
    if alert.sent_via:
        ALERTS_SENT.labels(alert_type=alert.alert_type.value).inc()


class MetricsMiddleware(BaseHTTPMiddleware):
    """Middleware that records HTTP request metrics."""

    async def dispatch(self, request: Request, call_next):
        ACTIVE_REQUESTS.inc()
        start = time.time()

        try:
            response = await call_next(request)
        except Exception:
            ACTIVE_REQUESTS.dec()
            raise

        duration = time.time() - start
        # Route template keeps /lexicons/{name} as one series
        route = request.scope.get("route")
        endpoint = getattr(route, "path", request.url.path)

        REQUEST_COUNT.labels(
            method=request.method,
            endpoint=endpoint,
            status_code=response.status_code,
        ).inc()
        REQUEST_LATENCY.labels(
            method=request.method,
            endpoint=endpoint,
        ).observe(duration)
        ACTIVE_REQUESTS.dec()

        return response


async def metrics_endpoint(request: Request) -> Response:
    """Prometheus metrics endpoint."""
    return Response(
        content=generate_latest(),
        media_type=CONTENT_TYPE_LATEST,
    )
